"""
Training Block Generator

Orchestrates generation of a mesocycle's workouts and sets:

    1. Load the plan days with their exercises
    2. Materialize 7 weeks of workouts and sets
    3. Remove anything left by an earlier failed attempt
    4. Commit the records through BatchedWriter

Generation is all-or-retry: a failed batch leaves a partial block that the
next attempt clears in step 3.

Usage:
    generator = TrainingBlockGenerator()
    result = generator.generate(db, mesocycle)
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from models import Mesocycle, PlanDay, PlanDayExercise, Workout, WorkoutSet
from core.config import settings

from .batch_writer import BatchedWriter
from .materializer import TrainingBlockMaterializer

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    mesocycle_id: str
    workouts: int
    sets: int
    batches: int
    purged_workouts: int = 0


class TrainingBlockGenerator:
    def __init__(
        self,
        materializer: Optional[TrainingBlockMaterializer] = None,
        batch_limit: Optional[int] = None,
    ):
        self.materializer = materializer or TrainingBlockMaterializer()
        self.batch_limit = batch_limit or settings.WRITE_BATCH_LIMIT

    def load_plan_days(self, db: Session, plan_id) -> List[PlanDay]:
        stmt = (
            select(PlanDay)
            .where(PlanDay.plan_id == plan_id)
            .options(selectinload(PlanDay.exercises).selectinload(PlanDayExercise.exercise))
            .order_by(PlanDay.sort_order, PlanDay.day_of_week)
        )
        return list(db.scalars(stmt))

    def purge(self, db: Session, mesocycle_id) -> int:
        """Delete workouts (and their sets) already stored for a mesocycle."""
        workout_ids = select(Workout.id).where(Workout.mesocycle_id == mesocycle_id)
        existing = len(db.scalars(workout_ids).all())
        if existing:
            db.execute(delete(WorkoutSet).where(WorkoutSet.workout_id.in_(workout_ids)))
            db.execute(delete(Workout).where(Workout.mesocycle_id == mesocycle_id))
            db.commit()
            logger.warning(f"Purged {existing} workouts from earlier generation of mesocycle {mesocycle_id}")
        return existing

    def generate(self, db: Session, mesocycle: Mesocycle) -> GenerationResult:
        plan_days = self.load_plan_days(db, mesocycle.plan_id)
        block = self.materializer.materialize(mesocycle, plan_days)

        purged = self.purge(db, mesocycle.id)
        summary = BatchedWriter(db, self.batch_limit).write(block.records)

        logger.info(
            "Generated training block",
            extra={"extra_fields": {
                "mesocycle_id": str(mesocycle.id),
                "workouts": len(block.workouts),
                "sets": len(block.sets),
                "batches": summary.batches,
            }},
        )
        return GenerationResult(
            mesocycle_id=str(mesocycle.id),
            workouts=len(block.workouts),
            sets=len(block.sets),
            batches=summary.batches,
            purged_workouts=purged,
        )
