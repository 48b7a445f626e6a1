"""
Mesocycle Service

Lifecycle of a training block: create (pending) -> start (generates the
workouts and sets, becomes active) -> complete or cancel.

Only one mesocycle may be active at a time. Cancelling keeps every workout
and logged set.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError, TrainingBlockWriteError, ValidationError
from models import Mesocycle, Plan, PlanDay, Workout, WorkoutSet
from schemas import MesocycleWithDetails, WeekSummary, WorkoutSummary
from services.training_block import (
    DELOAD_WEEK_NUMBER,
    MESOCYCLE_WEEKS,
    MesocycleStatus,
    SetStatus,
    TrainingBlockGenerator,
    WorkoutStatus,
)

logger = logging.getLogger(__name__)


class MesocycleService:
    def __init__(self, db: Session, generator: Optional[TrainingBlockGenerator] = None):
        self.db = db
        self.generator = generator or TrainingBlockGenerator()

    def _get(self, mesocycle_id: UUID) -> Mesocycle:
        mesocycle = self.db.get(Mesocycle, mesocycle_id)
        if mesocycle is None:
            raise NotFoundError("Mesocycle", mesocycle_id)
        return mesocycle

    def list(self) -> List[Mesocycle]:
        stmt = select(Mesocycle).order_by(Mesocycle.start_date.desc(), Mesocycle.created_at.desc())
        return list(self.db.scalars(stmt))

    def get_active_mesocycle(self) -> Optional[Mesocycle]:
        stmt = select(Mesocycle).where(Mesocycle.status == MesocycleStatus.ACTIVE.value)
        return self.db.scalars(stmt).first()

    def get_active(self) -> Optional[MesocycleWithDetails]:
        mesocycle = self.get_active_mesocycle()
        if mesocycle is None:
            return None
        return self.get_by_id(mesocycle.id)

    def get_by_id(self, mesocycle_id: UUID) -> Optional[MesocycleWithDetails]:
        mesocycle = self.db.get(Mesocycle, mesocycle_id)
        if mesocycle is None:
            return None

        plan = self.db.get(Plan, mesocycle.plan_id)
        days: Dict[UUID, PlanDay] = {
            d.id: d for d in self.db.scalars(select(PlanDay).where(PlanDay.plan_id == mesocycle.plan_id))
        }

        workouts = list(self.db.scalars(
            select(Workout)
            .where(Workout.mesocycle_id == mesocycle.id)
            .order_by(Workout.week_number, Workout.scheduled_date)
        ))

        set_stats = self._set_stats([w.id for w in workouts])

        by_week: Dict[int, List[WorkoutSummary]] = defaultdict(list)
        for w in workouts:
            day = days.get(w.plan_day_id)
            exercises, total, completed = set_stats.get(w.id, (0, 0, 0))
            by_week[w.week_number].append(WorkoutSummary(
                id=w.id,
                plan_day_id=w.plan_day_id,
                plan_day_name=day.name if day else "Unknown",
                day_of_week=day.day_of_week if day else 0,
                week_number=w.week_number,
                scheduled_date=w.scheduled_date,
                status=w.status,
                completed_at=w.completed_at,
                exercise_count=exercises,
                set_count=total,
                completed_set_count=completed,
            ))

        weeks = []
        for week_number in range(1, MESOCYCLE_WEEKS + 1):
            week_workouts = by_week.get(week_number, [])
            weeks.append(WeekSummary(
                week_number=week_number,
                is_deload=week_number == DELOAD_WEEK_NUMBER,
                workouts=week_workouts,
                total_workouts=len(week_workouts),
                completed_workouts=sum(1 for w in week_workouts if w.status == WorkoutStatus.COMPLETED.value),
                skipped_workouts=sum(1 for w in week_workouts if w.status == WorkoutStatus.SKIPPED.value),
            ))

        return MesocycleWithDetails(
            id=mesocycle.id,
            plan_id=mesocycle.plan_id,
            start_date=mesocycle.start_date,
            current_week=mesocycle.current_week,
            status=mesocycle.status,
            created_at=mesocycle.created_at,
            updated_at=mesocycle.updated_at,
            plan_name=plan.name if plan else "Unknown",
            weeks=weeks,
            total_workouts=len(workouts),
            completed_workouts=sum(1 for w in workouts if w.status == WorkoutStatus.COMPLETED.value),
        )

    def _set_stats(self, workout_ids: List[UUID]) -> Dict[UUID, tuple]:
        """workout_id -> (exercise_count, set_count, completed_set_count)"""
        if not workout_ids:
            return {}
        rows = self.db.execute(
            select(WorkoutSet.workout_id, WorkoutSet.exercise_id, WorkoutSet.status, func.count())
            .where(WorkoutSet.workout_id.in_(workout_ids))
            .group_by(WorkoutSet.workout_id, WorkoutSet.exercise_id, WorkoutSet.status)
        ).all()

        exercises: Dict[UUID, set] = defaultdict(set)
        totals: Dict[UUID, int] = defaultdict(int)
        completed: Dict[UUID, int] = defaultdict(int)
        for workout_id, exercise_id, status, count in rows:
            exercises[workout_id].add(exercise_id)
            totals[workout_id] += count
            if status == SetStatus.COMPLETED.value:
                completed[workout_id] += count
        return {wid: (len(exercises[wid]), totals[wid], completed[wid]) for wid in totals}

    def create(self, plan_id: UUID, start_date: date) -> Mesocycle:
        plan = self.db.get(Plan, plan_id)
        if plan is None:
            raise NotFoundError("Plan", plan_id)

        day_count = self.db.scalar(select(func.count()).select_from(PlanDay).where(PlanDay.plan_id == plan_id))
        if not day_count:
            raise ValidationError("Plan has no workout days configured")

        mesocycle = Mesocycle(
            plan_id=plan_id,
            start_date=start_date,
            current_week=1,
            status=MesocycleStatus.PENDING.value,
        )
        self.db.add(mesocycle)
        self.db.flush()
        logger.info(f"Created mesocycle {mesocycle.id} for plan {plan_id}")
        return mesocycle

    def validate_startable(self, mesocycle: Mesocycle) -> None:
        if mesocycle.status != MesocycleStatus.PENDING.value:
            raise ValidationError("Only pending mesocycles can be started")

        active = self.get_active_mesocycle()
        if active is not None and active.id != mesocycle.id:
            raise ConflictError("An active mesocycle already exists")

    def get_pending_for_start(self, mesocycle_id: UUID) -> Mesocycle:
        mesocycle = self._get(mesocycle_id)
        self.validate_startable(mesocycle)
        return mesocycle

    def start(self, mesocycle_id: UUID) -> Mesocycle:
        mesocycle = self.get_pending_for_start(mesocycle_id)

        self.generator.generate(self.db, mesocycle)
        return self.activate(mesocycle)

    def activate(self, mesocycle: Mesocycle) -> Mesocycle:
        mesocycle.status = MesocycleStatus.ACTIVE.value
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to activate mesocycle {mesocycle.id}: {e}", exc_info=True)
            raise TrainingBlockWriteError(f"Failed to start mesocycle with id {mesocycle.id}") from e
        logger.info(f"Started mesocycle {mesocycle.id}")
        return mesocycle

    def complete(self, mesocycle_id: UUID) -> Mesocycle:
        return self._finish(mesocycle_id, MesocycleStatus.COMPLETED)

    def cancel(self, mesocycle_id: UUID) -> Mesocycle:
        return self._finish(mesocycle_id, MesocycleStatus.CANCELLED)

    def _finish(self, mesocycle_id: UUID, status: MesocycleStatus) -> Mesocycle:
        mesocycle = self._get(mesocycle_id)
        if mesocycle.status != MesocycleStatus.ACTIVE.value:
            raise ValidationError("Mesocycle is not active")
        mesocycle.status = status.value
        self.db.flush()
        logger.info(f"Mesocycle {mesocycle.id} -> {status.value}")
        return mesocycle
