"""
Training Block Materializer

Walks plan days x 7 weeks x exercises x sets and produces unsaved Workout
and WorkoutSet rows with planned targets. Nothing touches the database here;
the caller hands the records to BatchedWriter.

Records come out ordered so that every workout precedes its sets.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Sequence

from models import Mesocycle, PlanDay, Workout, WorkoutSet
from core.exceptions import NotFoundError

from .constants import DELOAD_WEEK_NUMBER, MESOCYCLE_WEEKS, SetStatus, WorkoutStatus
from .progression import ExerciseProgression, ProgressionCalculator

logger = logging.getLogger(__name__)


@dataclass
class MaterializedBlock:
    workouts: List[Workout] = field(default_factory=list)
    sets: List[WorkoutSet] = field(default_factory=list)
    records: List[object] = field(default_factory=list)

    @property
    def operation_count(self) -> int:
        return len(self.records)


def sunday_based_weekday(d: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def scheduled_date_for(start_date: date, week_number: int, day_of_week: int) -> date:
    """First date on or after the start of week_number that falls on day_of_week."""
    week_start = start_date + timedelta(days=7 * (week_number - 1))
    offset = (day_of_week - sunday_based_weekday(week_start)) % 7
    return week_start + timedelta(days=offset)


def progression_for(plan_exercise, weight_increment: float) -> ExerciseProgression:
    return ExerciseProgression(
        exercise_id=plan_exercise.exercise_id,
        plan_exercise_id=plan_exercise.id,
        base_weight=plan_exercise.weight,
        base_reps=plan_exercise.reps,
        base_sets=plan_exercise.sets,
        weight_increment=weight_increment,
        min_reps=plan_exercise.min_reps,
        max_reps=plan_exercise.max_reps,
    )


class TrainingBlockMaterializer:
    """Turns a plan template into the workouts and sets of one mesocycle."""

    def __init__(self, calculator: ProgressionCalculator = None):
        self.calculator = calculator or ProgressionCalculator()

    def materialize(self, mesocycle: Mesocycle, plan_days: Sequence[PlanDay]) -> MaterializedBlock:
        days = sorted(plan_days, key=lambda d: (d.sort_order, d.day_of_week))

        # Validate every exercise reference before producing anything
        progressions = {}
        for day in days:
            for pde in day.exercises:
                if pde.exercise is None:
                    raise NotFoundError("Exercise", pde.exercise_id)
                progressions[pde.id] = progression_for(pde, pde.exercise.weight_increment)

        block = MaterializedBlock()
        for week_number in range(1, MESOCYCLE_WEEKS + 1):
            for day in days:
                workout = Workout(
                    id=uuid.uuid4(),
                    mesocycle_id=mesocycle.id,
                    plan_day_id=day.id,
                    week_number=week_number,
                    scheduled_date=scheduled_date_for(mesocycle.start_date, week_number, day.day_of_week),
                    status=WorkoutStatus.PENDING.value,
                )
                block.workouts.append(workout)
                block.records.append(workout)

                for pde in sorted(day.exercises, key=lambda e: e.sort_order):
                    targets = self.calculator.calculate_targets_for_week(
                        progressions[pde.id], week_number - 1, True
                    )
                    for set_number in range(1, targets.target_sets + 1):
                        workout_set = WorkoutSet(
                            id=uuid.uuid4(),
                            workout_id=workout.id,
                            exercise_id=pde.exercise_id,
                            set_number=set_number,
                            target_reps=targets.target_reps,
                            target_weight=targets.target_weight,
                            status=SetStatus.PENDING.value,
                        )
                        block.sets.append(workout_set)
                        block.records.append(workout_set)

        logger.info(
            "Materialized training block",
            extra={"extra_fields": {
                "mesocycle_id": str(mesocycle.id),
                "plan_days": len(days),
                "workouts": len(block.workouts),
                "sets": len(block.sets),
                "deload_week": DELOAD_WEEK_NUMBER,
            }},
        )
        return block
