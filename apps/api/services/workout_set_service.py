"""
Workout Set Service

Logging, skipping and un-logging individual sets, plus adding or removing
sets for one exercise of a workout. Set-count changes are propagated to
the same exercise in later pending workouts of the same plan day.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from models import Workout, WorkoutSet
from services.training_block.constants import SetStatus, WorkoutStatus

logger = logging.getLogger(__name__)


@dataclass
class SetCountChange:
    current_workout_set: Optional[WorkoutSet]
    future_workouts_affected: int
    future_sets_modified: int


def ensure_workout_editable(workout: Workout, action: str) -> None:
    """Completed and skipped workouts are read-only."""
    if workout.status in (WorkoutStatus.COMPLETED.value, WorkoutStatus.SKIPPED.value):
        raise ValidationError(f"Cannot {action} a {workout.status} workout")


class WorkoutSetService:
    def __init__(self, db: Session):
        self.db = db

    # ============ Lookups ============

    def _get_set(self, set_id: UUID) -> WorkoutSet:
        workout_set = self.db.get(WorkoutSet, set_id)
        if workout_set is None:
            raise NotFoundError("WorkoutSet", set_id)
        return workout_set

    def _get_workout(self, workout_id: UUID) -> Workout:
        workout = self.db.get(Workout, workout_id)
        if workout is None:
            raise NotFoundError("Workout", workout_id)
        return workout

    def _exercise_sets(self, workout_id: UUID, exercise_id: UUID) -> List[WorkoutSet]:
        return list(self.db.scalars(
            select(WorkoutSet)
            .where(WorkoutSet.workout_id == workout_id, WorkoutSet.exercise_id == exercise_id)
            .order_by(WorkoutSet.set_number)
        ))

    def _auto_start(self, workout: Workout) -> None:
        if workout.status == WorkoutStatus.PENDING.value:
            workout.status = WorkoutStatus.IN_PROGRESS.value
            workout.started_at = datetime.now(timezone.utc)
            logger.info(f"Auto-started workout {workout.id}")

    # ============ Set state ============

    def log(self, set_id: UUID, actual_reps: int, actual_weight: float) -> WorkoutSet:
        if actual_reps is None or actual_reps < 0:
            raise ValidationError("Reps must be a non-negative number")
        if actual_weight is None or actual_weight < 0:
            raise ValidationError("Weight must be a non-negative number")

        workout_set = self._get_set(set_id)
        workout = self._get_workout(workout_set.workout_id)
        ensure_workout_editable(workout, "log sets for")

        self._auto_start(workout)
        workout_set.actual_reps = actual_reps
        workout_set.actual_weight = actual_weight
        workout_set.status = SetStatus.COMPLETED.value
        self.db.flush()
        return workout_set

    def skip(self, set_id: UUID) -> WorkoutSet:
        workout_set = self._get_set(set_id)
        workout = self._get_workout(workout_set.workout_id)
        ensure_workout_editable(workout, "skip sets for")

        self._auto_start(workout)
        workout_set.actual_reps = None
        workout_set.actual_weight = None
        workout_set.status = SetStatus.SKIPPED.value
        self.db.flush()
        return workout_set

    def unlog(self, set_id: UUID) -> WorkoutSet:
        workout_set = self._get_set(set_id)
        workout = self._get_workout(workout_set.workout_id)
        ensure_workout_editable(workout, "unlog sets for")

        workout_set.actual_reps = None
        workout_set.actual_weight = None
        workout_set.status = SetStatus.PENDING.value
        self.db.flush()
        return workout_set

    # ============ Set count ============

    def _future_workouts(self, workout: Workout) -> List[Workout]:
        return list(self.db.scalars(
            select(Workout).where(
                Workout.mesocycle_id == workout.mesocycle_id,
                Workout.plan_day_id == workout.plan_day_id,
                Workout.week_number > workout.week_number,
                Workout.status == WorkoutStatus.PENDING.value,
            ).order_by(Workout.week_number)
        ))

    def _existing_sets_or_404(self, workout: Workout, exercise_id: UUID) -> List[WorkoutSet]:
        sets = self._exercise_sets(workout.id, exercise_id)
        if not sets:
            raise NotFoundError("WorkoutSet", f"exercise {exercise_id} in workout {workout.id}")
        return sets

    def add_set(self, workout_id: UUID, exercise_id: UUID) -> SetCountChange:
        workout = self._get_workout(workout_id)
        ensure_workout_editable(workout, "add sets to")
        sets = self._existing_sets_or_404(workout, exercise_id)

        last = sets[-1]
        new_set = WorkoutSet(
            workout_id=workout.id,
            exercise_id=exercise_id,
            set_number=last.set_number + 1,
            target_reps=last.target_reps,
            target_weight=last.target_weight,
            status=SetStatus.PENDING.value,
        )
        self.db.add(new_set)

        affected = 0
        for future in self._future_workouts(workout):
            future_sets = self._exercise_sets(future.id, exercise_id)
            if not future_sets:
                continue
            tail = future_sets[-1]
            self.db.add(WorkoutSet(
                workout_id=future.id,
                exercise_id=exercise_id,
                set_number=tail.set_number + 1,
                target_reps=tail.target_reps,
                target_weight=tail.target_weight,
                status=SetStatus.PENDING.value,
            ))
            affected += 1

        self.db.flush()
        return SetCountChange(new_set, affected, affected)

    def remove_set(self, workout_id: UUID, exercise_id: UUID) -> SetCountChange:
        workout = self._get_workout(workout_id)
        ensure_workout_editable(workout, "remove sets from")
        sets = self._existing_sets_or_404(workout, exercise_id)

        if len(sets) <= 1:
            raise ValidationError("Cannot remove the last set from an exercise")

        pending = [s for s in sets if s.status == SetStatus.PENDING.value]
        if not pending:
            raise ValidationError("No pending sets to remove")

        self.db.delete(max(pending, key=lambda s: s.set_number))

        affected = 0
        for future in self._future_workouts(workout):
            future_sets = self._exercise_sets(future.id, exercise_id)
            future_pending = [s for s in future_sets if s.status == SetStatus.PENDING.value]
            if len(future_sets) <= 1 or not future_pending:
                continue
            self.db.delete(max(future_pending, key=lambda s: s.set_number))
            affected += 1

        self.db.flush()
        return SetCountChange(None, affected, affected)
