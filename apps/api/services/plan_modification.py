"""
Plan Modification Service

Propagates edits of a plan template into the future (pending) workouts of
an active mesocycle. Logged data is never touched: completed or skipped
sets are preserved and reported as warnings.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import Exercise, PlanDayExercise, Workout, WorkoutSet
from services.training_block.constants import SetStatus, WorkoutStatus
from services.training_block.materializer import progression_for
from services.training_block.progression import ProgressionCalculator

logger = logging.getLogger(__name__)

TRACKED_FIELDS = ("sets", "reps", "weight", "rest_seconds")


@dataclass
class ExerciseChanges:
    plan_day_exercise_id: UUID
    exercise_id: UUID
    changes: Dict[str, object]


@dataclass
class PlanDiff:
    added: List[PlanDayExercise] = field(default_factory=list)
    removed: List[PlanDayExercise] = field(default_factory=list)
    modified: List[ExerciseChanges] = field(default_factory=list)


@dataclass
class ModificationResult:
    affected_workout_count: int = 0
    added_sets_count: int = 0
    removed_sets_count: int = 0
    modified_sets_count: int = 0
    preserved_count: int = 0
    warnings: List[str] = field(default_factory=list)

    def merge(self, other: "ModificationResult") -> None:
        self.added_sets_count += other.added_sets_count
        self.removed_sets_count += other.removed_sets_count
        self.modified_sets_count += other.modified_sets_count
        self.preserved_count += other.preserved_count
        self.warnings.extend(other.warnings)


def has_logged_data(workout_set: WorkoutSet) -> bool:
    return (
        workout_set.status != SetStatus.PENDING.value
        or workout_set.actual_reps is not None
        or workout_set.actual_weight is not None
    )


class PlanModificationService:
    def __init__(self, db: Session, calculator: Optional[ProgressionCalculator] = None):
        self.db = db
        self.calculator = calculator or ProgressionCalculator()

    # ============ Queries ============

    def get_future_workouts(self, mesocycle_id: UUID, plan_day_id: Optional[UUID] = None) -> List[Workout]:
        stmt = select(Workout).where(
            Workout.mesocycle_id == mesocycle_id,
            Workout.status == WorkoutStatus.PENDING.value,
        )
        if plan_day_id is not None:
            stmt = stmt.where(Workout.plan_day_id == plan_day_id)
        return list(self.db.scalars(stmt.order_by(Workout.week_number, Workout.scheduled_date)))

    def _sets_for(self, workout_id: UUID, exercise_id: Optional[UUID] = None) -> List[WorkoutSet]:
        stmt = select(WorkoutSet).where(WorkoutSet.workout_id == workout_id)
        if exercise_id is not None:
            stmt = stmt.where(WorkoutSet.exercise_id == exercise_id)
        return list(self.db.scalars(stmt.order_by(WorkoutSet.set_number)))

    # ============ Diff ============

    def diff_plan_day_exercises(
        self,
        old: Sequence[PlanDayExercise],
        new: Sequence[PlanDayExercise],
    ) -> PlanDiff:
        """Compare two versions of a plan day's exercises by exercise id."""
        old_by_exercise = {e.exercise_id: e for e in old}
        new_by_exercise = {e.exercise_id: e for e in new}

        diff = PlanDiff()
        for exercise_id, pde in new_by_exercise.items():
            previous = old_by_exercise.get(exercise_id)
            if previous is None:
                diff.added.append(pde)
                continue
            changes = {
                name: getattr(pde, name)
                for name in TRACKED_FIELDS
                if getattr(pde, name) != getattr(previous, name)
            }
            if changes:
                diff.modified.append(ExerciseChanges(pde.id, exercise_id, changes))

        diff.removed = [e for eid, e in old_by_exercise.items() if eid not in new_by_exercise]
        return diff

    # ============ Propagation ============

    def add_exercise_to_future_workouts(
        self,
        mesocycle_id: UUID,
        plan_day_id: UUID,
        plan_exercise: PlanDayExercise,
        exercise: Exercise,
    ) -> ModificationResult:
        result = ModificationResult()
        progression = progression_for(plan_exercise, exercise.weight_increment)

        for workout in self.get_future_workouts(mesocycle_id, plan_day_id):
            targets = self.calculator.calculate_targets_for_week(progression, workout.week_number - 1, True)
            for set_number in range(1, targets.target_sets + 1):
                self.db.add(WorkoutSet(
                    workout_id=workout.id,
                    exercise_id=plan_exercise.exercise_id,
                    set_number=set_number,
                    target_reps=targets.target_reps,
                    target_weight=targets.target_weight,
                    status=SetStatus.PENDING.value,
                ))
                result.added_sets_count += 1
            result.affected_workout_count += 1

        self.db.flush()
        return result

    def remove_exercise_from_future_workouts(
        self,
        mesocycle_id: UUID,
        plan_day_id: UUID,
        exercise_id: UUID,
    ) -> ModificationResult:
        result = ModificationResult()

        for workout in self.get_future_workouts(mesocycle_id, plan_day_id):
            sets = self._sets_for(workout.id, exercise_id)
            if not sets:
                continue
            result.affected_workout_count += 1
            if any(has_logged_data(s) for s in sets):
                result.preserved_count += 1
                result.warnings.append(
                    f"Workout on {workout.scheduled_date.isoformat()} has logged data - exercise sets preserved"
                )
                continue
            for s in sets:
                self.db.delete(s)
                result.removed_sets_count += 1

        self.db.flush()
        return result

    def update_exercise_targets_for_future_workouts(
        self,
        mesocycle_id: UUID,
        plan_day_id: UUID,
        exercise_id: UUID,
        changes: Dict[str, object],
        weight_increment: float,
    ) -> ModificationResult:
        """Recompute pending targets from new base values; logged sets stay as they are."""
        result = ModificationResult()

        plan_exercise = self.db.scalars(
            select(PlanDayExercise).where(
                PlanDayExercise.plan_day_id == plan_day_id,
                PlanDayExercise.exercise_id == exercise_id,
            )
        ).first()
        if plan_exercise is None:
            return result

        progression = progression_for(plan_exercise, weight_increment)
        if "sets" in changes:
            progression.base_sets = int(changes["sets"])
        if "reps" in changes:
            progression.base_reps = int(changes["reps"])
        if "weight" in changes:
            progression.base_weight = float(changes["weight"])

        for workout in self.get_future_workouts(mesocycle_id, plan_day_id):
            sets = self._sets_for(workout.id, exercise_id)
            targets = self.calculator.calculate_targets_for_week(progression, workout.week_number - 1, True)

            kept = [s for s in sets if has_logged_data(s)]
            pending = [s for s in sets if not has_logged_data(s)]
            wanted = max(0, targets.target_sets - len(kept))

            for s in pending[:wanted]:
                s.target_reps = targets.target_reps
                s.target_weight = targets.target_weight
                result.modified_sets_count += 1

            for s in pending[wanted:]:
                self.db.delete(s)
                result.removed_sets_count += 1

            next_number = max((s.set_number for s in sets), default=0) + 1
            for _ in range(wanted - len(pending)):
                self.db.add(WorkoutSet(
                    workout_id=workout.id,
                    exercise_id=exercise_id,
                    set_number=next_number,
                    target_reps=targets.target_reps,
                    target_weight=targets.target_weight,
                    status=SetStatus.PENDING.value,
                ))
                next_number += 1
                result.added_sets_count += 1

            result.affected_workout_count += 1

        self.db.flush()
        return result

    def sync_plan_to_mesocycle(
        self,
        mesocycle_id: UUID,
        plan_day_id: UUID,
        plan_exercises: Sequence[PlanDayExercise],
        exercise_map: Dict[UUID, Exercise],
    ) -> ModificationResult:
        """Make the pending workouts of one plan day match its current exercises."""
        result = ModificationResult()
        workouts = self.get_future_workouts(mesocycle_id, plan_day_id)
        if not workouts:
            return result

        planned = {pde.exercise_id: pde for pde in plan_exercises}

        for workout in workouts:
            present = {s.exercise_id for s in self._sets_for(workout.id)}

            for exercise_id in present - set(planned):
                sets = self._sets_for(workout.id, exercise_id)
                if any(has_logged_data(s) for s in sets):
                    result.preserved_count += 1
                    result.warnings.append(
                        f"Workout on {workout.scheduled_date.isoformat()} has logged data - exercise sets preserved"
                    )
                    continue
                for s in sets:
                    self.db.delete(s)
                    result.removed_sets_count += 1
        self.db.flush()

        for exercise_id, pde in planned.items():
            exercise = exercise_map.get(exercise_id)
            if exercise is None:
                logger.warning(f"Exercise {exercise_id} missing from exercise map during plan sync")
                continue
            already_present = any(self._sets_for(w.id, exercise_id) for w in workouts)
            if not already_present:
                result.merge(self.add_exercise_to_future_workouts(mesocycle_id, plan_day_id, pde, exercise))
            else:
                result.merge(self.update_exercise_targets_for_future_workouts(
                    mesocycle_id, plan_day_id, exercise_id, {}, exercise.weight_increment,
                ))

        result.affected_workout_count = len(workouts)
        self.db.flush()

        logger.info(
            "Synced plan day to mesocycle",
            extra={"extra_fields": {
                "mesocycle_id": str(mesocycle_id),
                "plan_day_id": str(plan_day_id),
                "added_sets": result.added_sets_count,
                "removed_sets": result.removed_sets_count,
                "modified_sets": result.modified_sets_count,
            }},
        )
        return result
