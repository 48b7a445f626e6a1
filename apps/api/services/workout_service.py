"""
Workout Service

Workout lookups (today, by id with grouped sets) and lifecycle transitions:

    pending -> in_progress -> completed
    pending | in_progress -> skipped

Completing a workout advances the mesocycle's current week and, when
enabled, retunes the same plan day's workout next week from the sets that
were actually lifted.
"""

import logging
from collections import OrderedDict
from datetime import date, datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import NotFoundError, ValidationError
from models import Exercise, Mesocycle, PlanDay, PlanDayExercise, Workout, WorkoutSet
from schemas import WorkoutExercise, WorkoutSetResponse, WarmupSetResponse, WorkoutWithExercises
from services.training_block import (
    DELOAD_WEEK_NUMBER,
    DynamicProgressionCalculator,
    MesocycleStatus,
    PreviousWeekPerformance,
    SetStatus,
    WorkoutStatus,
    calculate_warmup_sets,
)
from services.training_block.dynamic_progression import completed_sets_from
from services.training_block.materializer import progression_for

logger = logging.getLogger(__name__)

DEFAULT_REST_SECONDS = 60


class WorkoutService:
    def __init__(self, db: Session, dynamic: Optional[DynamicProgressionCalculator] = None):
        self.db = db
        self.dynamic = dynamic or DynamicProgressionCalculator()

    # ============ Lookups ============

    def get(self, workout_id: UUID) -> Workout:
        workout = self.db.get(Workout, workout_id)
        if workout is None:
            raise NotFoundError("Workout", workout_id)
        return workout

    def list(self, mesocycle_id: Optional[UUID] = None) -> List[Workout]:
        stmt = select(Workout)
        if mesocycle_id is not None:
            stmt = stmt.where(Workout.mesocycle_id == mesocycle_id)
        return list(self.db.scalars(stmt.order_by(Workout.scheduled_date, Workout.week_number)))

    def sets_for(self, workout_id: UUID) -> List[WorkoutSet]:
        return list(self.db.scalars(
            select(WorkoutSet)
            .where(WorkoutSet.workout_id == workout_id)
            .order_by(WorkoutSet.exercise_id, WorkoutSet.set_number)
        ))

    def get_todays_workout(self, today: Optional[date] = None) -> Optional[WorkoutWithExercises]:
        today = today or date.today()
        active = self.db.scalars(
            select(Mesocycle).where(Mesocycle.status == MesocycleStatus.ACTIVE.value)
        ).first()
        if active is None:
            return None

        workout = self.db.scalars(
            select(Workout).where(
                Workout.mesocycle_id == active.id,
                Workout.status == WorkoutStatus.IN_PROGRESS.value,
            ).order_by(Workout.scheduled_date)
        ).first()
        if workout is None:
            workout = self.db.scalars(
                select(Workout).where(
                    Workout.mesocycle_id == active.id,
                    Workout.status == WorkoutStatus.PENDING.value,
                    Workout.scheduled_date == today,
                )
            ).first()
        if workout is None:
            return None
        return self.get_with_exercises(workout.id)

    def get_with_exercises(self, workout_id: UUID) -> WorkoutWithExercises:
        workout = self.get(workout_id)
        plan_day = self.db.get(PlanDay, workout.plan_day_id)
        plan_exercises: Dict[UUID, PlanDayExercise] = {
            pde.exercise_id: pde
            for pde in self.db.scalars(
                select(PlanDayExercise).where(PlanDayExercise.plan_day_id == workout.plan_day_id)
            )
        }

        grouped: "OrderedDict[UUID, List[WorkoutSet]]" = OrderedDict()
        for s in self.sets_for(workout.id):
            grouped.setdefault(s.exercise_id, []).append(s)

        # Plan order first, exercises no longer in the plan last
        order = sorted(
            grouped,
            key=lambda eid: plan_exercises[eid].sort_order if eid in plan_exercises else 10_000,
        )
        names = {
            e.id: e.name
            for e in self.db.scalars(select(Exercise).where(Exercise.id.in_(list(grouped))))
        } if grouped else {}

        exercises = []
        for exercise_id in order:
            sets = sorted(grouped[exercise_id], key=lambda s: s.set_number)
            pde = plan_exercises.get(exercise_id)
            exercises.append(WorkoutExercise(
                exercise_id=exercise_id,
                exercise_name=names.get(exercise_id, "Unknown"),
                rest_seconds=pde.rest_seconds if pde else DEFAULT_REST_SECONDS,
                sets=[WorkoutSetResponse.model_validate(s) for s in sets],
                warmup_sets=[
                    WarmupSetResponse.model_validate(w)
                    for w in calculate_warmup_sets(sets[0].target_weight)
                ],
                total_sets=len(sets),
                completed_sets=sum(1 for s in sets if s.status == SetStatus.COMPLETED.value),
            ))

        return WorkoutWithExercises(
            id=workout.id,
            mesocycle_id=workout.mesocycle_id,
            plan_day_id=workout.plan_day_id,
            week_number=workout.week_number,
            scheduled_date=workout.scheduled_date,
            status=workout.status,
            started_at=workout.started_at,
            completed_at=workout.completed_at,
            plan_day_name=plan_day.name if plan_day else "Unknown",
            exercises=exercises,
        )

    # ============ Lifecycle ============

    def start(self, workout_id: UUID) -> Workout:
        workout = self.get(workout_id)
        if workout.status == WorkoutStatus.IN_PROGRESS.value:
            raise ValidationError("Workout is already in progress")
        if workout.status != WorkoutStatus.PENDING.value:
            raise ValidationError(f"Cannot start a {workout.status} workout")

        workout.status = WorkoutStatus.IN_PROGRESS.value
        workout.started_at = datetime.now(timezone.utc)
        self.db.flush()
        return workout

    def complete(self, workout_id: UUID) -> Workout:
        workout = self.get(workout_id)
        if workout.status != WorkoutStatus.IN_PROGRESS.value:
            raise ValidationError("Cannot complete workout that is not in progress")

        workout.status = WorkoutStatus.COMPLETED.value
        workout.completed_at = datetime.now(timezone.utc)

        mesocycle = self.db.get(Mesocycle, workout.mesocycle_id)
        if mesocycle is not None and workout.week_number > mesocycle.current_week:
            mesocycle.current_week = workout.week_number

        self.db.flush()

        if settings.DYNAMIC_PROGRESSION_ENABLED:
            self.apply_dynamic_progression(workout)
        return workout

    def skip(self, workout_id: UUID) -> Workout:
        workout = self.get(workout_id)
        if workout.status in (WorkoutStatus.COMPLETED.value, WorkoutStatus.SKIPPED.value):
            raise ValidationError(f"Cannot skip a {workout.status} workout")

        workout.status = WorkoutStatus.SKIPPED.value
        for s in self.sets_for(workout.id):
            if s.status == SetStatus.PENDING.value:
                s.status = SetStatus.SKIPPED.value
        self.db.flush()
        return workout

    # ============ Dynamic progression ============

    def _performance_history(
        self, workout: Workout, exercise_id: UUID, min_reps: int
    ) -> List[PreviousWeekPerformance]:
        """Completed performances of earlier weeks of this plan day, newest first."""
        earlier = self.db.scalars(
            select(Workout).where(
                Workout.mesocycle_id == workout.mesocycle_id,
                Workout.plan_day_id == workout.plan_day_id,
                Workout.week_number < workout.week_number,
                Workout.status == WorkoutStatus.COMPLETED.value,
            ).order_by(Workout.week_number.desc())
        )
        history: List[PreviousWeekPerformance] = []
        for prior in earlier:
            sets = [s for s in self.sets_for(prior.id) if s.exercise_id == exercise_id]
            perf = self.dynamic.build_previous_week_performance(
                exercise_id,
                prior.week_number,
                sets[0].target_weight if sets else 0.0,
                sets[0].target_reps if sets else 0,
                completed_sets_from(sets),
                min_reps,
                [],
            )
            if perf is not None:
                history.append(perf)
        return history

    def apply_dynamic_progression(self, workout: Workout) -> int:
        """Retune next week's pending sets for this plan day. Returns sets updated."""
        next_workout = self.db.scalars(
            select(Workout).where(
                Workout.mesocycle_id == workout.mesocycle_id,
                Workout.plan_day_id == workout.plan_day_id,
                Workout.week_number == workout.week_number + 1,
                Workout.status == WorkoutStatus.PENDING.value,
            )
        ).first()
        if next_workout is None:
            return 0

        plan_exercises = {
            pde.exercise_id: pde
            for pde in self.db.scalars(
                select(PlanDayExercise).where(PlanDayExercise.plan_day_id == workout.plan_day_id)
            )
        }

        sets_by_exercise: Dict[UUID, List[WorkoutSet]] = {}
        for s in self.sets_for(workout.id):
            sets_by_exercise.setdefault(s.exercise_id, []).append(s)

        updated = 0
        for exercise_id, sets in sets_by_exercise.items():
            pde = plan_exercises.get(exercise_id)
            exercise = self.db.get(Exercise, exercise_id)
            if pde is None or exercise is None:
                continue

            progression = progression_for(pde, exercise.weight_increment)
            history = self._performance_history(workout, exercise_id, pde.min_reps)
            performance = self.dynamic.build_previous_week_performance(
                exercise_id,
                workout.week_number,
                sets[0].target_weight,
                sets[0].target_reps,
                completed_sets_from(sets),
                pde.min_reps,
                history,
            )
            if performance is None:
                continue

            targets = self.dynamic.calculate_next_week_targets(
                progression, performance, next_workout.week_number == DELOAD_WEEK_NUMBER
            )
            for s in self.sets_for(next_workout.id):
                if s.exercise_id == exercise_id and s.status == SetStatus.PENDING.value:
                    s.target_weight = targets.target_weight
                    s.target_reps = targets.target_reps
                    updated += 1

            logger.info(
                "Applied dynamic progression",
                extra={"extra_fields": {
                    "workout_id": str(next_workout.id),
                    "exercise_id": str(exercise_id),
                    "reason": targets.reason.value,
                    "target_weight": targets.target_weight,
                    "target_reps": targets.target_reps,
                }},
            )

        self.db.flush()
        return updated
