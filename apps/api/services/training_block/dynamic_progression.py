"""
Dynamic Progression

Adjusts next week's targets from what the lifter actually did, inside a
min/max rep range:

    - Hit max reps: add weight, drop to min reps
    - Hit target: same weight, one more rep (capped at max reps)
    - Between min reps and target: hold
    - Below min reps twice in a row at the same weight: back off one increment
    - Deload week: 85% of the last working weight at min reps, half the sets

Usage:
    calculator = DynamicProgressionCalculator()
    perf = calculator.build_previous_week_performance(
        exercise_id, week_number=2, target_weight=100, target_reps=10,
        completed_sets=sets, min_reps=8, history=[],
    )
    targets = calculator.calculate_next_week_targets(exercise, perf, is_deload_week=False)
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence
from uuid import UUID

from .constants import DELOAD_WEIGHT_FACTOR, FAILURES_BEFORE_REGRESSION, ProgressionReason
from .progression import (
    ExerciseProgression,
    deload_sets,
    round_to_increment,
)

logger = logging.getLogger(__name__)


@dataclass
class PreviousWeekPerformance:
    exercise_id: UUID
    week_number: int
    target_weight: float
    target_reps: int
    actual_weight: float
    actual_reps: int
    hit_target: bool
    consecutive_failures: int = 0


@dataclass
class CompletedSet:
    actual_weight: float
    actual_reps: int


@dataclass
class DynamicTargets:
    target_weight: float
    target_reps: int
    target_sets: int
    is_deload: bool
    reason: ProgressionReason


class DynamicProgressionCalculator:
    """Performance-driven next-week targets."""

    def calculate_next_week_targets(
        self,
        exercise: ExerciseProgression,
        previous: Optional[PreviousWeekPerformance],
        is_deload_week: bool,
    ) -> DynamicTargets:
        if previous is None:
            return DynamicTargets(
                target_weight=exercise.base_weight,
                target_reps=exercise.base_reps,
                target_sets=exercise.base_sets,
                is_deload=False,
                reason=ProgressionReason.FIRST_WEEK,
            )

        if is_deload_week:
            return DynamicTargets(
                target_weight=round_to_increment(previous.actual_weight * DELOAD_WEIGHT_FACTOR),
                target_reps=exercise.min_reps,
                target_sets=deload_sets(exercise.base_sets),
                is_deload=True,
                reason=ProgressionReason.DELOAD,
            )

        actual_reps = previous.actual_reps
        weight = previous.actual_weight

        if (
            actual_reps < exercise.min_reps
            and previous.consecutive_failures >= FAILURES_BEFORE_REGRESSION
        ):
            return self._targets(
                exercise,
                max(exercise.base_weight, weight - exercise.weight_increment),
                exercise.min_reps,
                ProgressionReason.REGRESS,
            )

        if actual_reps >= exercise.max_reps:
            return self._targets(
                exercise,
                weight + exercise.weight_increment,
                exercise.min_reps,
                ProgressionReason.HIT_MAX_REPS,
            )

        if actual_reps >= previous.target_reps:
            return self._targets(
                exercise,
                weight,
                min(previous.target_reps + 1, exercise.max_reps),
                ProgressionReason.HIT_TARGET,
            )

        if actual_reps >= exercise.min_reps:
            return self._targets(exercise, weight, previous.target_reps, ProgressionReason.HOLD)

        return self._targets(exercise, weight, exercise.min_reps, ProgressionReason.HOLD)

    def calculate_consecutive_failures(
        self,
        history: Sequence[PreviousWeekPerformance],
        current_weight: float,
        min_reps: int,
    ) -> int:
        """Count leading (newest-first) weeks at current_weight below min_reps."""
        failures = 0
        for perf in history:
            if perf.actual_weight != current_weight or perf.actual_reps >= min_reps:
                break
            failures += 1
        return failures

    def build_previous_week_performance(
        self,
        exercise_id: UUID,
        week_number: int,
        target_weight: float,
        target_reps: int,
        completed_sets: Sequence[CompletedSet],
        min_reps: int,
        history: Sequence[PreviousWeekPerformance],
    ) -> Optional[PreviousWeekPerformance]:
        if not completed_sets:
            return None

        best = max(completed_sets, key=lambda s: (s.actual_weight, s.actual_reps))

        if best.actual_reps < min_reps:
            failures = self.calculate_consecutive_failures(history, best.actual_weight, min_reps) + 1
        else:
            failures = 0

        return PreviousWeekPerformance(
            exercise_id=exercise_id,
            week_number=week_number,
            target_weight=target_weight,
            target_reps=target_reps,
            actual_weight=best.actual_weight,
            actual_reps=best.actual_reps,
            hit_target=best.actual_reps >= target_reps,
            consecutive_failures=failures,
        )

    def _targets(
        self,
        exercise: ExerciseProgression,
        weight: float,
        reps: int,
        reason: ProgressionReason,
    ) -> DynamicTargets:
        return DynamicTargets(
            target_weight=weight,
            target_reps=reps,
            target_sets=exercise.base_sets,
            is_deload=False,
            reason=reason,
        )


def completed_sets_from(sets: List) -> List[CompletedSet]:
    """CompletedSet views of completed WorkoutSet rows."""
    return [
        CompletedSet(actual_weight=s.actual_weight, actual_reps=s.actual_reps)
        for s in sets
        if s.status == "completed" and s.actual_weight is not None and s.actual_reps is not None
    ]
