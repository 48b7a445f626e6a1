"""
Planned Progression

Week-over-week progressive overload for a 7-week mesocycle.

Rules (0-based week index):
    - Week 0: base weight, base reps, base sets
    - Odd weeks: +1 rep over the previous week
    - Even weeks: +weight_increment, reps back to base
    - Week 6: deload (85% weight, half the sets rounded up)
    - A week whose predecessor was not completed repeats the predecessor

Usage:
    calculator = ProgressionCalculator()
    targets = calculator.calculate_targets_for_week(exercise, week_index=3)
"""

import math
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from .constants import (
    DEFAULT_MAX_REPS,
    DEFAULT_MIN_REPS,
    DELOAD_VOLUME_FACTOR,
    DELOAD_WEEK_INDEX,
    DELOAD_WEIGHT_FACTOR,
    WEIGHT_ROUNDING_INCREMENT,
)

logger = logging.getLogger(__name__)


@dataclass
class ExerciseProgression:
    """Baseline values a mesocycle progresses from."""
    exercise_id: UUID
    plan_exercise_id: UUID
    base_weight: float
    base_reps: int
    base_sets: int
    weight_increment: float
    min_reps: int = DEFAULT_MIN_REPS
    max_reps: int = DEFAULT_MAX_REPS


@dataclass
class WeekTargets:
    exercise_id: UUID
    plan_exercise_id: UUID
    week_number: int  # 0-based index
    target_weight: float
    target_reps: int
    target_sets: int
    is_deload: bool


@dataclass
class WeekCompletion:
    week_number: int
    all_sets_completed: bool


def round_to_increment(value: float, increment: float = WEIGHT_ROUNDING_INCREMENT) -> float:
    """Round to the nearest increment, halves rounding up."""
    # Epsilon absorbs float error on exact halves (e.g. 93.75 / 2.5)
    steps = math.floor(value / increment + 0.5 + 1e-9)
    return steps * increment


def deload_sets(base_sets: int) -> int:
    return max(1, math.ceil(base_sets * DELOAD_VOLUME_FACTOR))


def calculate_week_targets(
    base_reps: int,
    base_weight: float,
    base_sets: int,
    week_number: int,
    is_deload: bool,
    weight_increment: float,
) -> Tuple[int, float, int]:
    """
    Targets for one exercise on one day, assuming every prior week completed.

    Args:
        base_reps: Plan day exercise reps
        base_weight: Plan day exercise weight
        base_sets: Plan day exercise set count
        week_number: 0-based week index within the block
        is_deload: Apply the deload reduction
        weight_increment: Exercise progression step

    Returns:
        (target_reps, target_weight, effective_sets)
    """
    if week_number < 0:
        raise ValueError(f"week_number must be >= 0, got {week_number}")

    if is_deload:
        # Deload works from the last progressive week
        source = max(0, min(week_number, DELOAD_WEEK_INDEX) - 1)
        reps, weight, _ = calculate_week_targets(
            base_reps, base_weight, base_sets, source, False, weight_increment
        )
        return reps, round_to_increment(weight * DELOAD_WEIGHT_FACTOR), deload_sets(base_sets)

    reps = base_reps + (week_number % 2)
    weight = base_weight + (week_number // 2) * weight_increment
    return reps, weight, base_sets


class DeloadCalculator:
    """Deload week reductions."""

    def is_deload_week(self, week_index: int) -> bool:
        return week_index == DELOAD_WEEK_INDEX

    def get_deload_weight_factor(self) -> float:
        return DELOAD_WEIGHT_FACTOR

    def get_deload_volume_factor(self) -> float:
        return DELOAD_VOLUME_FACTOR

    def calculate_deload_targets(
        self,
        exercise: ExerciseProgression,
        current_weight: float,
        current_reps: int,
    ) -> WeekTargets:
        return WeekTargets(
            exercise_id=exercise.exercise_id,
            plan_exercise_id=exercise.plan_exercise_id,
            week_number=DELOAD_WEEK_INDEX,
            target_weight=round_to_increment(current_weight * DELOAD_WEIGHT_FACTOR),
            target_reps=current_reps,
            target_sets=deload_sets(exercise.base_sets),
            is_deload=True,
        )


class ProgressionCalculator:
    """Planned (template) progression for a mesocycle."""

    def __init__(self, deload: Optional[DeloadCalculator] = None):
        self.deload = deload or DeloadCalculator()

    def calculate_targets_for_week(
        self,
        exercise: ExerciseProgression,
        week_index: int,
        previous_week_completed: bool = True,
    ) -> WeekTargets:
        if week_index < 0 or week_index > DELOAD_WEEK_INDEX:
            raise ValueError(f"week_index must be between 0 and {DELOAD_WEEK_INDEX}, got {week_index}")

        if week_index == 0:
            return self._targets(exercise, 0, exercise.base_weight, exercise.base_reps)

        if self.deload.is_deload_week(week_index):
            # Deload applies regardless of completion; an incomplete week 5
            # means the athlete is still on week 4 numbers.
            source = week_index - 1 if previous_week_completed else week_index - 2
            reps, weight, _ = calculate_week_targets(
                exercise.base_reps, exercise.base_weight, exercise.base_sets,
                source, False, exercise.weight_increment,
            )
            return self.deload.calculate_deload_targets(exercise, weight, reps)

        source = week_index if previous_week_completed else week_index - 1
        reps, weight, _ = calculate_week_targets(
            exercise.base_reps, exercise.base_weight, exercise.base_sets,
            source, False, exercise.weight_increment,
        )
        return self._targets(exercise, week_index, weight, reps)

    def calculate_progression_history(
        self,
        exercise: ExerciseProgression,
        completion_history: List[WeekCompletion],
    ) -> List[WeekTargets]:
        """
        Targets for weeks 0..6 given per-week completion.

        Week w uses the completion recorded for week w-1; weeks without a
        record count as completed.
        """
        completed: Dict[int, bool] = {
            c.week_number: c.all_sets_completed for c in completion_history
        }
        return [
            self.calculate_targets_for_week(
                exercise, week, completed.get(week - 1, True) if week > 0 else True
            )
            for week in range(DELOAD_WEEK_INDEX + 1)
        ]

    def _targets(self, exercise: ExerciseProgression, week: int, weight: float, reps: int) -> WeekTargets:
        return WeekTargets(
            exercise_id=exercise.exercise_id,
            plan_exercise_id=exercise.plan_exercise_id,
            week_number=week,
            target_weight=weight,
            target_reps=reps,
            target_sets=exercise.base_sets,
            is_deload=False,
        )
