"""
Planned Progression Tests

Week-over-week overload across the 7-week block and the deload that
closes it.
"""

import pytest
from uuid import uuid4

from services.training_block import (
    DeloadCalculator,
    ExerciseProgression,
    ProgressionCalculator,
    WeekCompletion,
    calculate_week_targets,
    round_to_increment,
)
from services.training_block.progression import deload_sets


def make_exercise(base_weight=100.0, base_reps=8, base_sets=3, weight_increment=5.0):
    return ExerciseProgression(
        exercise_id=uuid4(),
        plan_exercise_id=uuid4(),
        base_weight=base_weight,
        base_reps=base_reps,
        base_sets=base_sets,
        weight_increment=weight_increment,
    )


class TestRounding:
    """Weights land on 2.5 lb steps."""

    def test_rounds_down_below_half(self):
        assert round_to_increment(93.5) == 92.5

    def test_exact_half_rounds_up(self):
        """93.75 sits exactly between 92.5 and 95."""
        assert round_to_increment(93.75) == 95.0

    def test_already_on_increment(self):
        assert round_to_increment(100.0) == 100.0

    def test_custom_increment(self):
        assert round_to_increment(101.0, 5.0) == 100.0


class TestDeloadSets:
    @pytest.mark.parametrize("base_sets,expected", [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3)])
    def test_half_the_sets_rounded_up(self, base_sets, expected):
        assert deload_sets(base_sets) == expected


class TestCalculateWeekTargets:
    """The assume-everything-completed formula."""

    def test_week_zero_is_baseline(self):
        assert calculate_week_targets(8, 100.0, 3, 0, False, 5.0) == (8, 100.0, 3)

    def test_odd_weeks_add_a_rep(self):
        assert calculate_week_targets(8, 100.0, 3, 1, False, 5.0) == (9, 100.0, 3)
        assert calculate_week_targets(8, 100.0, 3, 3, False, 5.0) == (9, 105.0, 3)

    def test_even_weeks_add_weight_and_reset_reps(self):
        assert calculate_week_targets(8, 100.0, 3, 2, False, 5.0) == (8, 105.0, 3)
        assert calculate_week_targets(8, 100.0, 3, 4, False, 5.0) == (8, 110.0, 3)

    def test_deload_works_from_week_five(self):
        reps, weight, sets = calculate_week_targets(8, 100.0, 3, 6, True, 5.0)
        assert reps == 9
        assert weight == 92.5  # 110 * 0.85 = 93.5
        assert sets == 2

    def test_negative_week_rejected(self):
        with pytest.raises(ValueError):
            calculate_week_targets(8, 100.0, 3, -1, False, 5.0)


class TestProgressionCalculator:
    def test_full_block_when_everything_completed(self):
        calculator = ProgressionCalculator()
        exercise = make_exercise()

        targets = [calculator.calculate_targets_for_week(exercise, w) for w in range(7)]

        assert [t.target_weight for t in targets] == [100, 100, 105, 105, 110, 110, 92.5]
        assert [t.target_reps for t in targets] == [8, 9, 8, 9, 8, 9, 9]
        assert [t.target_sets for t in targets] == [3, 3, 3, 3, 3, 3, 2]
        assert [t.is_deload for t in targets] == [False] * 6 + [True]

    def test_incomplete_previous_week_repeats_it(self):
        """Missing week 2 means week 3 repeats week 2's numbers."""
        calculator = ProgressionCalculator()
        targets = calculator.calculate_targets_for_week(make_exercise(), 3, previous_week_completed=False)

        assert targets.target_weight == 105.0
        assert targets.target_reps == 8
        assert targets.week_number == 3
        assert not targets.is_deload

    def test_week_zero_ignores_completion(self):
        calculator = ProgressionCalculator()
        targets = calculator.calculate_targets_for_week(make_exercise(), 0, previous_week_completed=False)
        assert (targets.target_weight, targets.target_reps) == (100.0, 8)

    def test_deload_applies_even_when_week_five_incomplete(self):
        """Deload still happens; it is computed from week 4 instead."""
        calculator = ProgressionCalculator()
        targets = calculator.calculate_targets_for_week(make_exercise(), 6, previous_week_completed=False)

        assert targets.is_deload
        assert targets.target_reps == 8
        assert targets.target_weight == 92.5
        assert targets.target_sets == 2

    def test_heavier_deload(self):
        calculator = ProgressionCalculator()
        exercise = make_exercise(base_weight=135.0, base_reps=8, base_sets=4, weight_increment=5.0)
        targets = calculator.calculate_targets_for_week(exercise, 6)

        # Week 5: 145 lb; 145 * 0.85 = 123.25
        assert targets.target_weight == 122.5
        assert targets.target_sets == 2

    @pytest.mark.parametrize("week", [-1, 7, 10])
    def test_out_of_range_week_rejected(self, week):
        with pytest.raises(ValueError):
            ProgressionCalculator().calculate_targets_for_week(make_exercise(), week)

    def test_progression_history_uses_per_week_completion(self):
        calculator = ProgressionCalculator()
        history = calculator.calculate_progression_history(
            make_exercise(),
            [WeekCompletion(week_number=2, all_sets_completed=False)],
        )

        assert len(history) == 7
        # Week 3 repeats week 2; week 4 is back on the plan
        assert (history[3].target_weight, history[3].target_reps) == (105.0, 8)
        assert (history[4].target_weight, history[4].target_reps) == (110.0, 8)

    def test_progression_history_without_records_matches_plan(self):
        calculator = ProgressionCalculator()
        exercise = make_exercise()
        history = calculator.calculate_progression_history(exercise, [])
        planned = [calculator.calculate_targets_for_week(exercise, w) for w in range(7)]
        assert history == planned


class TestDeloadCalculator:
    def test_only_week_six_is_deload(self):
        deload = DeloadCalculator()
        assert [deload.is_deload_week(w) for w in range(7)] == [False] * 6 + [True]

    def test_factors(self):
        deload = DeloadCalculator()
        assert deload.get_deload_weight_factor() == 0.85
        assert deload.get_deload_volume_factor() == 0.5

    def test_deload_targets_keep_reps(self):
        targets = DeloadCalculator().calculate_deload_targets(make_exercise(base_sets=5), 200.0, 10)
        assert targets.target_weight == 170.0
        assert targets.target_reps == 10
        assert targets.target_sets == 3
        assert targets.is_deload
