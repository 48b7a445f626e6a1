"""
Workout Service Tests

Workout lookups, lifecycle transitions and performance-driven retuning of
the following week.
"""

import pytest
from datetime import date

from core.config import settings
from core.exceptions import NotFoundError, ValidationError
from services.workout_service import WorkoutService
from services.workout_set_service import WorkoutSetService
from uuid import uuid4


def log_all(db, workout, reps, weight):
    sets_service = WorkoutSetService(db)
    for s in WorkoutService(db).sets_for(workout.id):
        sets_service.log(s.id, reps, weight)


class TestLookups:
    def test_workout_with_exercises(self, db_session, workouts_by_week, bench):
        details = WorkoutService(db_session).get_with_exercises(workouts_by_week[1].id)

        assert details.plan_day_name == "Push"
        assert details.week_number == 1
        assert len(details.exercises) == 1

        exercise = details.exercises[0]
        assert exercise.exercise_id == bench.id
        assert exercise.exercise_name == "Bench Press"
        assert exercise.rest_seconds == 90
        assert exercise.total_sets == 3
        assert exercise.completed_sets == 0
        assert [s.set_number for s in exercise.sets] == [1, 2, 3]
        assert [(w.target_weight, w.target_reps) for w in exercise.warmup_sets] == [(60.0, 10), (80.0, 5)]

    def test_unknown_workout(self, db_session):
        with pytest.raises(NotFoundError):
            WorkoutService(db_session).get_with_exercises(uuid4())

    def test_list_filters_by_mesocycle(self, db_session, active_mesocycle):
        service = WorkoutService(db_session)
        assert len(service.list(active_mesocycle.id)) == 7
        assert service.list(uuid4()) == []

    def test_todays_workout_by_date(self, db_session, workouts_by_week):
        today = WorkoutService(db_session).get_todays_workout(today=date(2024, 1, 8))
        assert today.id == workouts_by_week[2].id

    def test_no_workout_today(self, db_session, active_mesocycle):
        assert WorkoutService(db_session).get_todays_workout(today=date(2024, 1, 2)) is None

    def test_in_progress_workout_wins(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        service.start(workouts_by_week[1].id)

        today = service.get_todays_workout(today=date(2024, 1, 8))
        assert today.id == workouts_by_week[1].id

    def test_no_active_mesocycle(self, db_session, push_plan):
        assert WorkoutService(db_session).get_todays_workout(today=date(2024, 1, 1)) is None


class TestLifecycle:
    def test_start(self, db_session, workouts_by_week):
        workout = WorkoutService(db_session).start(workouts_by_week[1].id)
        assert workout.status == "in_progress"
        assert workout.started_at is not None

    def test_start_twice(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        service.start(workouts_by_week[1].id)

        with pytest.raises(ValidationError) as exc_info:
            service.start(workouts_by_week[1].id)
        assert exc_info.value.detail == "Workout is already in progress"

    def test_complete_requires_in_progress(self, db_session, workouts_by_week):
        with pytest.raises(ValidationError) as exc_info:
            WorkoutService(db_session).complete(workouts_by_week[1].id)
        assert exc_info.value.detail == "Cannot complete workout that is not in progress"

    def test_complete_advances_current_week(self, db_session, active_mesocycle, workouts_by_week):
        service = WorkoutService(db_session)
        service.start(workouts_by_week[2].id)
        workout = service.complete(workouts_by_week[2].id)

        assert workout.status == "completed"
        assert workout.completed_at is not None
        assert active_mesocycle.current_week == 2

    def test_current_week_never_goes_back(self, db_session, active_mesocycle, workouts_by_week):
        service = WorkoutService(db_session)
        for week in (3, 1):
            service.start(workouts_by_week[week].id)
            service.complete(workouts_by_week[week].id)
        assert active_mesocycle.current_week == 3

    def test_skip_marks_pending_sets_skipped(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        first_set = service.sets_for(workouts_by_week[1].id)[0]
        WorkoutSetService(db_session).log(first_set.id, 8, 100.0)

        workout = service.skip(workouts_by_week[1].id)

        statuses = sorted(s.status for s in service.sets_for(workout.id))
        assert workout.status == "skipped"
        assert statuses == ["completed", "skipped", "skipped"]

    def test_cannot_skip_completed(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        service.start(workouts_by_week[1].id)
        service.complete(workouts_by_week[1].id)

        with pytest.raises(ValidationError):
            service.skip(workouts_by_week[1].id)

    def test_cannot_start_skipped(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        service.skip(workouts_by_week[1].id)

        with pytest.raises(ValidationError) as exc_info:
            service.start(workouts_by_week[1].id)
        assert exc_info.value.detail == "Cannot start a skipped workout"


class TestDynamicProgression:
    def test_hitting_max_reps_adds_weight_next_week(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        log_all(db_session, workouts_by_week[1], 12, 100.0)
        service.complete(workouts_by_week[1].id)

        next_sets = service.sets_for(workouts_by_week[2].id)
        assert {(s.target_weight, s.target_reps) for s in next_sets} == {(105.0, 8)}
        assert len(next_sets) == 3

    def test_later_weeks_untouched(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        log_all(db_session, workouts_by_week[1], 12, 100.0)
        service.complete(workouts_by_week[1].id)

        week_three = service.sets_for(workouts_by_week[3].id)
        assert {(s.target_weight, s.target_reps) for s in week_three} == {(105.0, 8)}

    def test_deload_follows_actual_weight(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        log_all(db_session, workouts_by_week[6], 9, 120.0)
        service.complete(workouts_by_week[6].id)

        deload = service.sets_for(workouts_by_week[7].id)
        # 120 * 0.85 = 102 -> 102.5 at min reps
        assert {(s.target_weight, s.target_reps) for s in deload} == {(102.5, 8)}
        assert len(deload) == 2

    def test_nothing_logged_keeps_plan(self, db_session, workouts_by_week):
        service = WorkoutService(db_session)
        service.start(workouts_by_week[1].id)
        service.complete(workouts_by_week[1].id)

        next_sets = service.sets_for(workouts_by_week[2].id)
        assert {(s.target_weight, s.target_reps) for s in next_sets} == {(100.0, 9)}

    def test_disabled_by_setting(self, db_session, workouts_by_week, monkeypatch):
        monkeypatch.setattr(settings, "DYNAMIC_PROGRESSION_ENABLED", False)
        service = WorkoutService(db_session)
        log_all(db_session, workouts_by_week[1], 12, 100.0)
        service.complete(workouts_by_week[1].id)

        next_sets = service.sets_for(workouts_by_week[2].id)
        assert {(s.target_weight, s.target_reps) for s in next_sets} == {(100.0, 9)}
