"""
Plan Modification Tests

Edits to a plan template flow into the pending workouts of its active
mesocycle; logged data stays put.
"""

from uuid import uuid4

from sqlalchemy import select

from models import Exercise, PlanDay, PlanDayExercise, WorkoutSet
from services.plan_modification import PlanModificationService, has_logged_data
from services.workout_service import WorkoutService
from services.workout_set_service import WorkoutSetService


def plan_day(db, plan):
    return db.scalars(select(PlanDay).where(PlanDay.plan_id == plan.id)).one()


def day_exercises(db, day):
    return list(db.scalars(select(PlanDayExercise).where(PlanDayExercise.plan_day_id == day.id)))


def sync(db, mesocycle, day):
    exercises = day_exercises(db, day)
    exercise_map = {e.id: e for e in db.scalars(select(Exercise))}
    return PlanModificationService(db).sync_plan_to_mesocycle(mesocycle.id, day.id, exercises, exercise_map)


def exercise_sets(db, workout, exercise):
    return [s for s in WorkoutService(db).sets_for(workout.id) if s.exercise_id == exercise.id]


class TestDiff:
    def _pde(self, exercise_id, **kwargs):
        values = dict(sets=3, reps=8, weight=100.0, rest_seconds=90)
        values.update(kwargs)
        return PlanDayExercise(id=uuid4(), exercise_id=exercise_id, **values)

    def test_added_removed_modified(self):
        keep, drop, new = uuid4(), uuid4(), uuid4()
        old = [self._pde(keep), self._pde(drop)]
        updated = [self._pde(keep, weight=110.0, sets=4), self._pde(new)]

        diff = PlanModificationService(db=None).diff_plan_day_exercises(old, updated)

        assert [e.exercise_id for e in diff.added] == [new]
        assert [e.exercise_id for e in diff.removed] == [drop]
        assert len(diff.modified) == 1
        assert diff.modified[0].changes == {"sets": 4, "weight": 110.0}

    def test_identical_lists(self):
        eid = uuid4()
        diff = PlanModificationService(db=None).diff_plan_day_exercises([self._pde(eid)], [self._pde(eid)])
        assert (diff.added, diff.removed, diff.modified) == ([], [], [])


class TestSync:
    def test_added_exercise_reaches_every_pending_workout(
        self, db_session, active_mesocycle, push_plan, workouts_by_week, make_exercise
    ):
        fly = make_exercise("Cable Fly", weight_increment=2.5)
        day = plan_day(db_session, push_plan)
        db_session.add(PlanDayExercise(
            plan_day_id=day.id, exercise_id=fly.id, sets=2, reps=10, weight=30.0,
            rest_seconds=60, sort_order=1, min_reps=8, max_reps=12,
        ))
        db_session.flush()

        result = sync(db_session, active_mesocycle, day)

        assert result.affected_workout_count == 7
        assert len(exercise_sets(db_session, workouts_by_week[1], fly)) == 2
        assert [s.target_weight for s in exercise_sets(db_session, workouts_by_week[3], fly)] == [32.5, 32.5]
        assert len(exercise_sets(db_session, workouts_by_week[7], fly)) == 1

    def test_changed_weight_retargets_pending_sets(
        self, db_session, active_mesocycle, push_plan, workouts_by_week, bench
    ):
        day = plan_day(db_session, push_plan)
        day_exercises(db_session, day)[0].weight = 120.0
        db_session.flush()

        result = sync(db_session, active_mesocycle, day)

        assert result.modified_sets_count == 20
        assert {s.target_weight for s in exercise_sets(db_session, workouts_by_week[1], bench)} == {120.0}
        assert {s.target_weight for s in exercise_sets(db_session, workouts_by_week[3], bench)} == {125.0}

    def test_more_sets_adds_pending_sets(self, db_session, active_mesocycle, push_plan, workouts_by_week, bench):
        day = plan_day(db_session, push_plan)
        day_exercises(db_session, day)[0].sets = 5
        db_session.flush()

        sync(db_session, active_mesocycle, day)

        assert [s.set_number for s in exercise_sets(db_session, workouts_by_week[2], bench)] == [1, 2, 3, 4, 5]
        assert len(exercise_sets(db_session, workouts_by_week[7], bench)) == 3

    def test_in_progress_workout_untouched(self, db_session, active_mesocycle, push_plan, workouts_by_week, bench):
        first = exercise_sets(db_session, workouts_by_week[1], bench)[0]
        WorkoutSetService(db_session).log(first.id, 8, 100.0)

        day = plan_day(db_session, push_plan)
        day_exercises(db_session, day)[0].weight = 120.0
        db_session.flush()
        result = sync(db_session, active_mesocycle, day)

        assert result.affected_workout_count == 6
        assert {s.target_weight for s in exercise_sets(db_session, workouts_by_week[1], bench)} == {100.0}

    def test_removed_exercise_leaves_pending_workouts(
        self, db_session, active_mesocycle, push_plan, workouts_by_week, bench
    ):
        day = plan_day(db_session, push_plan)
        for pde in day_exercises(db_session, day):
            db_session.delete(pde)
        db_session.flush()

        result = sync(db_session, active_mesocycle, day)

        assert result.removed_sets_count == 20
        assert exercise_sets(db_session, workouts_by_week[4], bench) == []

    def test_logged_data_preserved_with_warning(
        self, db_session, active_mesocycle, push_plan, workouts_by_week, bench
    ):
        # A pending workout holding logged data, e.g. after a manual status reset
        logged = exercise_sets(db_session, workouts_by_week[2], bench)[0]
        logged.status = "completed"
        logged.actual_reps = 9
        logged.actual_weight = 100.0
        db_session.flush()

        day = plan_day(db_session, push_plan)
        for pde in day_exercises(db_session, day):
            db_session.delete(pde)
        db_session.flush()

        result = sync(db_session, active_mesocycle, day)

        assert result.preserved_count == 1
        assert result.warnings == ["Workout on 2024-01-08 has logged data - exercise sets preserved"]
        assert len(exercise_sets(db_session, workouts_by_week[2], bench)) == 3

    def test_no_pending_workouts(self, db_session, active_mesocycle, push_plan, workouts_by_week):
        service = WorkoutService(db_session)
        for workout in workouts_by_week.values():
            service.skip(workout.id)

        result = sync(db_session, active_mesocycle, plan_day(db_session, push_plan))
        assert result.affected_workout_count == 0


def test_has_logged_data():
    assert not has_logged_data(WorkoutSet(status="pending"))
    assert has_logged_data(WorkoutSet(status="skipped"))
    assert has_logged_data(WorkoutSet(status="pending", actual_reps=5))
