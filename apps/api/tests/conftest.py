"""
Pytest configuration and fixtures

Every test gets a freshly created schema on the in-memory SQLite engine,
dropped again afterwards. Nothing leaks between tests.
"""
import pytest
from datetime import date

from fastapi.testclient import TestClient

from core.database import Base, SessionLocal, engine, get_db
from models import Exercise, Plan, PlanDay, PlanDayExercise


@pytest.fixture(scope="function")
def db_session():
    """Session on a brand-new schema."""
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test's session."""
    from main import app

    def _override_get_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_exercise(db_session):
    def _make(name="Bench Press", weight_increment=5.0, is_custom=False):
        exercise = Exercise(name=name, weight_increment=weight_increment, is_custom=is_custom)
        db_session.add(exercise)
        db_session.commit()
        return exercise
    return _make


@pytest.fixture
def make_plan(db_session):
    """
    Build a plan from a compact description:

        make_plan([(1, "Push", [(exercise, sets, reps, weight)]), ...])
    """
    def _make(days, name="Test Plan"):
        plan = Plan(name=name, duration_weeks=6)
        db_session.add(plan)
        db_session.flush()
        for order, (day_of_week, day_name, exercises) in enumerate(days):
            day = PlanDay(plan_id=plan.id, day_of_week=day_of_week, name=day_name, sort_order=order)
            db_session.add(day)
            db_session.flush()
            for ex_order, (exercise, sets, reps, weight) in enumerate(exercises):
                db_session.add(PlanDayExercise(
                    plan_day_id=day.id,
                    exercise_id=exercise.id,
                    sets=sets,
                    reps=reps,
                    weight=weight,
                    rest_seconds=90,
                    sort_order=ex_order,
                    min_reps=8,
                    max_reps=12,
                ))
        db_session.commit()
        return plan
    return _make


@pytest.fixture
def monday():
    """A Monday, so Sunday-based day offsets are easy to reason about."""
    return date(2024, 1, 1)


@pytest.fixture
def bench(make_exercise):
    return make_exercise("Bench Press", weight_increment=5.0, is_custom=False)


@pytest.fixture
def push_plan(make_plan, bench):
    """One Monday day: bench 3 x 8 @ 100."""
    return make_plan([(1, "Push", [(bench, 3, 8, 100.0)])])


@pytest.fixture
def active_mesocycle(db_session, push_plan, monday):
    """Started mesocycle on push_plan; 7 workouts, 20 sets."""
    from services.mesocycle_service import MesocycleService

    service = MesocycleService(db_session)
    mesocycle = service.create(push_plan.id, monday)
    db_session.commit()
    service.start(mesocycle.id)
    return mesocycle


@pytest.fixture
def workouts_by_week(db_session, active_mesocycle):
    from sqlalchemy import select
    from models import Workout

    workouts = db_session.scalars(
        select(Workout).where(Workout.mesocycle_id == active_mesocycle.id)
    ).all()
    return {w.week_number: w for w in workouts}
