"""
Mesocycle Service Tests

Lifecycle of a training block against a real (SQLite) session.
"""

import pytest
from datetime import date
from unittest.mock import MagicMock
from uuid import uuid4

from sqlalchemy import func, select

from core.exceptions import ConflictError, NotFoundError, TrainingBlockWriteError, ValidationError
from models import Mesocycle, Plan, Workout, WorkoutSet
from services.mesocycle_service import MesocycleService
from services.training_block import TrainingBlockGenerator


def count(db, model, *where):
    return db.scalar(select(func.count()).select_from(model).where(*where))


class TestCreate:
    def test_creates_pending_mesocycle(self, db_session, push_plan, monday):
        mesocycle = MesocycleService(db_session).create(push_plan.id, monday)

        assert mesocycle.status == "pending"
        assert mesocycle.current_week == 1
        assert mesocycle.start_date == monday
        assert count(db_session, Workout) == 0

    def test_unknown_plan(self, db_session, monday):
        with pytest.raises(NotFoundError):
            MesocycleService(db_session).create(uuid4(), monday)

    def test_plan_without_days(self, db_session, monday):
        plan = Plan(name="Empty", duration_weeks=6)
        db_session.add(plan)
        db_session.commit()

        with pytest.raises(ValidationError) as exc_info:
            MesocycleService(db_session).create(plan.id, monday)
        assert exc_info.value.detail == "Plan has no workout days configured"


class TestStart:
    def test_generates_block_and_activates(self, db_session, active_mesocycle):
        assert active_mesocycle.status == "active"
        assert count(db_session, Workout, Workout.mesocycle_id == active_mesocycle.id) == 7
        # 6 weeks x 3 sets + 2 deload sets
        assert count(db_session, WorkoutSet) == 20

    def test_workouts_scheduled_weekly(self, db_session, active_mesocycle):
        dates = db_session.scalars(
            select(Workout.scheduled_date)
            .where(Workout.mesocycle_id == active_mesocycle.id)
            .order_by(Workout.week_number)
        ).all()
        assert dates[0] == date(2024, 1, 1)
        assert dates[6] == date(2024, 2, 12)

    def test_only_pending_can_start(self, db_session, active_mesocycle):
        with pytest.raises(ValidationError) as exc_info:
            MesocycleService(db_session).start(active_mesocycle.id)
        assert exc_info.value.detail == "Only pending mesocycles can be started"

    def test_one_active_at_a_time(self, db_session, active_mesocycle, push_plan):
        service = MesocycleService(db_session)
        second = service.create(push_plan.id, date(2024, 3, 4))
        db_session.commit()

        with pytest.raises(ConflictError):
            service.start(second.id)
        assert second.status == "pending"

    def test_unknown_mesocycle(self, db_session):
        with pytest.raises(NotFoundError):
            MesocycleService(db_session).start(uuid4())

    def test_small_batches_write_the_same_block(self, db_session, push_plan, monday):
        service = MesocycleService(db_session, generator=TrainingBlockGenerator(batch_limit=4))
        mesocycle = service.create(push_plan.id, monday)
        db_session.commit()

        service.start(mesocycle.id)

        assert count(db_session, Workout) == 7
        assert count(db_session, WorkoutSet) == 20

    def test_failed_generation_leaves_mesocycle_pending(self, db_session, push_plan, monday):
        generator = MagicMock()
        generator.generate.side_effect = TrainingBlockWriteError("Failed to write batch 2", committed_batches=1)
        service = MesocycleService(db_session, generator=generator)
        mesocycle = service.create(push_plan.id, monday)
        db_session.commit()

        with pytest.raises(TrainingBlockWriteError):
            service.start(mesocycle.id)

        db_session.refresh(mesocycle)
        assert mesocycle.status == "pending"


class TestRegeneration:
    def test_second_attempt_replaces_partial_block(self, db_session, push_plan, monday):
        service = MesocycleService(db_session)
        mesocycle = service.create(push_plan.id, monday)
        db_session.commit()

        generator = TrainingBlockGenerator()
        generator.generate(db_session, mesocycle)
        result = generator.generate(db_session, mesocycle)

        assert result.purged_workouts == 7
        assert result.workouts == 7
        assert count(db_session, Workout) == 7
        assert count(db_session, WorkoutSet) == 20


class TestDetails:
    def test_week_summaries(self, db_session, active_mesocycle):
        details = MesocycleService(db_session).get_by_id(active_mesocycle.id)

        assert details.plan_name == "Test Plan"
        assert details.total_workouts == 7
        assert details.completed_workouts == 0
        assert [w.week_number for w in details.weeks] == list(range(1, 8))
        assert [w.is_deload for w in details.weeks] == [False] * 6 + [True]

        first = details.weeks[0].workouts[0]
        assert first.plan_day_name == "Push"
        assert first.exercise_count == 1
        assert first.set_count == 3
        assert first.completed_set_count == 0
        assert details.weeks[6].workouts[0].set_count == 2

    def test_missing_returns_none(self, db_session):
        assert MesocycleService(db_session).get_by_id(uuid4()) is None

    def test_active_lookup(self, db_session, active_mesocycle):
        active = MesocycleService(db_session).get_active()
        assert active.id == active_mesocycle.id

    def test_no_active(self, db_session):
        assert MesocycleService(db_session).get_active() is None


class TestFinish:
    def test_complete(self, db_session, active_mesocycle):
        mesocycle = MesocycleService(db_session).complete(active_mesocycle.id)
        assert mesocycle.status == "completed"

    def test_cancel_keeps_workouts(self, db_session, active_mesocycle):
        mesocycle = MesocycleService(db_session).cancel(active_mesocycle.id)
        db_session.commit()

        assert mesocycle.status == "cancelled"
        assert count(db_session, Workout, Workout.mesocycle_id == active_mesocycle.id) == 7

    def test_pending_cannot_be_finished(self, db_session, push_plan, monday):
        service = MesocycleService(db_session)
        mesocycle = service.create(push_plan.id, monday)

        with pytest.raises(ValidationError) as exc_info:
            service.cancel(mesocycle.id)
        assert exc_info.value.detail == "Mesocycle is not active"

    def test_new_block_can_start_after_cancel(self, db_session, active_mesocycle, push_plan):
        service = MesocycleService(db_session)
        service.cancel(active_mesocycle.id)
        nxt = service.create(push_plan.id, date(2024, 3, 4))
        db_session.commit()

        assert service.start(nxt.id).status == "active"
        assert db_session.get(Mesocycle, active_mesocycle.id).status == "cancelled"
