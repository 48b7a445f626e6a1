from sqlalchemy import Column, Integer, Boolean, CheckConstraint, Float, Date, DateTime, ForeignKey, Text, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import uuid


# Status vocabularies, stored as plain text columns
MESOCYCLE_STATUSES = ("pending", "active", "completed", "cancelled")
WORKOUT_STATUSES = ("pending", "in_progress", "completed", "skipped")
SET_STATUSES = ("pending", "completed", "skipped")


class Exercise(Base):
    """A lift in the exercise library."""
    __tablename__ = "exercise"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    # Weight added when a planned week progresses (lbs)
    weight_increment = Column(Float, nullable=False, default=5.0)
    is_custom = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Plan(Base):
    """Template describing which exercises happen on which days."""
    __tablename__ = "plan"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    duration_weeks = Column(Integer, nullable=False, default=6)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    days = relationship(
        "PlanDay",
        back_populates="plan",
        cascade="all, delete",
        order_by="PlanDay.sort_order",
    )


class PlanDay(Base):
    __tablename__ = "plan_day"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid, ForeignKey("plan.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    name = Column(Text, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    plan = relationship("Plan", back_populates="days")
    exercises = relationship(
        "PlanDayExercise",
        back_populates="plan_day",
        cascade="all, delete",
        order_by="PlanDayExercise.sort_order",
    )

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_plan_day_day_of_week"),
    )


class PlanDayExercise(Base):
    """Baseline sets/reps/weight for one exercise on one plan day."""
    __tablename__ = "plan_day_exercise"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_day_id = Column(Uuid, ForeignKey("plan_day.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_id = Column(Uuid, ForeignKey("exercise.id"), nullable=False, index=True)
    sets = Column(Integer, nullable=False, default=2)
    reps = Column(Integer, nullable=False, default=8)
    weight = Column(Float, nullable=False, default=0.0)
    rest_seconds = Column(Integer, nullable=False, default=60)
    sort_order = Column(Integer, nullable=False, default=0)
    min_reps = Column(Integer, nullable=False, default=8)
    max_reps = Column(Integer, nullable=False, default=12)

    plan_day = relationship("PlanDay", back_populates="exercises")
    exercise = relationship("Exercise")


class Mesocycle(Base):
    """A generated 7-week training block (6 progressive weeks + deload)."""
    __tablename__ = "mesocycle"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid, ForeignKey("plan.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    current_week = Column(Integer, nullable=False, default=1)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    plan = relationship("Plan")

    __table_args__ = (
        Index("ix_mesocycle_status", "status"),
    )


class Workout(Base):
    __tablename__ = "workout"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    mesocycle_id = Column(Uuid, ForeignKey("mesocycle.id", ondelete="CASCADE"), nullable=False)
    plan_day_id = Column(Uuid, ForeignKey("plan_day.id"), nullable=False)
    week_number = Column(Integer, nullable=False)  # 1..7
    scheduled_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    sets = relationship(
        "WorkoutSet",
        back_populates="workout",
        cascade="all, delete",
        passive_deletes=True,
        order_by="WorkoutSet.set_number",
    )

    __table_args__ = (
        Index("ix_workout_mesocycle_week", "mesocycle_id", "week_number"),
        Index("ix_workout_scheduled_date", "scheduled_date"),
        Index("ix_workout_plan_day", "plan_day_id"),
    )


class WorkoutSet(Base):
    __tablename__ = "workout_set"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    workout_id = Column(Uuid, ForeignKey("workout.id", ondelete="CASCADE"), nullable=False)
    exercise_id = Column(Uuid, ForeignKey("exercise.id"), nullable=False)
    set_number = Column(Integer, nullable=False)  # 1-based within (workout, exercise)
    target_reps = Column(Integer, nullable=False)
    target_weight = Column(Float, nullable=False)
    actual_reps = Column(Integer, nullable=True)
    actual_weight = Column(Float, nullable=True)
    status = Column(Text, nullable=False, default="pending")

    workout = relationship("Workout", back_populates="sets")

    __table_args__ = (
        Index("ix_workout_set_workout_exercise", "workout_id", "exercise_id"),
        Index("ix_workout_set_exercise_status", "exercise_id", "status"),
    )
