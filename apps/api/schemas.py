from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, date
from uuid import UUID
from typing import Any, Optional, List

from services.training_block.constants import MESOCYCLE_WEEKS


def envelope(data: Any) -> dict:
    """Success envelope shared by every endpoint."""
    return {"success": True, "data": data}


# ============ Exercises ============

class ExerciseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    weight_increment: float = Field(default=5.0, gt=0)
    is_custom: bool = True


class ExerciseUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    weight_increment: Optional[float] = Field(default=None, gt=0)


class ExerciseResponse(BaseModel):
    id: UUID
    name: str
    weight_increment: float
    is_custom: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExerciseHistorySet(BaseModel):
    set_number: int
    weight: float
    reps: int


class ExerciseHistoryEntry(BaseModel):
    workout_id: UUID
    date: str
    week_number: int
    mesocycle_id: UUID
    sets: List[ExerciseHistorySet]
    best_weight: float
    best_set_reps: int


class PersonalRecord(BaseModel):
    weight: float
    reps: int
    date: str


class ExerciseHistory(BaseModel):
    exercise_id: UUID
    exercise_name: str
    entries: List[ExerciseHistoryEntry]
    personal_record: Optional[PersonalRecord] = None


# ============ Plans ============

class PlanCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    duration_weeks: int = Field(default=6, ge=1)


class PlanUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    duration_weeks: Optional[int] = Field(default=None, ge=1)


class PlanResponse(BaseModel):
    id: UUID
    name: str
    duration_weeks: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlanDayCreate(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    name: str = Field(min_length=1, max_length=100)
    sort_order: int = Field(default=0, ge=0)


class PlanDayUpdate(BaseModel):
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    sort_order: Optional[int] = Field(default=None, ge=0)


class PlanDayResponse(BaseModel):
    id: UUID
    plan_id: UUID
    day_of_week: int
    name: str
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class PlanDayExerciseCreate(BaseModel):
    exercise_id: UUID
    sets: int = Field(default=2, ge=1, le=20)
    reps: int = Field(default=8, ge=1, le=100)
    weight: float = Field(default=0.0, ge=0)
    rest_seconds: int = Field(default=60, ge=0)
    sort_order: int = Field(default=0, ge=0)
    min_reps: int = Field(default=8, ge=1)
    max_reps: int = Field(default=12, ge=1)


class PlanDayExerciseUpdate(BaseModel):
    sets: Optional[int] = Field(default=None, ge=1, le=20)
    reps: Optional[int] = Field(default=None, ge=1, le=100)
    weight: Optional[float] = Field(default=None, ge=0)
    rest_seconds: Optional[int] = Field(default=None, ge=0)
    sort_order: Optional[int] = Field(default=None, ge=0)
    min_reps: Optional[int] = Field(default=None, ge=1)
    max_reps: Optional[int] = Field(default=None, ge=1)


class PlanDayExerciseResponse(BaseModel):
    id: UUID
    plan_day_id: UUID
    exercise_id: UUID
    sets: int
    reps: int
    weight: float
    rest_seconds: int
    sort_order: int
    min_reps: int
    max_reps: int

    model_config = ConfigDict(from_attributes=True)


# ============ Mesocycles ============

class MesocycleCreate(BaseModel):
    plan_id: UUID
    start_date: date


class MesocycleResponse(BaseModel):
    id: UUID
    plan_id: UUID
    start_date: date
    current_week: int
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkoutSummary(BaseModel):
    id: UUID
    plan_day_id: UUID
    plan_day_name: str
    day_of_week: int
    week_number: int
    scheduled_date: date
    status: str
    completed_at: Optional[datetime] = None
    exercise_count: int
    set_count: int
    completed_set_count: int


class WeekSummary(BaseModel):
    week_number: int
    is_deload: bool
    workouts: List[WorkoutSummary]
    total_workouts: int
    completed_workouts: int
    skipped_workouts: int


class MesocycleWithDetails(MesocycleResponse):
    plan_name: str
    weeks: List[WeekSummary]
    total_workouts: int
    completed_workouts: int


# ============ Workouts ============

class WorkoutCreate(BaseModel):
    mesocycle_id: UUID
    plan_day_id: UUID
    week_number: int = Field(ge=1, le=MESOCYCLE_WEEKS)
    scheduled_date: date


class WorkoutUpdate(BaseModel):
    """Rescheduling only; status changes go through start/complete/skip."""
    scheduled_date: Optional[date] = None


class WorkoutSetCreate(BaseModel):
    exercise_id: UUID
    set_number: int = Field(ge=1)
    target_reps: int = Field(ge=1)
    target_weight: float = Field(ge=0)


class WorkoutResponse(BaseModel):
    id: UUID
    mesocycle_id: UUID
    plan_day_id: UUID
    week_number: int
    scheduled_date: date
    status: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WorkoutSetResponse(BaseModel):
    id: UUID
    workout_id: UUID
    exercise_id: UUID
    set_number: int
    target_reps: int
    target_weight: float
    actual_reps: Optional[int] = None
    actual_weight: Optional[float] = None
    status: str

    model_config = ConfigDict(from_attributes=True)


class WarmupSetResponse(BaseModel):
    warmup_number: int
    target_weight: float
    target_reps: int

    model_config = ConfigDict(from_attributes=True)


class WorkoutExercise(BaseModel):
    exercise_id: UUID
    exercise_name: str
    rest_seconds: int
    sets: List[WorkoutSetResponse]
    warmup_sets: List[WarmupSetResponse]
    total_sets: int
    completed_sets: int


class WorkoutWithExercises(WorkoutResponse):
    plan_day_name: str
    exercises: List[WorkoutExercise]


class LogSetRequest(BaseModel):
    actual_reps: int = Field(ge=0)
    actual_weight: float = Field(ge=0)


class ModifySetCountResult(BaseModel):
    current_workout_set: Optional[WorkoutSetResponse] = None
    future_workouts_affected: int
    future_sets_modified: int
