"""
Workouts API Router

Endpoints for:
- Today's workout
- Workout details with sets grouped by exercise (and warm-up ramps)
- Start / complete / skip transitions
- Adding or removing a set for one exercise
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from core.database import get_db
from core.exceptions import NotFoundError, ValidationError
from models import Exercise, Mesocycle, PlanDay, Workout, WorkoutSet
from schemas import (
    ModifySetCountResult,
    WorkoutCreate,
    WorkoutResponse,
    WorkoutSetCreate,
    WorkoutSetResponse,
    WorkoutUpdate,
    envelope,
)
from services.workout_service import WorkoutService
from services.workout_set_service import SetCountChange, WorkoutSetService

router = APIRouter(prefix="/v1/workouts", tags=["Workouts"])


def _set_count_result(change: SetCountChange) -> ModifySetCountResult:
    return ModifySetCountResult(
        current_workout_set=(
            WorkoutSetResponse.model_validate(change.current_workout_set)
            if change.current_workout_set is not None else None
        ),
        future_workouts_affected=change.future_workouts_affected,
        future_sets_modified=change.future_sets_modified,
    )


# ============ Lookups ============

@router.get("")
def list_workouts(mesocycle_id: Optional[UUID] = Query(default=None), db: Session = Depends(get_db)):
    workouts = WorkoutService(db).list(mesocycle_id)
    return envelope([WorkoutResponse.model_validate(w) for w in workouts])


@router.get("/today")
def get_todays_workout(db: Session = Depends(get_db)):
    return envelope(WorkoutService(db).get_todays_workout())


@router.get("/{workout_id}")
def get_workout(workout_id: UUID, db: Session = Depends(get_db)):
    return envelope(WorkoutService(db).get_with_exercises(workout_id))


@router.get("/{workout_id}/sets")
def list_workout_sets(workout_id: UUID, db: Session = Depends(get_db)):
    service = WorkoutService(db)
    service.get(workout_id)
    return envelope([WorkoutSetResponse.model_validate(s) for s in service.sets_for(workout_id)])


# ============ Writes ============

@router.post("", status_code=status.HTTP_201_CREATED)
def create_workout(request: WorkoutCreate, db: Session = Depends(get_db)):
    mesocycle = db.get(Mesocycle, request.mesocycle_id)
    if mesocycle is None:
        raise NotFoundError("Mesocycle", request.mesocycle_id)
    plan_day = db.get(PlanDay, request.plan_day_id)
    if plan_day is None:
        raise NotFoundError("PlanDay", request.plan_day_id)
    if plan_day.plan_id != mesocycle.plan_id:
        raise ValidationError("Plan day does not belong to the mesocycle's plan")

    workout = Workout(**request.model_dump(), status="pending")
    db.add(workout)
    db.flush()
    return envelope(WorkoutResponse.model_validate(workout))


@router.put("/{workout_id}")
def update_workout(workout_id: UUID, request: WorkoutUpdate, db: Session = Depends(get_db)):
    workout = WorkoutService(db).get(workout_id)
    for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(workout, field, value)
    db.flush()
    return envelope(WorkoutResponse.model_validate(workout))


@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workout(workout_id: UUID, db: Session = Depends(get_db)):
    workout = WorkoutService(db).get(workout_id)
    db.delete(workout)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{workout_id}/sets", status_code=status.HTTP_201_CREATED)
def create_workout_set(workout_id: UUID, request: WorkoutSetCreate, db: Session = Depends(get_db)):
    WorkoutService(db).get(workout_id)
    if db.get(Exercise, request.exercise_id) is None:
        raise NotFoundError("Exercise", request.exercise_id)
    workout_set = WorkoutSet(workout_id=workout_id, status="pending", **request.model_dump())
    db.add(workout_set)
    db.flush()
    return envelope(WorkoutSetResponse.model_validate(workout_set))


# ============ Lifecycle ============

@router.put("/{workout_id}/start")
def start_workout(workout_id: UUID, db: Session = Depends(get_db)):
    return envelope(WorkoutResponse.model_validate(WorkoutService(db).start(workout_id)))


@router.put("/{workout_id}/complete")
def complete_workout(workout_id: UUID, db: Session = Depends(get_db)):
    return envelope(WorkoutResponse.model_validate(WorkoutService(db).complete(workout_id)))


@router.put("/{workout_id}/skip")
def skip_workout(workout_id: UUID, db: Session = Depends(get_db)):
    return envelope(WorkoutResponse.model_validate(WorkoutService(db).skip(workout_id)))


# ============ Set count ============

@router.post("/{workout_id}/exercises/{exercise_id}/sets/add")
def add_set(workout_id: UUID, exercise_id: UUID, db: Session = Depends(get_db)):
    return envelope(_set_count_result(WorkoutSetService(db).add_set(workout_id, exercise_id)))


@router.post("/{workout_id}/exercises/{exercise_id}/sets/remove")
def remove_set(workout_id: UUID, exercise_id: UUID, db: Session = Depends(get_db)):
    return envelope(_set_count_result(WorkoutSetService(db).remove_set(workout_id, exercise_id)))
