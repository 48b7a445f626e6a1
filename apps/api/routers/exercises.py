"""
Exercises API Router

Endpoints for:
- Exercise library CRUD
- Built-in vs custom exercise lists
- Per-exercise lifting history and personal record
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from uuid import UUID

from core.database import get_db
from core.exceptions import ConflictError, NotFoundError
from models import Exercise, PlanDayExercise, WorkoutSet
from schemas import ExerciseCreate, ExerciseResponse, ExerciseUpdate, envelope
from services.exercise_history import ExerciseHistoryService

router = APIRouter(prefix="/v1/exercises", tags=["Exercises"])


def _get_exercise(db: Session, exercise_id: UUID) -> Exercise:
    exercise = db.get(Exercise, exercise_id)
    if exercise is None:
        raise NotFoundError("Exercise", exercise_id)
    return exercise


def _list(db: Session, is_custom=None):
    stmt = select(Exercise).order_by(Exercise.name)
    if is_custom is not None:
        stmt = stmt.where(Exercise.is_custom == is_custom)
    return [ExerciseResponse.model_validate(e) for e in db.scalars(stmt)]


# ============ Library ============

@router.get("")
def list_exercises(db: Session = Depends(get_db)):
    return envelope(_list(db))


@router.get("/default")
def list_default_exercises(db: Session = Depends(get_db)):
    return envelope(_list(db, is_custom=False))


@router.get("/custom")
def list_custom_exercises(db: Session = Depends(get_db)):
    return envelope(_list(db, is_custom=True))


@router.get("/{exercise_id}")
def get_exercise(exercise_id: UUID, db: Session = Depends(get_db)):
    return envelope(ExerciseResponse.model_validate(_get_exercise(db, exercise_id)))


@router.get("/{exercise_id}/history")
def get_exercise_history(exercise_id: UUID, db: Session = Depends(get_db)):
    return envelope(ExerciseHistoryService(db).get_history(exercise_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_exercise(request: ExerciseCreate, db: Session = Depends(get_db)):
    exercise = Exercise(**request.model_dump())
    db.add(exercise)
    db.flush()
    db.refresh(exercise)
    return envelope(ExerciseResponse.model_validate(exercise))


@router.put("/{exercise_id}")
def update_exercise(exercise_id: UUID, request: ExerciseUpdate, db: Session = Depends(get_db)):
    exercise = _get_exercise(db, exercise_id)
    for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(exercise, field, value)
    db.flush()
    db.refresh(exercise)
    return envelope(ExerciseResponse.model_validate(exercise))


@router.delete("/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exercise(exercise_id: UUID, db: Session = Depends(get_db)):
    exercise = _get_exercise(db, exercise_id)
    in_use = db.scalars(
        select(PlanDayExercise.id).where(PlanDayExercise.exercise_id == exercise_id)
    ).first()
    if in_use is not None:
        raise ConflictError("Cannot delete exercise that is used in plans")
    logged = db.scalars(
        select(WorkoutSet.id).where(WorkoutSet.exercise_id == exercise_id)
    ).first()
    if logged is not None:
        raise ConflictError("Cannot delete exercise that has workout history")
    db.delete(exercise)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
