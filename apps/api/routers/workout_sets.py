"""
Workout Sets API Router

Log, skip or un-log a single set.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from core.database import get_db
from schemas import LogSetRequest, WorkoutSetResponse, envelope
from services.workout_set_service import WorkoutSetService

router = APIRouter(prefix="/v1/workout-sets", tags=["Workout Sets"])


@router.put("/{set_id}/log")
def log_set(set_id: UUID, request: LogSetRequest, db: Session = Depends(get_db)):
    workout_set = WorkoutSetService(db).log(set_id, request.actual_reps, request.actual_weight)
    return envelope(WorkoutSetResponse.model_validate(workout_set))


@router.put("/{set_id}/skip")
def skip_set(set_id: UUID, db: Session = Depends(get_db)):
    return envelope(WorkoutSetResponse.model_validate(WorkoutSetService(db).skip(set_id)))


@router.put("/{set_id}/unlog")
def unlog_set(set_id: UUID, db: Session = Depends(get_db)):
    return envelope(WorkoutSetResponse.model_validate(WorkoutSetService(db).unlog(set_id)))
