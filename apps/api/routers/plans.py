"""
Plans API Router

Endpoints for:
- Plan templates
- Plan days (which weekday, in which order)
- Plan day exercises (baseline sets/reps/weight)

Edits to a plan with an active mesocycle are pushed into that mesocycle's
pending workouts.
"""

import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from core.database import get_db
from core.exceptions import ConflictError, NotFoundError
from models import Exercise, Mesocycle, Plan, PlanDay, PlanDayExercise, Workout
from schemas import (
    PlanCreate,
    PlanDayCreate,
    PlanDayExerciseCreate,
    PlanDayExerciseResponse,
    PlanDayExerciseUpdate,
    PlanDayResponse,
    PlanDayUpdate,
    PlanResponse,
    PlanUpdate,
    envelope,
)
from services.plan_modification import PlanModificationService
from services.training_block.constants import MesocycleStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/plans", tags=["Plans"])


# ============ Helpers ============

def _get_plan(db: Session, plan_id: UUID) -> Plan:
    plan = db.get(Plan, plan_id)
    if plan is None:
        raise NotFoundError("Plan", plan_id)
    return plan


def _get_day(db: Session, plan_id: UUID, day_id: UUID) -> PlanDay:
    day = db.get(PlanDay, day_id)
    if day is None or day.plan_id != plan_id:
        raise NotFoundError("PlanDay", day_id)
    return day


def _get_day_exercise(db: Session, day_id: UUID, pde_id: UUID) -> PlanDayExercise:
    pde = db.get(PlanDayExercise, pde_id)
    if pde is None or pde.plan_day_id != day_id:
        raise NotFoundError("PlanDayExercise", pde_id)
    return pde


def _active_mesocycle(db: Session, plan_id: UUID) -> Optional[Mesocycle]:
    return db.scalars(
        select(Mesocycle).where(
            Mesocycle.plan_id == plan_id,
            Mesocycle.status == MesocycleStatus.ACTIVE.value,
        )
    ).first()


def _sync_day(db: Session, mesocycle: Mesocycle, day: PlanDay) -> None:
    db.flush()
    plan_exercises = list(db.scalars(
        select(PlanDayExercise).where(PlanDayExercise.plan_day_id == day.id)
    ))
    exercise_ids = [pde.exercise_id for pde in plan_exercises]
    exercise_map = {
        e.id: e for e in db.scalars(select(Exercise).where(Exercise.id.in_(exercise_ids)))
    } if exercise_ids else {}

    result = PlanModificationService(db).sync_plan_to_mesocycle(
        mesocycle.id, day.id, plan_exercises, exercise_map
    )
    for warning in result.warnings:
        logger.warning(warning)


def _sync_if_active(db: Session, plan_id: UUID, day: PlanDay) -> None:
    mesocycle = _active_mesocycle(db, plan_id)
    if mesocycle is not None:
        _sync_day(db, mesocycle, day)


# ============ Plans ============

@router.get("")
def list_plans(db: Session = Depends(get_db)):
    plans = db.scalars(select(Plan).order_by(Plan.created_at.desc(), Plan.name))
    return envelope([PlanResponse.model_validate(p) for p in plans])


@router.get("/{plan_id}")
def get_plan(plan_id: UUID, db: Session = Depends(get_db)):
    return envelope(PlanResponse.model_validate(_get_plan(db, plan_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_plan(request: PlanCreate, db: Session = Depends(get_db)):
    plan = Plan(**request.model_dump())
    db.add(plan)
    db.flush()
    db.refresh(plan)
    return envelope(PlanResponse.model_validate(plan))


@router.put("/{plan_id}")
def update_plan(plan_id: UUID, request: PlanUpdate, db: Session = Depends(get_db)):
    plan = _get_plan(db, plan_id)
    for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(plan, field, value)
    db.flush()

    mesocycle = _active_mesocycle(db, plan_id)
    if mesocycle is not None:
        for day in plan.days:
            _sync_day(db, mesocycle, day)

    db.refresh(plan)
    return envelope(PlanResponse.model_validate(plan))


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(plan_id: UUID, db: Session = Depends(get_db)):
    plan = _get_plan(db, plan_id)
    statuses = set(db.scalars(select(Mesocycle.status).where(Mesocycle.plan_id == plan_id)))
    if statuses & {MesocycleStatus.PENDING.value, MesocycleStatus.ACTIVE.value}:
        raise ConflictError("Cannot delete plan that has active mesocycles")
    if statuses:
        raise ConflictError("Cannot delete plan that has mesocycle history")
    db.delete(plan)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============ Plan Days ============

@router.get("/{plan_id}/days")
def list_plan_days(plan_id: UUID, db: Session = Depends(get_db)):
    plan = _get_plan(db, plan_id)
    return envelope([PlanDayResponse.model_validate(d) for d in plan.days])


@router.post("/{plan_id}/days", status_code=status.HTTP_201_CREATED)
def create_plan_day(plan_id: UUID, request: PlanDayCreate, db: Session = Depends(get_db)):
    _get_plan(db, plan_id)
    day = PlanDay(plan_id=plan_id, **request.model_dump())
    db.add(day)
    db.flush()
    return envelope(PlanDayResponse.model_validate(day))


@router.put("/{plan_id}/days/{day_id}")
def update_plan_day(plan_id: UUID, day_id: UUID, request: PlanDayUpdate, db: Session = Depends(get_db)):
    day = _get_day(db, plan_id, day_id)
    for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(day, field, value)
    db.flush()
    return envelope(PlanDayResponse.model_validate(day))


@router.delete("/{plan_id}/days/{day_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan_day(plan_id: UUID, day_id: UUID, db: Session = Depends(get_db)):
    day = _get_day(db, plan_id, day_id)
    if _active_mesocycle(db, plan_id) is not None:
        raise ConflictError("Cannot delete a plan day while the plan has an active mesocycle")
    if db.scalars(select(Workout.id).where(Workout.plan_day_id == day.id)).first() is not None:
        raise ConflictError("Cannot delete plan day that has workout history")
    db.delete(day)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============ Plan Day Exercises ============

@router.get("/{plan_id}/days/{day_id}/exercises")
def list_plan_day_exercises(plan_id: UUID, day_id: UUID, db: Session = Depends(get_db)):
    day = _get_day(db, plan_id, day_id)
    return envelope([PlanDayExerciseResponse.model_validate(e) for e in day.exercises])


@router.post("/{plan_id}/days/{day_id}/exercises", status_code=status.HTTP_201_CREATED)
def create_plan_day_exercise(
    plan_id: UUID,
    day_id: UUID,
    request: PlanDayExerciseCreate,
    db: Session = Depends(get_db),
):
    day = _get_day(db, plan_id, day_id)
    if db.get(Exercise, request.exercise_id) is None:
        raise NotFoundError("Exercise", request.exercise_id)

    pde = PlanDayExercise(plan_day_id=day.id, **request.model_dump())
    db.add(pde)
    _sync_if_active(db, plan_id, day)
    db.flush()
    return envelope(PlanDayExerciseResponse.model_validate(pde))


@router.put("/{plan_id}/days/{day_id}/exercises/{pde_id}")
def update_plan_day_exercise(
    plan_id: UUID,
    day_id: UUID,
    pde_id: UUID,
    request: PlanDayExerciseUpdate,
    db: Session = Depends(get_db),
):
    day = _get_day(db, plan_id, day_id)
    pde = _get_day_exercise(db, day.id, pde_id)
    for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(pde, field, value)
    _sync_if_active(db, plan_id, day)
    db.flush()
    return envelope(PlanDayExerciseResponse.model_validate(pde))


@router.delete("/{plan_id}/days/{day_id}/exercises/{pde_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan_day_exercise(plan_id: UUID, day_id: UUID, pde_id: UUID, db: Session = Depends(get_db)):
    day = _get_day(db, plan_id, day_id)
    pde = _get_day_exercise(db, day.id, pde_id)
    db.delete(pde)
    _sync_if_active(db, plan_id, day)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
