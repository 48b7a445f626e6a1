"""
Mesocycles API Router

Endpoints for:
- Creating a training block from a plan
- Starting it (generates every workout and set for 7 weeks)
- Completing or cancelling the active block
- Week-by-week progress summaries
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from uuid import UUID

from core.database import get_db
from core.exceptions import NotFoundError
from schemas import MesocycleCreate, MesocycleResponse, envelope
from services.mesocycle_service import MesocycleService
from tasks.training_block_tasks import generate_training_block_task

router = APIRouter(prefix="/v1/mesocycles", tags=["Mesocycles"])


@router.get("")
def list_mesocycles(db: Session = Depends(get_db)):
    return envelope([MesocycleResponse.model_validate(m) for m in MesocycleService(db).list()])


@router.get("/active")
def get_active_mesocycle(db: Session = Depends(get_db)):
    return envelope(MesocycleService(db).get_active())


@router.get("/{mesocycle_id}")
def get_mesocycle(mesocycle_id: UUID, db: Session = Depends(get_db)):
    details = MesocycleService(db).get_by_id(mesocycle_id)
    if details is None:
        raise NotFoundError("Mesocycle", mesocycle_id)
    return envelope(details)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_mesocycle(request: MesocycleCreate, db: Session = Depends(get_db)):
    mesocycle = MesocycleService(db).create(request.plan_id, request.start_date)
    db.refresh(mesocycle)
    return envelope(MesocycleResponse.model_validate(mesocycle))


# ============ Lifecycle ============

@router.put("/{mesocycle_id}/start")
def start_mesocycle(
    mesocycle_id: UUID,
    response: Response,
    background: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    """
    Start a pending mesocycle.

    With background=true the checks run now and generation is queued on the
    worker (202); the mesocycle becomes active once the block is written.
    """
    service = MesocycleService(db)
    if background:
        mesocycle = service.get_pending_for_start(mesocycle_id)
        generate_training_block_task.delay(str(mesocycle.id))
        response.status_code = status.HTTP_202_ACCEPTED
        return envelope(MesocycleResponse.model_validate(mesocycle))

    mesocycle = service.start(mesocycle_id)
    db.refresh(mesocycle)
    return envelope(MesocycleResponse.model_validate(mesocycle))


@router.put("/{mesocycle_id}/complete")
def complete_mesocycle(mesocycle_id: UUID, db: Session = Depends(get_db)):
    mesocycle = MesocycleService(db).complete(mesocycle_id)
    db.refresh(mesocycle)
    return envelope(MesocycleResponse.model_validate(mesocycle))


@router.put("/{mesocycle_id}/cancel")
def cancel_mesocycle(mesocycle_id: UUID, db: Session = Depends(get_db)):
    mesocycle = MesocycleService(db).cancel(mesocycle_id)
    db.refresh(mesocycle)
    return envelope(MesocycleResponse.model_validate(mesocycle))
