"""
Celery tasks for training block generation.

Starting a mesocycle writes several hundred rows. Out of request, the task
retries the whole generation on failure; the generator clears any partial
block from the previous attempt first.
"""
import logging
from typing import Dict, Optional
from uuid import UUID

from celery import Task
from sqlalchemy.orm import Session

from core.config import settings
from core.database import get_db_sync
from core.exceptions import TrainingBlockWriteError
from models import Mesocycle
from services.mesocycle_service import MesocycleService
from services.training_block import MesocycleStatus
from tasks import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="tasks.generate_training_block",
    bind=True,
    autoretry_for=(TrainingBlockWriteError,),
    retry_backoff=True,
    retry_backoff_max=60,
    max_retries=settings.TRAINING_BLOCK_MAX_RETRIES,
)
def generate_training_block_task(self: Task, mesocycle_id: str) -> Dict:
    """
    Generate every workout and set of a pending mesocycle, then activate it.

    Args:
        mesocycle_id: UUID string of the mesocycle

    Returns:
        Dictionary with generation results
    """
    db: Optional[Session] = None
    try:
        db = get_db_sync()
        mesocycle = db.get(Mesocycle, UUID(mesocycle_id))
        if mesocycle is None:
            return {"status": "error", "error": f"Mesocycle with id {mesocycle_id} not found"}
        if mesocycle.status == MesocycleStatus.ACTIVE.value:
            return {"status": "skipped", "reason": "already_active"}

        service = MesocycleService(db)
        service.validate_startable(mesocycle)
        result = service.generator.generate(db, mesocycle)
        service.activate(mesocycle)

        logger.info(
            f"Training block generated for mesocycle {mesocycle_id} "
            f"(attempt {self.request.retries + 1})"
        )
        return {
            "status": "success",
            "mesocycle_id": mesocycle_id,
            "workouts": result.workouts,
            "sets": result.sets,
            "batches": result.batches,
            "purged_workouts": result.purged_workouts,
        }
    except TrainingBlockWriteError:
        logger.warning(
            f"Training block generation failed for mesocycle {mesocycle_id}, "
            f"attempt {self.request.retries + 1}"
        )
        raise
    finally:
        if db is not None:
            db.close()
