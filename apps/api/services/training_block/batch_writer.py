"""
Batched Writer

Commits records in sequential batches of at most `batch_limit` write
operations. One record is one operation. A failed commit rolls back the
open batch and raises; batches already committed stay committed, so the
caller recovers by regenerating the whole block.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import TrainingBlockWriteError

from .constants import MAX_BATCH_OPERATIONS

logger = logging.getLogger(__name__)


@dataclass
class WriteSummary:
    batches: int
    operations: int


def chunk(records: Sequence, size: int) -> Iterator[List]:
    for start in range(0, len(records), size):
        yield list(records[start:start + size])


class BatchedWriter:
    def __init__(self, session: Session, batch_limit: int = MAX_BATCH_OPERATIONS):
        if batch_limit < 1 or batch_limit > MAX_BATCH_OPERATIONS:
            raise ValueError(
                f"batch_limit must be between 1 and {MAX_BATCH_OPERATIONS}, got {batch_limit}"
            )
        self.session = session
        self.batch_limit = batch_limit

    def write(self, records: Sequence) -> WriteSummary:
        committed = 0
        operations = 0

        for batch in chunk(records, self.batch_limit):
            try:
                self.session.add_all(batch)
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.error(
                    f"Batch {committed + 1} failed after {committed} committed batches: {e}",
                    exc_info=True,
                )
                raise TrainingBlockWriteError(
                    f"Failed to write batch {committed + 1}", committed_batches=committed
                ) from e

            committed += 1
            operations += len(batch)
            logger.debug(f"Committed batch {committed} ({len(batch)} operations)")

        return WriteSummary(batches=committed, operations=operations)
