"""
Batched Writer Tests

The session is a mock; these tests pin down batching and failure behaviour.
"""

import pytest
from unittest.mock import MagicMock

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import TrainingBlockWriteError
from services.training_block import BatchedWriter, MAX_BATCH_OPERATIONS
from services.training_block.batch_writer import chunk


class TestChunk:
    def test_even_split(self):
        assert list(chunk(list(range(6)), 3)) == [[0, 1, 2], [3, 4, 5]]

    def test_remainder(self):
        assert list(chunk(list(range(5)), 2)) == [[0, 1], [2, 3], [4]]

    def test_empty(self):
        assert list(chunk([], 500)) == []


class TestBatchedWriter:
    def test_rejects_limit_above_ceiling(self):
        with pytest.raises(ValueError):
            BatchedWriter(MagicMock(), batch_limit=MAX_BATCH_OPERATIONS + 1)

    def test_rejects_zero_limit(self):
        with pytest.raises(ValueError):
            BatchedWriter(MagicMock(), batch_limit=0)

    def test_commits_each_batch(self):
        session = MagicMock()
        summary = BatchedWriter(session).write(list(range(1200)))

        assert summary.batches == 3
        assert summary.operations == 1200
        assert session.commit.call_count == 3
        sizes = [len(call.args[0]) for call in session.add_all.call_args_list]
        assert sizes == [500, 500, 200]

    def test_no_batch_exceeds_limit(self):
        session = MagicMock()
        BatchedWriter(session, batch_limit=7).write(list(range(50)))

        sizes = [len(call.args[0]) for call in session.add_all.call_args_list]
        assert max(sizes) <= 7
        assert sum(sizes) == 50

    def test_nothing_to_write(self):
        session = MagicMock()
        summary = BatchedWriter(session).write([])

        assert summary.batches == 0
        session.commit.assert_not_called()

    def test_failed_batch_rolls_back_and_raises(self):
        session = MagicMock()
        session.commit.side_effect = [None, SQLAlchemyError("disk full")]

        with pytest.raises(TrainingBlockWriteError) as exc_info:
            BatchedWriter(session, batch_limit=10).write(list(range(30)))

        assert exc_info.value.committed_batches == 1
        assert exc_info.value.status_code == 500
        session.rollback.assert_called_once()
        # The third batch is never attempted
        assert session.add_all.call_count == 2
