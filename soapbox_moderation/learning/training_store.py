"""Append-only stores for training cases.

The store is the source of truth for the feedback loop. Cases are appended
once and never mutated or deleted. Identical content submitted twice is
stored twice.
"""

import logging
import threading

from sqlalchemy import Engine, func, select
from sqlalchemy.exc import SQLAlchemyError

from soapbox_moderation.exceptions import TrainingStoreError
from soapbox_moderation.models.base import Base, get_sync_session
from soapbox_moderation.models.training_case import TrainingCase
from soapbox_moderation.models.training_record import TrainingCaseRecord

logger = logging.getLogger(__name__)


def _log_recorded(case: TrainingCase) -> None:
    logger.info(
        f"Training case recorded: '{case.content[:50]}' "
        f"ai={case.ai_classification.priority.value} "
        f"human={case.human_decision.final_priority.value} "
        f"outcome={case.outcome.value}"
    )


def _to_cases(rows) -> tuple[TrainingCase, ...]:
    try:
        return tuple(row.to_case() for row in rows)
    except ValueError as e:
        # Unknown enum value in a stored row
        logger.error(f"Corrupt training case row: {e}")
        raise TrainingStoreError(f"Corrupt training case row: {e}") from e


class TrainingStore:
    """In-process append-only training log.

    Writers are serialised by a lock. Readers never take the lock: a case is
    published (counted) only after it has been fully appended, so a reader
    sees either the whole case or nothing.
    """

    def __init__(self) -> None:
        self._cases: list[TrainingCase] = []
        self._published = 0
        self._write_lock = threading.Lock()

    def append(self, case: TrainingCase) -> None:
        """Append a case. No deduplication.

        Args:
            case: Training case carrying both an AI classification and a
                human decision
        """
        if not isinstance(case, TrainingCase):
            raise TypeError(f"Expected TrainingCase, got {type(case).__name__}")

        with self._write_lock:
            self._cases.append(case)
            self._published = len(self._cases)

        _log_recorded(case)

    def recent(self, n: int) -> tuple[TrainingCase, ...]:
        """Return the n most recently appended cases, oldest first."""
        if n <= 0:
            return ()
        published = self._published
        return tuple(self._cases[max(0, published - n):published])

    def all(self) -> tuple[TrainingCase, ...]:
        """Return a snapshot of every published case."""
        published = self._published
        return tuple(self._cases[:published])

    def __len__(self) -> int:
        return self._published


class SqlTrainingStore:
    """Training log persisted to the 'training_cases' table.

    Same interface as TrainingStore. Storage failures raise
    TrainingStoreError instead of being logged and dropped.
    """

    def __init__(self, engine: Engine, create_tables: bool = True) -> None:
        """Initialize the store.

        Args:
            engine: SQLAlchemy engine for the training database
            create_tables: Create the table if it does not exist
        """
        self.engine = engine
        self.Session = get_sync_session(engine)
        # SQLite allows one writer at a time
        self._write_lock = threading.Lock()

        if create_tables:
            Base.metadata.create_all(engine, tables=[TrainingCaseRecord.__table__])

    def append(self, case: TrainingCase) -> None:
        """Insert a case. Raises TrainingStoreError if it cannot be stored."""
        if not isinstance(case, TrainingCase):
            raise TypeError(f"Expected TrainingCase, got {type(case).__name__}")

        try:
            with self._write_lock, self.Session() as session:
                session.add(TrainingCaseRecord.from_case(case))
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to store training case: {e}")
            raise TrainingStoreError(f"Failed to store training case: {e}") from e

        _log_recorded(case)

    def recent(self, n: int) -> tuple[TrainingCase, ...]:
        """Return the n most recently appended cases, oldest first."""
        if n <= 0:
            return ()
        try:
            with self.Session() as session:
                rows = session.execute(
                    select(TrainingCaseRecord)
                    .order_by(TrainingCaseRecord.case_id.desc())
                    .limit(n)
                ).scalars().all()
        except SQLAlchemyError as e:
            raise TrainingStoreError(f"Failed to read training cases: {e}") from e
        return _to_cases(reversed(rows))

    def all(self) -> tuple[TrainingCase, ...]:
        """Return every stored case in append order."""
        try:
            with self.Session() as session:
                rows = session.execute(
                    select(TrainingCaseRecord).order_by(TrainingCaseRecord.case_id)
                ).scalars().all()
        except SQLAlchemyError as e:
            raise TrainingStoreError(f"Failed to read training cases: {e}") from e
        return _to_cases(rows)

    def __len__(self) -> int:
        try:
            with self.Session() as session:
                return session.execute(
                    select(func.count()).select_from(TrainingCaseRecord)
                ).scalar_one()
        except SQLAlchemyError as e:
            raise TrainingStoreError(f"Failed to count training cases: {e}") from e
