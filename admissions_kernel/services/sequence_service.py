"""
Named counters for inquiry numbers and student codes.

Each sequence (``inquiry:<year>``, ``student_code:<year>``) is one row
in ``sequence_counters``.  Allocation increments that row in place, so
the row stays locked until the caller's transaction ends: concurrent
allocators queue behind each other, and a rollback gives the number
back.  Numbers are never derived from counting admissions or students.

The first allocation of a sequence inserts its row.  Two transactions
doing that at once make the slower one fail with ``IntegrityError``;
it has to retry.
"""

from sqlalchemy import String, select, update
from sqlalchemy.orm import Mapped, Session, mapped_column

from admissions_kernel.db.base import Base
from admissions_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(String(100), unique=True)
    current_value: Mapped[int] = mapped_column(default=0)


class SequenceService:
    """
    Allocates the next number of a sequence inside the caller's transaction.

    Never commits.  Example::

        number = SequenceService(session).next_value("inquiry:2024")
    """

    def __init__(self, session: Session):
        self._session = session

    def next_value(self, sequence_name: str) -> int:
        """Next number, starting from 1 on first use."""
        if not sequence_name:
            raise ValueError("sequence_name must be non-empty")

        bumped = self._session.execute(
            update(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .values(current_value=SequenceCounter.current_value + 1)
            .execution_options(synchronize_session=False)
        ).rowcount
        if bumped:
            value = self.current_value(sequence_name)
        else:
            self._session.add(SequenceCounter(name=sequence_name, current_value=1))
            self._session.flush()
            value = 1

        logger.debug("sequence_allocated", extra={"sequence_name": sequence_name, "value": value})
        return value

    def current_value(self, sequence_name: str) -> int | None:
        """Last number handed out, or None for a sequence never used."""
        return self._session.scalar(
            select(SequenceCounter.current_value).where(SequenceCounter.name == sequence_name)
        )
