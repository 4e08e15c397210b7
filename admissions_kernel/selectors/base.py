"""
Read side of the kernel.

A selector runs queries on a session its caller owns.  It never adds,
deletes, flushes or commits, and it hands back frozen domain objects
rather than ORM rows.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from admissions_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(Generic[ModelType]):
    """Holds the caller's session and the ORM class being queried."""

    model: type[ModelType]

    def __init__(self, session: Session):
        self.session = session

    def _count(self, stmt: Select) -> int:
        """Row count of ``stmt`` ignoring any order, limit or offset on it."""
        bare = stmt.order_by(None).limit(None).offset(None)
        return self.session.execute(
            select(func.count()).select_from(bare.subquery())
        ).scalar_one()

    def _fetch_dtos(self, stmt: Select) -> tuple[Any, ...]:
        # populate_existing: rows committed by other sessions replace stale identity-map state.
        rows = self.session.execute(stmt.execution_options(populate_existing=True)).scalars()
        return tuple(row.to_dto() for row in rows)
