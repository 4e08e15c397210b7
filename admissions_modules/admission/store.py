"""
Admission Record Store (``admissions_modules.admission.store``).

Responsibility
--------------
Persistence boundary for the admission aggregate: create, get,
conditional update, and filtered scan.  The store never decides whether
a transition is legal; it only guarantees that a write based on a stale
snapshot cannot succeed.

Architecture position
---------------------
**Modules layer** -- persistence.  ``AdmissionService`` depends on the
``AdmissionStore`` protocol; ``SqlAdmissionStore`` is the SQLAlchemy
implementation.  The store never commits; the service owns the
transaction boundary.

Invariants enforced
-------------------
* ``update`` is a compare-and-swap on ``version``:
  ``UPDATE admissions SET ..., version = :expected + 1
  WHERE id = :id AND version = :expected``.
* Reads always refresh the identity map, so a snapshot never reflects a
  cached row.

Failure modes
-------------
* ``OptimisticLockError`` -- the row's version moved since the snapshot
  was read, or the row does not exist.
* ``IntegrityError`` -- duplicate ``temporary_id`` on create.
"""

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from admissions_kernel.exceptions import OptimisticLockError
from admissions_kernel.logging_config import get_logger
from admissions_modules.admission.models import Admission, AdmissionFilter
from admissions_modules.admission.orm import AdmissionModel, column_values
from admissions_modules.admission.selector import AdmissionSelector

logger = get_logger("modules.admission.store")


class AdmissionStore(Protocol):
    """Persistence operations the workflow engine relies on."""

    def create(self, admission: Admission) -> Admission:
        """Insert a new admission; returns the stored snapshot."""
        ...

    def get(self, admission_id: UUID) -> Admission | None:
        ...

    def update(self, admission: Admission, expected_version: int) -> Admission:
        """Conditionally replace the stored admission.

        Returns the stored snapshot with ``version == expected_version + 1``.
        Raises ``OptimisticLockError`` when the stored version differs.
        """
        ...

    def scan(
        self,
        filters: AdmissionFilter | None,
        limit: int,
        offset: int,
    ) -> tuple[tuple[Admission, ...], int]:
        """One page of matches and the total match count."""
        ...


class SqlAdmissionStore:
    """
    SQLAlchemy implementation of ``AdmissionStore``.

    Contract:
        Operates inside the caller's session and transaction.  Flushes so
        that later statements in the same transaction see the write, but
        never commits or rolls back.
    """

    def __init__(self, session: Session):
        self._session = session

    def create(self, admission: Admission) -> Admission:
        model = AdmissionModel.from_dto(admission)
        self._session.add(model)
        self._session.flush()
        logger.debug(
            "admission_inserted",
            extra={"admission_id": str(admission.id), "temporary_id": admission.temporary_id},
        )
        return admission

    def get(self, admission_id: UUID) -> Admission | None:
        model = self._session.execute(
            select(AdmissionModel)
            .where(AdmissionModel.id == admission_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if model is None:
            return None
        return model.to_dto()

    def update(self, admission: Admission, expected_version: int) -> Admission:
        stored = replace(admission, version=expected_version + 1)
        result = self._session.execute(
            update(AdmissionModel)
            .where(
                AdmissionModel.id == admission.id,
                AdmissionModel.version == expected_version,
            )
            .values(**column_values(stored))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                "admission_version_conflict",
                extra={
                    "admission_id": str(admission.id),
                    "expected_version": expected_version,
                },
            )
            raise OptimisticLockError("Admission", str(admission.id), expected_version)
        return stored

    def scan(
        self,
        filters: AdmissionFilter | None,
        limit: int,
        offset: int,
    ) -> tuple[tuple[Admission, ...], int]:
        return AdmissionSelector(self._session).find(filters, limit, offset)
