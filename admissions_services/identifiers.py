"""
admissions_services.identifiers -- student code issuance.

Responsibility:
    Issues the permanent student code at enrollment:
    ``<SCHOOL>-<YEAR>-<NNNN>``, where ``YEAR`` is the admission year and
    ``NNNN`` a zero-padded per-year counter.

Architecture position:
    Services layer.  Called by ``AdmissionService.enroll`` through the
    ``CollaboratorInvoker``, i.e. on a worker thread.  It therefore opens
    its own session from the session factory and never touches the
    caller's session.

Invariants enforced:
    - Codes are unique: each comes from a locked counter row that is
      committed before the code is returned.
    - Codes are NOT gap-free.  An enrollment that fails after issuance
      leaves its code unused.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from admissions_kernel.logging_config import get_logger
from admissions_kernel.services.sequence_service import SequenceService

logger = get_logger("services.identifiers")

STUDENT_CODE_PATTERN = re.compile(r"^[A-Z0-9]+-\d{4}-\d{4}$")


@dataclass(frozen=True)
class StudentIdContext:
    admission_id: UUID
    temporary_id: str
    admission_date: datetime
    applying_for_class: int
    academic_year_id: int | None = None


class StudentIdIssuer(Protocol):
    def generate_student_id(self, context: StudentIdContext) -> str:
        ...


def student_code_sequence(year: int) -> str:
    return f"student_code:{year}"


def format_student_code(school_code: str, year: int, value: int) -> str:
    return f"{school_code}-{year}-{value:04d}"


class SequenceStudentIdIssuer:
    """
    Student code issuer backed by ``SequenceService``.

    Contract:
        ``generate_student_id`` allocates the next value for the admission
        year in its own transaction and returns the formatted code.
    """

    def __init__(self, session_factory: sessionmaker[Session], school_code: str):
        self._session_factory = session_factory
        self._school_code = school_code

    def generate_student_id(self, context: StudentIdContext) -> str:
        year = context.admission_date.year
        with self._session_factory() as session:
            with session.begin():
                value = SequenceService(session).next_value(student_code_sequence(year))
        code = format_student_code(self._school_code, year, value)
        logger.info(
            "student_code_issued",
            extra={
                "student_code": code,
                "admission_id": str(context.admission_id),
            },
        )
        return code
