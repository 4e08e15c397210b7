"""
Student Record Store (``admissions_modules.student.store``).

Create and fetch only; students are never updated by the admission
workflow.  Runs inside the caller's transaction, so a student created
during enrollment disappears if the enrollment is rolled back.
"""

from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from admissions_kernel.logging_config import get_logger
from admissions_modules.student.models import Student
from admissions_modules.student.orm import StudentModel

logger = get_logger("modules.student.store")


class StudentStore(Protocol):
    def create(self, student: Student) -> Student:
        ...

    def get(self, student_id: UUID) -> Student | None:
        ...

    def get_by_code(self, student_code: str) -> Student | None:
        ...


class SqlStudentStore:
    """SQLAlchemy implementation of ``StudentStore``."""

    def __init__(self, session: Session):
        self._session = session

    def create(self, student: Student) -> Student:
        self._session.add(StudentModel.from_dto(student))
        self._session.flush()
        logger.debug(
            "student_inserted",
            extra={"student_id": str(student.id), "student_code": student.student_code},
        )
        return student

    def get(self, student_id: UUID) -> Student | None:
        model = self._session.execute(
            select(StudentModel)
            .where(StudentModel.id == student_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if model is None:
            return None
        return model.to_dto()

    def get_by_code(self, student_code: str) -> Student | None:
        model = self._session.execute(
            select(StudentModel).where(StudentModel.student_code == student_code)
        ).scalar_one_or_none()
        if model is None:
            return None
        return model.to_dto()
