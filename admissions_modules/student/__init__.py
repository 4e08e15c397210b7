"""Student aggregate: the record created when an admission is enrolled."""

from admissions_modules.student.models import Student, StudentStatus

__all__ = ["Student", "StudentStatus"]
