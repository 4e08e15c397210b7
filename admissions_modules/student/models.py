"""
Student Domain Models (``admissions_modules.student.models``).

Frozen snapshot of an enrolled learner.  Created exactly once, at
enrollment, by copying admission fields; the admission workflow never
mutates it afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID


class StudentStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TRANSFERRED = "transferred"
    GRADUATED = "graduated"


@dataclass(frozen=True)
class Student:
    """An admitted-and-enrolled learner.

    Contract: frozen.  ``student_code`` is issued by the identifier issuer
    and unique across the school.
    """
    id: UUID
    student_code: str
    first_name_en: str
    last_name_en: str
    date_of_birth_bs: str
    date_of_birth_ad: date
    gender: str
    address_en: str
    father_name: str
    father_phone: str
    mother_name: str
    mother_phone: str
    admission_date: datetime
    admission_class: int
    emergency_contact: str
    status: StudentStatus = StudentStatus.ACTIVE
    middle_name_en: str | None = None
    first_name_np: str | None = None
    middle_name_np: str | None = None
    last_name_np: str | None = None
    address_np: str | None = None
    phone: str | None = None
    email: str | None = None
    local_guardian_name: str | None = None
    local_guardian_phone: str | None = None
    local_guardian_relation: str | None = None
    current_class_id: int | None = None
    roll_number: int | None = None
    previous_school: str | None = None
    admission_id: UUID | None = None
