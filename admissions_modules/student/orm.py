"""
Student ORM Models (``admissions_modules.student.orm``).

SQLAlchemy persistence model for the student aggregate.  Maps the frozen
``Student`` dataclass to the ``students`` table.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from admissions_kernel.db.base import TrackedBase
from admissions_modules.student.models import Student, StudentStatus


class StudentModel(TrackedBase):
    """
    ORM model for students.

    Guarantees:
        - student_code is unique (uq_students_student_code).
        - admission_id FK to admissions.id; at most one student per admission.
    """

    __tablename__ = "students"

    __table_args__ = (
        UniqueConstraint("student_code", name="uq_students_student_code"),
        UniqueConstraint("admission_id", name="uq_students_admission_id"),
        Index("idx_students_status", "status"),
    )

    student_code: Mapped[str] = mapped_column(String(50), nullable=False)
    admission_id: Mapped[UUID | None] = mapped_column(ForeignKey("admissions.id"))
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    first_name_en: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name_en: Mapped[str | None] = mapped_column(String(100))
    last_name_en: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name_np: Mapped[str | None] = mapped_column(String(100))
    middle_name_np: Mapped[str | None] = mapped_column(String(100))
    last_name_np: Mapped[str | None] = mapped_column(String(100))
    date_of_birth_bs: Mapped[str] = mapped_column(String(10), nullable=False)
    date_of_birth_ad: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    address_en: Mapped[str] = mapped_column(Text, nullable=False)
    address_np: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(255))

    father_name: Mapped[str] = mapped_column(String(100), nullable=False)
    father_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    mother_name: Mapped[str] = mapped_column(String(100), nullable=False)
    mother_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    local_guardian_name: Mapped[str | None] = mapped_column(String(100))
    local_guardian_phone: Mapped[str | None] = mapped_column(String(20))
    local_guardian_relation: Mapped[str | None] = mapped_column(String(50))
    emergency_contact: Mapped[str] = mapped_column(String(20), nullable=False)

    admission_date: Mapped[datetime] = mapped_column(nullable=False)
    admission_class: Mapped[int] = mapped_column(Integer, nullable=False)
    current_class_id: Mapped[int | None] = mapped_column(Integer)
    roll_number: Mapped[int | None] = mapped_column(Integer)
    previous_school: Mapped[str | None] = mapped_column(String(200))

    def to_dto(self) -> Student:
        """Convert ORM model to frozen dataclass."""
        return Student(
            id=self.id,
            student_code=self.student_code,
            admission_id=self.admission_id,
            status=StudentStatus(self.status),
            first_name_en=self.first_name_en,
            middle_name_en=self.middle_name_en,
            last_name_en=self.last_name_en,
            first_name_np=self.first_name_np,
            middle_name_np=self.middle_name_np,
            last_name_np=self.last_name_np,
            date_of_birth_bs=self.date_of_birth_bs,
            date_of_birth_ad=self.date_of_birth_ad,
            gender=self.gender,
            address_en=self.address_en,
            address_np=self.address_np,
            phone=self.phone,
            email=self.email,
            father_name=self.father_name,
            father_phone=self.father_phone,
            mother_name=self.mother_name,
            mother_phone=self.mother_phone,
            local_guardian_name=self.local_guardian_name,
            local_guardian_phone=self.local_guardian_phone,
            local_guardian_relation=self.local_guardian_relation,
            emergency_contact=self.emergency_contact,
            admission_date=self.admission_date,
            admission_class=self.admission_class,
            current_class_id=self.current_class_id,
            roll_number=self.roll_number,
            previous_school=self.previous_school,
        )

    @classmethod
    def from_dto(cls, dto: Student) -> "StudentModel":
        """Create ORM model from frozen dataclass."""
        return cls(
            id=dto.id,
            student_code=dto.student_code,
            admission_id=dto.admission_id,
            status=dto.status.value,
            first_name_en=dto.first_name_en,
            middle_name_en=dto.middle_name_en,
            last_name_en=dto.last_name_en,
            first_name_np=dto.first_name_np,
            middle_name_np=dto.middle_name_np,
            last_name_np=dto.last_name_np,
            date_of_birth_bs=dto.date_of_birth_bs,
            date_of_birth_ad=dto.date_of_birth_ad,
            gender=dto.gender,
            address_en=dto.address_en,
            address_np=dto.address_np,
            phone=dto.phone,
            email=dto.email,
            father_name=dto.father_name,
            father_phone=dto.father_phone,
            mother_name=dto.mother_name,
            mother_phone=dto.mother_phone,
            local_guardian_name=dto.local_guardian_name,
            local_guardian_phone=dto.local_guardian_phone,
            local_guardian_relation=dto.local_guardian_relation,
            emergency_contact=dto.emergency_contact,
            admission_date=dto.admission_date,
            admission_class=dto.admission_class,
            current_class_id=dto.current_class_id,
            roll_number=dto.roll_number,
            previous_school=dto.previous_school,
        )

    def __repr__(self) -> str:
        return f"<StudentModel {self.student_code}: {self.first_name_en} {self.last_name_en}>"
