"""
Admission ORM Models (``admissions_modules.admission.orm``).

Responsibility
--------------
SQLAlchemy persistence model for the admission aggregate.  Maps the
frozen ``Admission`` dataclass from ``models.py`` to the ``admissions``
table.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``admissions_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``admissions_kernel``.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import Boolean, Date, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from admissions_kernel.db.base import TrackedBase
from admissions_modules.admission.models import Admission, AdmissionStatus


class AdmissionModel(TrackedBase):
    """
    ORM model for admissions.

    Maps to the ``Admission`` frozen dataclass.

    Guarantees:
        - temporary_id is unique (uq_admissions_temporary_id).
        - status stored as string enum value.
        - version is the optimistic-lock counter; only the store's
          conditional UPDATE changes it.
    """

    __tablename__ = "admissions"

    __table_args__ = (
        UniqueConstraint("temporary_id", name="uq_admissions_temporary_id"),
        Index("idx_admissions_status", "status"),
        Index("idx_admissions_applying_for_class", "applying_for_class"),
        Index("idx_admissions_academic_year_id", "academic_year_id"),
        Index("idx_admissions_inquiry_date", "inquiry_date"),
    )

    temporary_id: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    first_name_en: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name_en: Mapped[str | None] = mapped_column(String(100))
    last_name_en: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name_np: Mapped[str | None] = mapped_column(String(100))
    middle_name_np: Mapped[str | None] = mapped_column(String(100))
    last_name_np: Mapped[str | None] = mapped_column(String(100))
    date_of_birth_bs: Mapped[str | None] = mapped_column(String(10))
    date_of_birth_ad: Mapped[date | None] = mapped_column(Date)
    gender: Mapped[str | None] = mapped_column(String(10))
    address_en: Mapped[str | None] = mapped_column(Text)
    address_np: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(255))

    father_name: Mapped[str | None] = mapped_column(String(100))
    father_phone: Mapped[str | None] = mapped_column(String(20))
    mother_name: Mapped[str | None] = mapped_column(String(100))
    mother_phone: Mapped[str | None] = mapped_column(String(20))
    guardian_name: Mapped[str | None] = mapped_column(String(100))
    guardian_phone: Mapped[str | None] = mapped_column(String(20))
    guardian_relation: Mapped[str | None] = mapped_column(String(50))

    applying_for_class: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_school: Mapped[str | None] = mapped_column(String(255))
    previous_class: Mapped[int | None] = mapped_column(Integer)
    previous_gpa: Mapped[Decimal | None]
    academic_year_id: Mapped[int | None] = mapped_column(Integer)

    inquiry_date: Mapped[datetime] = mapped_column(nullable=False)
    inquiry_source: Mapped[str | None] = mapped_column(String(20))
    inquiry_notes: Mapped[str | None] = mapped_column(Text)

    application_date: Mapped[datetime | None]
    application_fee: Mapped[Decimal | None]
    application_fee_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    admission_test_date: Mapped[date | None] = mapped_column(Date)
    admission_test_score: Mapped[Decimal | None]
    admission_test_max_score: Mapped[Decimal | None]
    admission_test_remarks: Mapped[str | None] = mapped_column(Text)

    interview_date: Mapped[date | None] = mapped_column(Date)
    interviewer_name: Mapped[str | None] = mapped_column(String(100))
    interview_feedback: Mapped[str | None] = mapped_column(Text)
    interview_score: Mapped[Decimal | None]

    admission_date: Mapped[datetime | None]
    admission_offer_letter_url: Mapped[str | None] = mapped_column(String(500))

    documents_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    documents_notes: Mapped[str | None] = mapped_column(Text)

    enrolled_student_id: Mapped[UUID | None]
    enrollment_date: Mapped[datetime | None]

    rejection_reason: Mapped[str | None] = mapped_column(Text)
    rejection_date: Mapped[datetime | None]

    withdrawal_reason: Mapped[str | None] = mapped_column(Text)
    withdrawal_date: Mapped[datetime | None]

    processed_by_id: Mapped[UUID | None]

    def to_dto(self) -> Admission:
        """Convert ORM model to frozen dataclass."""
        return Admission(
            id=self.id,
            temporary_id=self.temporary_id,
            status=AdmissionStatus(self.status),
            version=self.version,
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
            guardian_name=self.guardian_name,
            guardian_phone=self.guardian_phone,
            guardian_relation=self.guardian_relation,
            applying_for_class=self.applying_for_class,
            previous_school=self.previous_school,
            previous_class=self.previous_class,
            previous_gpa=self.previous_gpa,
            academic_year_id=self.academic_year_id,
            inquiry_date=self.inquiry_date,
            inquiry_source=self.inquiry_source,
            inquiry_notes=self.inquiry_notes,
            application_date=self.application_date,
            application_fee=self.application_fee,
            application_fee_paid=self.application_fee_paid,
            admission_test_date=self.admission_test_date,
            admission_test_score=self.admission_test_score,
            admission_test_max_score=self.admission_test_max_score,
            admission_test_remarks=self.admission_test_remarks,
            interview_date=self.interview_date,
            interviewer_name=self.interviewer_name,
            interview_feedback=self.interview_feedback,
            interview_score=self.interview_score,
            admission_date=self.admission_date,
            admission_offer_letter_url=self.admission_offer_letter_url,
            documents_verified=self.documents_verified,
            documents_notes=self.documents_notes,
            enrolled_student_id=self.enrolled_student_id,
            enrollment_date=self.enrollment_date,
            rejection_reason=self.rejection_reason,
            rejection_date=self.rejection_date,
            withdrawal_reason=self.withdrawal_reason,
            withdrawal_date=self.withdrawal_date,
            processed_by_id=self.processed_by_id,
        )

    @classmethod
    def from_dto(cls, dto: Admission) -> "AdmissionModel":
        """Create ORM model from frozen dataclass."""
        return cls(id=dto.id, **column_values(dto))

    def __repr__(self) -> str:
        return f"<AdmissionModel {self.temporary_id}: {self.status} v{self.version}>"


def column_values(dto: Admission) -> dict[str, Any]:
    """Column name -> value for every mutable column of ``dto``, ``id`` excluded.

    Used for both INSERT and the store's conditional UPDATE.
    """
    return {
        "temporary_id": dto.temporary_id,
        "status": dto.status.value,
        "version": dto.version,
        "first_name_en": dto.first_name_en,
        "middle_name_en": dto.middle_name_en,
        "last_name_en": dto.last_name_en,
        "first_name_np": dto.first_name_np,
        "middle_name_np": dto.middle_name_np,
        "last_name_np": dto.last_name_np,
        "date_of_birth_bs": dto.date_of_birth_bs,
        "date_of_birth_ad": dto.date_of_birth_ad,
        "gender": dto.gender,
        "address_en": dto.address_en,
        "address_np": dto.address_np,
        "phone": dto.phone,
        "email": dto.email,
        "father_name": dto.father_name,
        "father_phone": dto.father_phone,
        "mother_name": dto.mother_name,
        "mother_phone": dto.mother_phone,
        "guardian_name": dto.guardian_name,
        "guardian_phone": dto.guardian_phone,
        "guardian_relation": dto.guardian_relation,
        "applying_for_class": dto.applying_for_class,
        "previous_school": dto.previous_school,
        "previous_class": dto.previous_class,
        "previous_gpa": dto.previous_gpa,
        "academic_year_id": dto.academic_year_id,
        "inquiry_date": dto.inquiry_date,
        "inquiry_source": dto.inquiry_source,
        "inquiry_notes": dto.inquiry_notes,
        "application_date": dto.application_date,
        "application_fee": dto.application_fee,
        "application_fee_paid": dto.application_fee_paid,
        "admission_test_date": dto.admission_test_date,
        "admission_test_score": dto.admission_test_score,
        "admission_test_max_score": dto.admission_test_max_score,
        "admission_test_remarks": dto.admission_test_remarks,
        "interview_date": dto.interview_date,
        "interviewer_name": dto.interviewer_name,
        "interview_feedback": dto.interview_feedback,
        "interview_score": dto.interview_score,
        "admission_date": dto.admission_date,
        "admission_offer_letter_url": dto.admission_offer_letter_url,
        "documents_verified": dto.documents_verified,
        "documents_notes": dto.documents_notes,
        "enrolled_student_id": dto.enrolled_student_id,
        "enrollment_date": dto.enrollment_date,
        "rejection_reason": dto.rejection_reason,
        "rejection_date": dto.rejection_date,
        "withdrawal_reason": dto.withdrawal_reason,
        "withdrawal_date": dto.withdrawal_date,
        "processed_by_id": dto.processed_by_id,
    }
