"""
Admission Domain Models (``admissions_modules.admission.models``).

Responsibility
--------------
Frozen value objects for the admission lifecycle: the ``Admission``
aggregate snapshot, the payloads each workflow operation accepts, the
query filter / page types, and the statistics result.  Also the
contact-resolution policy used to address notifications.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O, no database.  These
objects flow *into* ``AdmissionService`` and *out of* it as immutable
snapshots; the service computes a new snapshot with
``dataclasses.replace`` and hands it to the store.

Invariants enforced
-------------------
* All dataclasses are ``frozen=True``.
* Money-like values (fees, GPA) use ``Decimal``.
* ``enrolled_student_id`` is set iff ``status == ENROLLED``;
  ``rejection_reason`` / ``rejection_date`` iff ``status == REJECTED``
  (maintained by the service, checked by ``Admission.check_invariants``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from admissions_modules.student.models import Student


class AdmissionStatus(Enum):
    """Admission workflow states.  Must align with ``workflows.ADMISSION_WORKFLOW.states``."""
    INQUIRY = "inquiry"
    APPLIED = "applied"
    TEST_SCHEDULED = "test_scheduled"
    TESTED = "tested"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEWED = "interviewed"
    ADMITTED = "admitted"
    ENROLLED = "enrolled"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


TERMINAL_STATUSES: frozenset[AdmissionStatus] = frozenset({
    AdmissionStatus.ENROLLED,
    AdmissionStatus.REJECTED,
    AdmissionStatus.WITHDRAWN,
})


class InquirySource(Enum):
    WALK_IN = "walk-in"
    PHONE = "phone"
    ONLINE = "online"
    REFERRAL = "referral"


class NotificationEvent(Enum):
    """Event tags sent to the notification gateway."""
    INQUIRY = "inquiry"
    APPLICATION = "application"
    TEST_SCHEDULED = "test_scheduled"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    ADMITTED = "admitted"
    ENROLLED = "enrolled"


GENDERS: tuple[str, ...] = ("male", "female", "other")


@dataclass(frozen=True)
class Admission:
    """One candidate's journey from first contact to enrollment or rejection.

    Contract: frozen snapshot.  ``version`` is the optimistic-lock counter
    the store compares on every conditional write.
    """
    id: UUID
    temporary_id: str
    first_name_en: str
    last_name_en: str
    applying_for_class: int
    status: AdmissionStatus
    inquiry_date: datetime
    version: int = 1

    middle_name_en: str | None = None
    first_name_np: str | None = None
    middle_name_np: str | None = None
    last_name_np: str | None = None
    date_of_birth_bs: str | None = None
    date_of_birth_ad: date | None = None
    gender: str | None = None
    address_en: str | None = None
    address_np: str | None = None
    phone: str | None = None
    email: str | None = None

    father_name: str | None = None
    father_phone: str | None = None
    mother_name: str | None = None
    mother_phone: str | None = None
    guardian_name: str | None = None
    guardian_phone: str | None = None
    guardian_relation: str | None = None

    previous_school: str | None = None
    previous_class: int | None = None
    previous_gpa: Decimal | None = None
    academic_year_id: int | None = None

    inquiry_source: str | None = None
    inquiry_notes: str | None = None

    application_date: datetime | None = None
    application_fee: Decimal | None = None
    application_fee_paid: bool = False

    admission_test_date: date | None = None
    admission_test_score: Decimal | None = None
    admission_test_max_score: Decimal | None = None
    admission_test_remarks: str | None = None

    interview_date: date | None = None
    interviewer_name: str | None = None
    interview_feedback: str | None = None
    interview_score: Decimal | None = None

    admission_date: datetime | None = None
    admission_offer_letter_url: str | None = None

    documents_verified: bool = False
    documents_notes: str | None = None

    enrolled_student_id: UUID | None = None
    enrollment_date: datetime | None = None

    rejection_reason: str | None = None
    rejection_date: datetime | None = None

    withdrawal_reason: str | None = None
    withdrawal_date: datetime | None = None

    processed_by_id: UUID | None = None

    @property
    def full_name_en(self) -> str:
        parts = [self.first_name_en]
        if self.middle_name_en:
            parts.append(self.middle_name_en)
        parts.append(self.last_name_en)
        return " ".join(parts)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def check_invariants(self) -> None:
        """Raise ``ValueError`` if the cross-field status invariants are broken."""
        enrolled = self.status is AdmissionStatus.ENROLLED
        if enrolled != (self.enrolled_student_id is not None):
            raise ValueError(
                f"enrolled_student_id must be set iff status is enrolled (status={self.status.value})"
            )
        rejected = self.status is AdmissionStatus.REJECTED
        if rejected != (self.rejection_reason is not None) or rejected != (
            self.rejection_date is not None
        ):
            raise ValueError(
                f"rejection fields must be set iff status is rejected (status={self.status.value})"
            )


# ---------------------------------------------------------------------------
# Contact resolution
# ---------------------------------------------------------------------------

# Fixed priority for addressing notifications.
CONTACT_PRIORITY: tuple[str, ...] = (
    "guardian_phone",
    "father_phone",
    "mother_phone",
    "phone",
)


def resolve_contact(admission: Admission) -> str | None:
    """First present contact number in ``CONTACT_PRIORITY`` order, else None.

    Blank strings count as absent.
    """
    for field_name in CONTACT_PRIORITY:
        value = getattr(admission, field_name)
        if value is not None and value.strip():
            return value.strip()
    return None


# ---------------------------------------------------------------------------
# Operation payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InquiryRequest:
    """Minimal first-contact details; first/last name and class are required."""
    first_name_en: str
    last_name_en: str
    applying_for_class: int
    middle_name_en: str | None = None
    phone: str | None = None
    email: str | None = None
    guardian_name: str | None = None
    guardian_phone: str | None = None
    inquiry_source: str | None = None
    inquiry_notes: str | None = None
    academic_year_id: int | None = None


@dataclass(frozen=True)
class ApplicationDetails:
    """Fields merged into the admission on conversion to an application.

    ``None`` means "leave the stored value as it is".
    """
    first_name_np: str | None = None
    middle_name_np: str | None = None
    last_name_np: str | None = None
    date_of_birth_bs: str | None = None
    date_of_birth_ad: date | None = None
    gender: str | None = None
    address_en: str | None = None
    address_np: str | None = None
    father_name: str | None = None
    father_phone: str | None = None
    mother_name: str | None = None
    mother_phone: str | None = None
    guardian_relation: str | None = None
    previous_school: str | None = None
    previous_class: int | None = None
    previous_gpa: Decimal | None = None
    application_fee: Decimal | None = None
    application_fee_paid: bool | None = None


@dataclass(frozen=True)
class TestScore:
    __test__ = False  # not a pytest class

    score: Decimal
    max_score: Decimal
    remarks: str | None = None


@dataclass(frozen=True)
class InterviewFeedback:
    feedback: str
    score: Decimal | None = None


@dataclass(frozen=True)
class EnrollmentRequest:
    current_class_id: int | None = None
    roll_number: int | None = None


@dataclass(frozen=True)
class EnrollmentResult:
    """The pair of aggregates produced by a successful enrollment."""
    admission: Admission
    student: Student


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AdmissionFilter:
    """Exact-match filters plus a case-insensitive name search."""
    status: AdmissionStatus | None = None
    applying_for_class: int | None = None
    academic_year_id: int | None = None
    search: str | None = None


@dataclass(frozen=True)
class PageRequest:
    """``limit=None`` means the configured default page size."""
    limit: int | None = None
    offset: int = 0


@dataclass(frozen=True)
class AdmissionPage:
    items: tuple[Admission, ...]
    total: int
    limit: int
    offset: int


@dataclass(frozen=True)
class AdmissionStatistics:
    """Counts over the filtered admissions.

    ``by_status`` has every status as a key (zero-filled);
    ``by_class`` has only classes with at least one admission.
    """
    total: int
    by_status: dict[AdmissionStatus, int] = field(default_factory=dict)
    by_class: dict[int, int] = field(default_factory=dict)
