"""
Admission payload validation.

Pure checks run by ``AdmissionService`` before any persistence attempt.
Every failure raises ``AdmissionValidationError(field, reason)``.
Length limits never exceed the matching column width, so an accepted
payload always fits its row.
"""

import re
from decimal import Decimal

from admissions_kernel.exceptions import AdmissionValidationError
from admissions_modules.admission.models import (
    GENDERS,
    ApplicationDetails,
    EnrollmentRequest,
    InquiryRequest,
    InquirySource,
    InterviewFeedback,
    TestScore,
)

PHONE_PATTERN = re.compile(r"^(\+977[-\s]?)?[0-9]{7,10}$")
BS_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_CLASS = 1
MAX_CLASS = 12

MAX_NAME_LENGTH = 50
MAX_PERSON_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 100
MAX_RELATION_LENGTH = 50
MAX_ADDRESS_LENGTH = 255
MAX_SCHOOL_LENGTH = 255
MAX_NOTES_LENGTH = 1000
MAX_REMARKS_LENGTH = 500
MAX_FEEDBACK_LENGTH = 1000
MAX_REASON_LENGTH = 500
MAX_INTERVIEW_SCORE = Decimal("100")

_SOURCES = frozenset(s.value for s in InquirySource)


def check_length(field: str, value: str | None, max_length: int) -> None:
    if value is not None and len(value.strip()) > max_length:
        raise AdmissionValidationError(field, f"must not exceed {max_length} characters")


def require_text(field: str, value: str | None, max_length: int | None = None) -> str:
    """Return ``value`` stripped; reject None, blank and over-long strings."""
    if value is None or not value.strip():
        raise AdmissionValidationError(field, "must not be empty")
    if max_length is not None:
        check_length(field, value, max_length)
    return value.strip()


def check_phone(field: str, value: str | None) -> None:
    if value is None or not value.strip():
        return
    if not PHONE_PATTERN.match(value.strip()):
        raise AdmissionValidationError(field, f"invalid phone number {value!r}")


def check_class(field: str, value: int | None, required: bool = False) -> None:
    if value is None:
        if required:
            raise AdmissionValidationError(field, "is required")
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise AdmissionValidationError(field, "must be an integer")
    if not MIN_CLASS <= value <= MAX_CLASS:
        raise AdmissionValidationError(field, f"must be between {MIN_CLASS} and {MAX_CLASS}")


def check_positive_int(field: str, value: int | None) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise AdmissionValidationError(field, "must be an integer")
    if value <= 0:
        raise AdmissionValidationError(field, "must be positive")


def validate_inquiry(request: InquiryRequest) -> None:
    require_text("first_name_en", request.first_name_en, MAX_NAME_LENGTH)
    require_text("last_name_en", request.last_name_en, MAX_NAME_LENGTH)
    check_length("middle_name_en", request.middle_name_en, MAX_NAME_LENGTH)
    check_class("applying_for_class", request.applying_for_class, required=True)
    check_phone("phone", request.phone)
    check_phone("guardian_phone", request.guardian_phone)
    check_length("guardian_name", request.guardian_name, MAX_PERSON_NAME_LENGTH)
    check_length("inquiry_notes", request.inquiry_notes, MAX_NOTES_LENGTH)
    if request.email:
        check_length("email", request.email, MAX_EMAIL_LENGTH)
        if not EMAIL_PATTERN.match(request.email.strip()):
            raise AdmissionValidationError("email", f"invalid email {request.email!r}")
    if request.inquiry_source is not None and request.inquiry_source not in _SOURCES:
        raise AdmissionValidationError(
            "inquiry_source", f"must be one of {', '.join(sorted(_SOURCES))}"
        )
    check_positive_int("academic_year_id", request.academic_year_id)


def validate_application(details: ApplicationDetails) -> None:
    for field in ("first_name_np", "middle_name_np", "last_name_np"):
        check_length(field, getattr(details, field), MAX_NAME_LENGTH)
    for field in ("father_name", "mother_name"):
        check_length(field, getattr(details, field), MAX_PERSON_NAME_LENGTH)
    for field in ("address_en", "address_np"):
        check_length(field, getattr(details, field), MAX_ADDRESS_LENGTH)
    check_length("guardian_relation", details.guardian_relation, MAX_RELATION_LENGTH)
    check_length("previous_school", details.previous_school, MAX_SCHOOL_LENGTH)

    if details.gender is not None and details.gender not in GENDERS:
        raise AdmissionValidationError("gender", f"must be one of {', '.join(GENDERS)}")
    if details.date_of_birth_bs is not None and not BS_DATE_PATTERN.match(
        details.date_of_birth_bs
    ):
        raise AdmissionValidationError("date_of_birth_bs", "expected YYYY-MM-DD")
    check_phone("father_phone", details.father_phone)
    check_phone("mother_phone", details.mother_phone)
    check_class("previous_class", details.previous_class)
    if details.previous_gpa is not None and not Decimal("0") <= details.previous_gpa <= Decimal("4"):
        raise AdmissionValidationError("previous_gpa", "must be between 0 and 4")
    if details.application_fee is not None and details.application_fee < 0:
        raise AdmissionValidationError("application_fee", "must not be negative")


def validate_test_score(score: TestScore) -> None:
    if score.max_score <= 0:
        raise AdmissionValidationError("max_score", "must be positive")
    if score.score < 0 or score.score > score.max_score:
        raise AdmissionValidationError("score", "must be between 0 and max_score")
    check_length("remarks", score.remarks, MAX_REMARKS_LENGTH)


def validate_interviewer(interviewer_name: str | None) -> None:
    check_length("interviewer_name", interviewer_name, MAX_PERSON_NAME_LENGTH)


def validate_interview(feedback: InterviewFeedback) -> None:
    require_text("feedback", feedback.feedback, MAX_FEEDBACK_LENGTH)
    if feedback.score is not None and not 0 <= feedback.score <= MAX_INTERVIEW_SCORE:
        raise AdmissionValidationError("score", f"must be between 0 and {MAX_INTERVIEW_SCORE}")


def validate_reason(field: str, reason: str | None, required: bool) -> str | None:
    """Stripped reason, or None when optional and blank."""
    if required:
        return require_text(field, reason, MAX_REASON_LENGTH)
    if reason is None or not reason.strip():
        return None
    check_length(field, reason, MAX_REASON_LENGTH)
    return reason.strip()


def validate_enrollment(request: EnrollmentRequest) -> None:
    check_positive_int("current_class_id", request.current_class_id)
    check_positive_int("roll_number", request.roll_number)
