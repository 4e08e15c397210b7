"""
Admission Workflow Engine (``admissions_modules.admission.service``).

Responsibility
--------------
Orchestrates the admission lifecycle: validates the requested transition
against the current status, merges the caller's payload into a new
snapshot, persists it through the store's conditional write, creates the
Student on enrollment, and coordinates the three collaborators
(notification gateway, offer-letter generator, student code issuer).
Also serves the read-side queries (listing, statistics, lookup).

Architecture position
---------------------
**Modules layer** -- thin ``AdmissionService`` that owns the session's
transaction boundary.  Transition legality is decided by the pure
``evaluate_transition`` over ``workflows.ADMISSION_WORKFLOW``; the
service turns a failed ``TransitionResult`` into a typed exception.

Invariants enforced
-------------------
* A rejected transition raises before any field is touched; the stored
  admission is unchanged.
* Every write is a compare-and-swap on ``version``; a concurrent write
  surfaces as ``OptimisticLockError`` and the transaction is rolled back.
* Offer-letter and student-code collaborators run before any write and
  within the configured time budget; their failure aborts the operation.
* Enrollment creates the Student and updates the Admission in ONE
  transaction; a conflict discards both.
* Notifications are sent only after commit and never raise.

Failure modes
-------------
* ``AdmissionNotFoundError`` -- unknown admission id.
* ``InvalidTransitionError`` / ``GuardRejectedError`` -- operation not
  legal from the current status.
* ``AdmissionValidationError`` -- malformed payload.
* ``CollaboratorError`` / ``CollaboratorTimeoutError`` -- document or id
  collaborator failed; nothing was written.
* ``OptimisticLockError`` -- lost a race on the same admission; reload
  and retry.
* ``StudentNotFoundError`` -- the created Student could not be read back.

Audit relevance
---------------
Every transition attempted on an existing admission emits one structured
``admission_transition`` record (action, from/to state, outcome, reason,
duration) carrying the bound ``LogContext`` fields.  Outcomes are
``success``, ``no_transition`` and ``guard_failed`` from the workflow
check, and ``failed`` (with ``error_code``) when a legal transition is
abandoned by a payload, collaborator or write-conflict error.  An
unknown admission id raises before any record is written.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import fields, replace
from datetime import date, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from admissions_config.schema import AdmissionsConfig
from admissions_kernel.domain.clock import Clock, SystemClock
from admissions_kernel.domain.workflow import (
    OUTCOME_GUARD_FAILED,
    OUTCOME_SUCCESS,
    Guard,
    evaluate_transition,
)
from admissions_kernel.exceptions import (
    AdmissionNotFoundError,
    AdmissionValidationError,
    GuardRejectedError,
    InvalidTransitionError,
    StudentNotFoundError,
)
from admissions_kernel.logging_config import LogContext, get_logger
from admissions_kernel.services.sequence_service import SequenceService
from admissions_modules.admission.models import (
    Admission,
    AdmissionFilter,
    AdmissionPage,
    AdmissionStatistics,
    AdmissionStatus,
    ApplicationDetails,
    EnrollmentRequest,
    EnrollmentResult,
    InquiryRequest,
    InterviewFeedback,
    NotificationEvent,
    PageRequest,
    TestScore,
    resolve_contact,
)
from admissions_modules.admission.selector import AdmissionSelector
from admissions_modules.admission.store import AdmissionStore, SqlAdmissionStore
from admissions_modules.admission.validation import (
    validate_application,
    validate_enrollment,
    validate_inquiry,
    validate_interview,
    validate_interviewer,
    validate_reason,
    validate_test_score,
)
from admissions_modules.admission.workflows import (
    ACTION_ADMIT,
    ACTION_CONVERT_TO_APPLICATION,
    ACTION_ENROLL,
    ACTION_RECORD_INTERVIEW,
    ACTION_RECORD_TEST_SCORE,
    ACTION_REJECT,
    ACTION_SCHEDULE_INTERVIEW,
    ACTION_SCHEDULE_TEST,
    ACTION_VERIFY_DOCUMENTS,
    ACTION_WITHDRAW,
    DOCUMENTS_VERIFIED,
    build_admission_workflow,
)
from admissions_modules.student.models import Student, StudentStatus
from admissions_modules.student.store import SqlStudentStore, StudentStore
from admissions_services.collaborators import CollaboratorInvoker
from admissions_services.documents import DocumentGenerator, build_offer_letter_data
from admissions_services.identifiers import StudentIdContext, StudentIdIssuer
from admissions_services.notification import NotificationGateway

logger = get_logger("modules.admission.service")

TRACE_TYPE_ADMISSION_TRANSITION = "ADMISSION_TRANSITION"
OUTCOME_FAILED = "failed"
ACTION_CREATE_INQUIRY = "create_inquiry"

COLLABORATOR_DOCUMENTS = "document_generator"
COLLABORATOR_STUDENT_ID = "student_id_issuer"

_GUARD_CHECKS = {
    DOCUMENTS_VERIFIED.name: lambda admission: admission.documents_verified,
}


def inquiry_sequence(year: int) -> str:
    return f"inquiry:{year}"


def format_temporary_id(school_code: str, year: int, value: int) -> str:
    return f"{school_code}-INQ-{year}-{value:04d}"


class AdmissionService:
    """
    Admission workflow engine.

    Contract:
        Each workflow operation is one read-modify-write unit on a single
        admission: load, check transition, merge payload, conditional
        write, commit, then notify.  Returns the stored snapshot (for
        ``enroll``, an ``EnrollmentResult``).

    Guarantees:
        - The service commits on success and rolls back on any failure.
        - Operations on different admissions share no mutable state.

    Non-goals:
        - Retrying on conflict; callers reload and retry.
        - Authorization of the acting user.
    """

    def __init__(
        self,
        session: Session,
        notifications: NotificationGateway,
        documents: DocumentGenerator,
        id_issuer: StudentIdIssuer,
        clock: Clock | None = None,
        config: AdmissionsConfig | None = None,
        invoker: CollaboratorInvoker | None = None,
        admission_store: AdmissionStore | None = None,
        student_store: StudentStore | None = None,
    ):
        self._session = session
        self._notifications = notifications
        self._documents = documents
        self._id_issuer = id_issuer
        self._clock = clock or SystemClock()
        self._config = config or AdmissionsConfig()
        self._invoker = invoker or CollaboratorInvoker(
            timeout_seconds=self._config.collaborators.timeout_seconds,
            max_workers=self._config.collaborators.max_workers,
        )
        self._admission_store = admission_store or SqlAdmissionStore(session)
        self._student_store = student_store or SqlStudentStore(session)
        self._workflow = build_admission_workflow(
            admit_from=self._config.workflow.admit_from,
            require_documents_verified=self._config.workflow.require_documents_verified,
        )

    @property
    def workflow(self):
        return self._workflow

    # =========================================================================
    # Creation
    # =========================================================================

    def create_inquiry(self, request: InquiryRequest, actor_id: UUID | None = None) -> Admission:
        """Record first contact.  The new admission starts in ``inquiry``."""
        validate_inquiry(request)
        start = time.monotonic()
        now = self._clock.now()
        admission_id = uuid4()

        with LogContext.bind(
            admission_id=str(admission_id),
            operation=ACTION_CREATE_INQUIRY,
            actor_id=str(actor_id) if actor_id else None,
        ):
            with self._transaction():
                sequence_value = SequenceService(self._session).next_value(
                    inquiry_sequence(now.year)
                )
                admission = Admission(
                    id=admission_id,
                    temporary_id=format_temporary_id(
                        self._config.school.code, now.year, sequence_value
                    ),
                    first_name_en=request.first_name_en.strip(),
                    middle_name_en=request.middle_name_en,
                    last_name_en=request.last_name_en.strip(),
                    applying_for_class=request.applying_for_class,
                    status=AdmissionStatus.INQUIRY,
                    inquiry_date=now,
                    phone=request.phone,
                    email=request.email,
                    guardian_name=request.guardian_name,
                    guardian_phone=request.guardian_phone,
                    inquiry_source=request.inquiry_source,
                    inquiry_notes=request.inquiry_notes,
                    academic_year_id=request.academic_year_id,
                    processed_by_id=actor_id,
                )
                self._admission_store.create(admission)

            self._emit_trace(
                ACTION_CREATE_INQUIRY,
                admission,
                from_state=None,
                outcome=OUTCOME_SUCCESS,
                start=start,
                to_state=admission.status.value,
            )
            self._notify(NotificationEvent.INQUIRY, admission)
        return admission

    # =========================================================================
    # Transitions
    # =========================================================================

    def convert_to_application(
        self,
        admission_id: UUID,
        details: ApplicationDetails | None = None,
        actor_id: UUID | None = None,
    ) -> Admission:
        """Promote an inquiry to a formal application, merging applicant details."""
        details = details or ApplicationDetails()

        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            validate_application(details)
            changes = {
                f.name: getattr(details, f.name)
                for f in fields(details)
                if getattr(details, f.name) is not None
            }
            return replace(
                before,
                status=to_status,
                application_date=self._clock.now(),
                **changes,
            )

        return self._run_transition(
            admission_id, ACTION_CONVERT_TO_APPLICATION, mutate, actor_id,
            event=NotificationEvent.APPLICATION,
        )

    def schedule_test(
        self,
        admission_id: UUID,
        test_date: date,
        actor_id: UUID | None = None,
    ) -> Admission:
        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            if test_date is None:
                raise AdmissionValidationError("test_date", "is required")
            return replace(before, status=to_status, admission_test_date=test_date)

        return self._run_transition(
            admission_id, ACTION_SCHEDULE_TEST, mutate, actor_id,
            event=NotificationEvent.TEST_SCHEDULED,
            extra_payload=lambda a: {"test_date": a.admission_test_date.isoformat()},
        )

    def record_test_score(
        self,
        admission_id: UUID,
        score: TestScore,
        actor_id: UUID | None = None,
    ) -> Admission:
        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            validate_test_score(score)
            return replace(
                before,
                status=to_status,
                admission_test_score=score.score,
                admission_test_max_score=score.max_score,
                admission_test_remarks=score.remarks,
            )

        return self._run_transition(admission_id, ACTION_RECORD_TEST_SCORE, mutate, actor_id)

    def schedule_interview(
        self,
        admission_id: UUID,
        interview_date: date,
        interviewer_name: str | None = None,
        actor_id: UUID | None = None,
    ) -> Admission:
        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            if interview_date is None:
                raise AdmissionValidationError("interview_date", "is required")
            validate_interviewer(interviewer_name)
            return replace(
                before,
                status=to_status,
                interview_date=interview_date,
                interviewer_name=interviewer_name,
            )

        return self._run_transition(
            admission_id, ACTION_SCHEDULE_INTERVIEW, mutate, actor_id,
            event=NotificationEvent.INTERVIEW_SCHEDULED,
            extra_payload=lambda a: {"interview_date": a.interview_date.isoformat()},
        )

    def record_interview(
        self,
        admission_id: UUID,
        feedback: InterviewFeedback,
        actor_id: UUID | None = None,
    ) -> Admission:
        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            validate_interview(feedback)
            return replace(
                before,
                status=to_status,
                interview_feedback=feedback.feedback.strip(),
                interview_score=feedback.score,
            )

        return self._run_transition(admission_id, ACTION_RECORD_INTERVIEW, mutate, actor_id)

    def admit(self, admission_id: UUID, actor_id: UUID | None = None) -> Admission:
        """Offer admission.  The offer letter is generated before anything is written."""

        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            now = self._clock.now()
            letter = build_offer_letter_data(
                temporary_id=before.temporary_id,
                applicant_name=before.full_name_en,
                applying_for_class=before.applying_for_class,
                admission_date=now.date(),
                school=self._config.school,
                settings=self._config.documents,
            )
            url = self._invoker.call(
                COLLABORATOR_DOCUMENTS,
                self._documents.generate_admission_offer_letter,
                letter,
            )
            return replace(
                before,
                status=to_status,
                admission_date=now,
                admission_offer_letter_url=url,
            )

        return self._run_transition(
            admission_id, ACTION_ADMIT, mutate, actor_id,
            event=NotificationEvent.ADMITTED,
        )

    def enroll(
        self,
        admission_id: UUID,
        request: EnrollmentRequest | None = None,
        actor_id: UUID | None = None,
    ) -> EnrollmentResult:
        """
        Enroll an admitted applicant, creating the Student.

        The student code is issued first (its own committed allocation);
        the Student insert and the Admission update then commit together.
        """
        request = request or EnrollmentRequest()
        created: dict[str, Student] = {}

        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            validate_enrollment(request)
            now = self._clock.now()
            admission_date = before.admission_date or now
            context = StudentIdContext(
                admission_id=before.id,
                temporary_id=before.temporary_id,
                admission_date=admission_date,
                applying_for_class=before.applying_for_class,
                academic_year_id=before.academic_year_id,
            )
            student_code = self._invoker.call(
                COLLABORATOR_STUDENT_ID,
                self._id_issuer.generate_student_id,
                context,
            )
            student = build_student(before, student_code, request, admission_date)
            self._student_store.create(student)
            stored_student = self._student_store.get(student.id)
            if stored_student is None:
                raise StudentNotFoundError(str(student.id))
            created["student"] = stored_student
            return replace(
                before,
                status=to_status,
                enrolled_student_id=stored_student.id,
                enrollment_date=now,
            )

        admission = self._run_transition(
            admission_id, ACTION_ENROLL, mutate, actor_id,
            event=NotificationEvent.ENROLLED,
            extra_payload=lambda a: {"student_code": created["student"].student_code},
        )
        return EnrollmentResult(admission=admission, student=created["student"])

    def reject(
        self,
        admission_id: UUID,
        reason: str,
        actor_id: UUID | None = None,
    ) -> Admission:
        """Reject the applicant from any non-terminal status.  Reason is required."""

        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            return replace(
                before,
                status=to_status,
                rejection_reason=validate_reason("reason", reason, required=True),
                rejection_date=self._clock.now(),
            )

        return self._run_transition(admission_id, ACTION_REJECT, mutate, actor_id)

    def withdraw(
        self,
        admission_id: UUID,
        reason: str | None = None,
        actor_id: UUID | None = None,
    ) -> Admission:
        """The applicant leaves the process of their own accord."""

        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            return replace(
                before,
                status=to_status,
                withdrawal_reason=validate_reason("reason", reason, required=False),
                withdrawal_date=self._clock.now(),
            )

        return self._run_transition(admission_id, ACTION_WITHDRAW, mutate, actor_id)

    def verify_documents(
        self,
        admission_id: UUID,
        notes: str | None = None,
        actor_id: UUID | None = None,
    ) -> Admission:
        """Mark the applicant's documents verified.  Status is unchanged."""

        def mutate(before: Admission, to_status: AdmissionStatus) -> Admission:
            return replace(
                before,
                status=to_status,
                documents_verified=True,
                documents_notes=notes,
            )

        return self._run_transition(admission_id, ACTION_VERIFY_DOCUMENTS, mutate, actor_id)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_admission(self, admission_id: UUID) -> Admission:
        admission = self._admission_store.get(admission_id)
        if admission is None:
            raise AdmissionNotFoundError(str(admission_id))
        return admission

    def find_all(
        self,
        filters: AdmissionFilter | None = None,
        page: PageRequest | None = None,
    ) -> AdmissionPage:
        """Filtered page of admissions, newest inquiry first, with the total match count."""
        page = page or PageRequest()
        pagination = self._config.pagination
        if page.limit is not None and page.limit < 1:
            raise AdmissionValidationError("limit", "must be at least 1")
        if page.offset < 0:
            raise AdmissionValidationError("offset", "must not be negative")
        limit = pagination.default_limit if page.limit is None else page.limit
        limit = min(limit, pagination.max_limit)

        items, total = self._admission_store.scan(filters, limit, page.offset)
        return AdmissionPage(items=items, total=total, limit=limit, offset=page.offset)

    def get_statistics(self, filters: AdmissionFilter | None = None) -> AdmissionStatistics:
        return AdmissionSelector(self._session).statistics(filters)

    # =========================================================================
    # Internals
    # =========================================================================

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        try:
            yield
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    def _run_transition(
        self,
        admission_id: UUID,
        action: str,
        mutate: Callable[[Admission, AdmissionStatus], Admission],
        actor_id: UUID | None,
        event: NotificationEvent | None = None,
        extra_payload: Callable[[Admission], dict[str, Any]] | None = None,
    ) -> Admission:
        """Load, check, mutate, write, commit, trace, notify."""
        start = time.monotonic()
        with LogContext.bind(
            admission_id=str(admission_id),
            operation=action,
            actor_id=str(actor_id) if actor_id else None,
        ):
            with self._transaction():
                before = self.get_admission(admission_id)
                to_status = self._check_transition(before, action, start)
                try:
                    after = mutate(before, to_status)
                    if actor_id is not None:
                        after = replace(after, processed_by_id=actor_id)
                    after.check_invariants()
                    stored = self._admission_store.update(after, expected_version=before.version)
                except Exception as exc:
                    # Legal transition that could not be completed; rolled back below.
                    self._emit_trace(
                        action,
                        before,
                        from_state=before.status.value,
                        outcome=OUTCOME_FAILED,
                        start=start,
                        reason=str(exc),
                        error_code=getattr(exc, "code", None) or type(exc).__name__,
                    )
                    raise

            self._emit_trace(
                action,
                stored,
                from_state=before.status.value,
                outcome=OUTCOME_SUCCESS,
                start=start,
                to_state=stored.status.value,
            )
            if event is not None:
                self._notify(event, stored, extra_payload(stored) if extra_payload else None)
        return stored

    def _check_transition(self, admission: Admission, action: str, start: float) -> AdmissionStatus:
        def guard_check(guard: Guard) -> bool:
            check = _GUARD_CHECKS.get(guard.name)
            return bool(check and check(admission))

        result = evaluate_transition(
            self._workflow, admission.status.value, action, guard_check=guard_check
        )
        if result.success:
            return AdmissionStatus(result.new_state)

        self._emit_trace(
            action,
            admission,
            from_state=admission.status.value,
            outcome=result.outcome,
            start=start,
            reason=result.reason,
        )
        if result.outcome == OUTCOME_GUARD_FAILED:
            raise GuardRejectedError(action, admission.status.value, result.guard)
        raise InvalidTransitionError(action, admission.status.value)

    def _emit_trace(
        self,
        action: str,
        admission: Admission,
        from_state: str | None,
        outcome: str,
        start: float,
        to_state: str | None = None,
        reason: str = "",
        error_code: str | None = None,
    ) -> None:
        """Emit a structured admission transition record."""
        record: dict[str, Any] = {
            "trace_type": TRACE_TYPE_ADMISSION_TRANSITION,
            "workflow": self._workflow.name,
            "action": action,
            "entity_type": "Admission",
            "entity_id": str(admission.id),
            "temporary_id": admission.temporary_id,
            "from_state": from_state,
            "outcome": outcome,
            "reason": reason,
            "duration_ms": round((time.monotonic() - start) * 1000, 3),
        }
        if to_state is not None:
            record["to_state"] = to_state
        if error_code is not None:
            record["error_code"] = error_code
        record.update(LogContext.get_all())
        logger.info("admission_transition", extra=record)

    def _notify(
        self,
        event: NotificationEvent,
        admission: Admission,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Best-effort notification to the first available contact number."""
        phone_number = resolve_contact(admission)
        if phone_number is None:
            logger.info(
                "notification_skipped_no_contact",
                extra={"event_tag": event.value, "temporary_id": admission.temporary_id},
            )
            return

        payload: dict[str, Any] = {
            "applicant_name": admission.full_name_en,
            "temporary_id": admission.temporary_id,
            "school_name": self._config.school.name,
        }
        if extra:
            payload.update(extra)

        try:
            self._notifications.send(phone_number, event.value, payload)
        except Exception:
            # Transition is already committed.
            logger.warning(
                "notification_failed",
                extra={
                    "event_tag": event.value,
                    "phone_number": phone_number,
                    "temporary_id": admission.temporary_id,
                },
                exc_info=True,
            )


def build_student(
    admission: Admission,
    student_code: str,
    request: EnrollmentRequest,
    admission_date: datetime,
) -> Student:
    """Student record copied from an admission.  Missing personal fields take defaults."""
    return Student(
        id=uuid4(),
        student_code=student_code,
        admission_id=admission.id,
        status=StudentStatus.ACTIVE,
        first_name_en=admission.first_name_en,
        middle_name_en=admission.middle_name_en,
        last_name_en=admission.last_name_en,
        first_name_np=admission.first_name_np,
        middle_name_np=admission.middle_name_np,
        last_name_np=admission.last_name_np,
        date_of_birth_bs=admission.date_of_birth_bs or "",
        date_of_birth_ad=admission.date_of_birth_ad or admission_date.date(),
        gender=admission.gender or "other",
        address_en=admission.address_en or "",
        address_np=admission.address_np,
        phone=admission.phone,
        email=admission.email,
        father_name=admission.father_name or "",
        father_phone=admission.father_phone or "",
        mother_name=admission.mother_name or "",
        mother_phone=admission.mother_phone or "",
        local_guardian_name=admission.guardian_name,
        local_guardian_phone=admission.guardian_phone,
        local_guardian_relation=admission.guardian_relation,
        emergency_contact=resolve_contact(admission) or "",
        admission_date=admission_date,
        admission_class=admission.applying_for_class,
        current_class_id=request.current_class_id,
        roll_number=request.roll_number,
        previous_school=admission.previous_school,
    )
