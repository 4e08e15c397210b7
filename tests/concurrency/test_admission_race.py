"""
Concurrency tests for the admission workflow engine.

Two services on separate sessions act on the same admission.  A blocking
collaborator holds the first caller between its read and its write so
the second caller can commit in between, making the race deterministic.
Exactly one writer wins; the loser gets ``OptimisticLockError`` and
leaves nothing behind.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import func, select

from admission_fakes import BlockingDocumentGenerator, BlockingStudentIdIssuer
from admission_helpers import default_inquiry, drive_to
from admissions_kernel.exceptions import OptimisticLockError
from admissions_modules.admission.models import AdmissionStatus, EnrollmentRequest
from admissions_modules.student.orm import StudentModel

S = AdmissionStatus


@pytest.fixture
def second_session(session_factory):
    sess = session_factory()
    yield sess
    sess.close()


@pytest.fixture
def rival_service(make_admission_service, second_session):
    """A second engine instance with its own session."""
    return make_admission_service(session=second_session)


def _student_count(session) -> int:
    return session.execute(select(func.count()).select_from(StudentModel)).scalar_one()


class TestConflictingTransitions:

    def test_reject_during_admit(
        self, make_admission_service, rival_service, notifications, captured_logs,
    ):
        blocking = BlockingDocumentGenerator()
        admitting = make_admission_service(documents=blocking)
        a = drive_to(admitting, S.INTERVIEWED)

        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(admitting.admit, a.id)
            try:
                assert blocking.entered.wait(timeout=2)
                rejected = rival_service.reject(a.id, "Seats full")
            finally:
                blocking.release.set()
            with pytest.raises(OptimisticLockError) as exc_info:
                future.result(timeout=5)

        assert exc_info.value.entity_id == str(a.id)
        assert exc_info.value.expected_version == a.version

        stored = rival_service.get_admission(a.id)
        assert stored == rejected
        assert stored.status is S.REJECTED
        assert stored.version == a.version + 1
        assert stored.admission_offer_letter_url is None
        assert "admitted" not in notifications.tags

        traces = [r for r in captured_logs() if r["message"] == "admission_transition"]
        assert [(t["action"], t["outcome"]) for t in traces if t["action"] in ("admit", "reject")] == [
            ("reject", "success"),
            ("admit", "failed"),
        ]
        assert traces[-1]["error_code"] == "OPTIMISTIC_LOCK_CONFLICT"

    def test_loser_can_reload_and_see_winner(self, make_admission_service, rival_service):
        blocking = BlockingDocumentGenerator()
        admitting = make_admission_service(documents=blocking)
        a = drive_to(admitting, S.APPLIED)

        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(admitting.admit, a.id)
            try:
                assert blocking.entered.wait(timeout=2)
                rival_service.withdraw(a.id, "Moved abroad")
            finally:
                blocking.release.set()
            with pytest.raises(OptimisticLockError):
                future.result(timeout=5)

        reloaded = admitting.get_admission(a.id)
        assert reloaded.status is S.WITHDRAWN
        assert reloaded.withdrawal_reason == "Moved abroad"

    def test_enroll_conflict_discards_student(
        self, make_admission_service, rival_service, session, notifications,
    ):
        issuer = BlockingStudentIdIssuer()
        enrolling = make_admission_service(id_issuer=issuer)
        a = drive_to(enrolling, S.ADMITTED)

        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(enrolling.enroll, a.id, EnrollmentRequest())
            try:
                assert issuer.entered.wait(timeout=2)
                rival_service.withdraw(a.id, "Chose another school")
            finally:
                issuer.release.set()
            with pytest.raises(OptimisticLockError):
                future.result(timeout=5)

        assert _student_count(session) == 0
        stored = enrolling.get_admission(a.id)
        assert stored.status is S.WITHDRAWN
        assert stored.enrolled_student_id is None
        assert "enrolled" not in notifications.tags

    def test_sequential_writers_both_succeed(self, admission_service, rival_service):
        a = admission_service.create_inquiry(default_inquiry())
        applied = admission_service.convert_to_application(a.id)
        verified = rival_service.verify_documents(a.id, "Birth certificate seen")

        assert verified.version == applied.version + 1
        assert verified.status is S.APPLIED
        assert verified.documents_verified


class TestConcurrentInquiries:

    def test_temporary_ids_unique(self, make_admission_service, session_factory):
        # First inquiry creates the year's counter row.
        make_admission_service().create_inquiry(default_inquiry())

        def create(i: int) -> str:
            with session_factory() as own_session:
                svc = make_admission_service(session=own_session)
                return svc.create_inquiry(default_inquiry(first_name_en=f"Child{i}")).temporary_id

        with ThreadPoolExecutor(max_workers=4) as pool:
            ids = list(pool.map(create, range(10)))

        assert len(set(ids)) == 10
        assert "SCH-INQ-2024-0001" not in ids
        assert all(tid.startswith("SCH-INQ-2024-") for tid in ids)
