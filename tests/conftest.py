"""
Shared fixtures.

Every test that touches the database gets its own SQLite file, so
commits are real and several sessions can work on the same rows.
Collaborators default to the recording fakes in ``admission_fakes``;
``make_admission_service`` swaps any of them per test.
"""

import json
import logging
from io import StringIO
from uuid import UUID, uuid4

import pytest

from admission_fakes import (
    FakeDocumentGenerator,
    FakeStudentIdIssuer,
    RecordingNotificationGateway,
)
from admissions_config import AdmissionsConfig
from admissions_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from admissions_kernel.domain.clock import DeterministicClock
from admissions_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from admissions_modules.admission.models import InquiryRequest
from admissions_modules.admission.service import AdmissionService
from admissions_services.collaborators import CollaboratorInvoker

TEST_ACTOR_ID = uuid4()


@pytest.fixture(autouse=True, scope="session")
def _json_logging_for_suite():
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _fresh_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Call the fixture value to get every admissions log line so far as a dict::

        assert any(line["message"] == "admission_transition" for line in captured_logs())
    """
    buffer = StringIO()
    capture = logging.StreamHandler(buffer)
    capture.setFormatter(StructuredFormatter())
    tree = logging.getLogger("admissions_kernel")
    tree.addHandler(capture)
    try:
        yield lambda: [json.loads(raw) for raw in buffer.getvalue().splitlines() if raw]
    finally:
        tree.removeHandler(capture)


# -- database ---------------------------------------------------------------


@pytest.fixture
def db_engine(tmp_path):
    reset_engine()
    engine = init_engine_from_url(f"sqlite:///{tmp_path / 'admissions.db'}")
    create_tables()
    yield engine
    reset_engine()


@pytest.fixture
def session_factory(db_engine):
    return get_session_factory()


@pytest.fixture
def session(session_factory):
    with session_factory() as sess:
        yield sess


# -- time, actors, collaborators ---------------------------------------------


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def notifications() -> RecordingNotificationGateway:
    return RecordingNotificationGateway()


@pytest.fixture
def documents() -> FakeDocumentGenerator:
    return FakeDocumentGenerator()


@pytest.fixture
def id_issuer() -> FakeStudentIdIssuer:
    return FakeStudentIdIssuer()


@pytest.fixture
def invoker():
    with CollaboratorInvoker(timeout_seconds=2.0, max_workers=2) as inv:
        yield inv


@pytest.fixture
def admissions_config() -> AdmissionsConfig:
    return AdmissionsConfig()


# -- the service under test --------------------------------------------------


@pytest.fixture
def make_admission_service(
    session,
    notifications,
    documents,
    id_issuer,
    deterministic_clock,
    admissions_config,
    invoker,
):
    """Build an ``AdmissionService``; keyword arguments replace the defaults."""
    defaults = dict(
        session=session,
        notifications=notifications,
        documents=documents,
        id_issuer=id_issuer,
        clock=deterministic_clock,
        config=admissions_config,
        invoker=invoker,
    )

    def make(**overrides) -> AdmissionService:
        return AdmissionService(**{**defaults, **overrides})

    return make


@pytest.fixture
def admission_service(make_admission_service) -> AdmissionService:
    return make_admission_service()


@pytest.fixture
def ram_sharma() -> InquiryRequest:
    return InquiryRequest(
        first_name_en="Ram",
        last_name_en="Sharma",
        applying_for_class=1,
        guardian_phone="9841234567",
    )
