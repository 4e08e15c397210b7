"""
Admission aggregate.

Only models and workflow definitions are re-exported here; import
``admissions_modules.admission.service`` directly for the service so
that configuration can import the models without a cycle.
"""

from admissions_modules.admission.models import (
    CONTACT_PRIORITY,
    TERMINAL_STATUSES,
    Admission,
    AdmissionFilter,
    AdmissionPage,
    AdmissionStatistics,
    AdmissionStatus,
    ApplicationDetails,
    EnrollmentRequest,
    EnrollmentResult,
    InquiryRequest,
    InquirySource,
    InterviewFeedback,
    NotificationEvent,
    PageRequest,
    TestScore,
    resolve_contact,
)
from admissions_modules.admission.workflows import (
    ADMISSION_WORKFLOW,
    DOCUMENTS_VERIFIED,
    build_admission_workflow,
)

__all__ = [
    "ADMISSION_WORKFLOW",
    "CONTACT_PRIORITY",
    "DOCUMENTS_VERIFIED",
    "TERMINAL_STATUSES",
    "Admission",
    "AdmissionFilter",
    "AdmissionPage",
    "AdmissionStatistics",
    "AdmissionStatus",
    "ApplicationDetails",
    "EnrollmentRequest",
    "EnrollmentResult",
    "InquiryRequest",
    "InquirySource",
    "InterviewFeedback",
    "NotificationEvent",
    "PageRequest",
    "TestScore",
    "build_admission_workflow",
    "resolve_contact",
]
