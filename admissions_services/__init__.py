"""
admissions_services -- collaborators of the admission workflow engine.

Notification gateway, offer-letter generator, student code issuer, and
the bounded-time invoker used to call the synchronous ones.
"""

from admissions_services.collaborators import CollaboratorInvoker
from admissions_services.documents import (
    DocumentGenerator,
    FileOfferLetterGenerator,
    OfferLetterData,
)
from admissions_services.identifiers import (
    SequenceStudentIdIssuer,
    StudentIdContext,
    StudentIdIssuer,
)
from admissions_services.notification import (
    LoggingNotificationGateway,
    NotificationGateway,
    SparrowSmsGateway,
    build_notification_gateway,
)

__all__ = [
    "CollaboratorInvoker",
    "DocumentGenerator",
    "FileOfferLetterGenerator",
    "LoggingNotificationGateway",
    "NotificationGateway",
    "OfferLetterData",
    "SequenceStudentIdIssuer",
    "SparrowSmsGateway",
    "StudentIdContext",
    "StudentIdIssuer",
    "build_notification_gateway",
]
