"""
admissions_services.notification -- SMS notification gateway.

Responsibility:
    Delivers admission lifecycle notifications to a phone number.  The
    production gateway renders a short message for the event tag and
    posts it to the Sparrow SMS HTTP API; the logging gateway only writes
    a log line (development default).

Architecture position:
    Services layer -- outbound integration.  The workflow engine depends
    on the ``NotificationGateway`` protocol only.

Invariants enforced:
    - Gateways raise ``NotificationDeliveryError`` for every delivery
      failure.  The engine logs and discards it; nothing here is retried.

Failure modes:
    - Transport errors, non-2xx responses, a ``response_code`` other than
      200 in the API body, or a payload missing a template field all
      raise ``NotificationDeliveryError``.
"""

from __future__ import annotations

from typing import Any, Protocol

import requests

from admissions_config.schema import NotificationSettings
from admissions_kernel.exceptions import NotificationDeliveryError
from admissions_kernel.logging_config import get_logger

logger = get_logger("services.notification")

SEND_PATH = "/api/v1/sms/send"

MESSAGE_TEMPLATES: dict[str, str] = {
    "inquiry": (
        "Dear Parent, thank you for your inquiry about {applicant_name} at "
        "{school_name}. Inquiry ID: {temporary_id}."
    ),
    "application": (
        "Dear Parent, the application for {applicant_name} ({temporary_id}) "
        "has been received by {school_name}."
    ),
    "test_scheduled": (
        "Dear Parent, the admission test for {applicant_name} ({temporary_id}) "
        "is scheduled on {test_date}. - {school_name}"
    ),
    "interview_scheduled": (
        "Dear Parent, the interview for {applicant_name} ({temporary_id}) "
        "is scheduled on {interview_date}. - {school_name}"
    ),
    "admitted": (
        "Congratulations! {applicant_name} ({temporary_id}) has been offered "
        "admission at {school_name}. Please complete enrollment."
    ),
    "enrolled": (
        "Welcome to {school_name}! {applicant_name} is enrolled with "
        "student ID {student_code}."
    ),
}


class NotificationGateway(Protocol):
    def send(self, phone_number: str, event_tag: str, payload: dict[str, Any]) -> None:
        """Deliver ``event_tag`` to ``phone_number``.  Fire-and-forget."""
        ...


def render_message(event_tag: str, payload: dict[str, Any]) -> str:
    """Message text for ``event_tag``; raises ``KeyError`` for unknown tags or fields."""
    return MESSAGE_TEMPLATES[event_tag].format(**payload)


class LoggingNotificationGateway:
    """Gateway that records each notification in the log and sends nothing."""

    def send(self, phone_number: str, event_tag: str, payload: dict[str, Any]) -> None:
        logger.info(
            "notification_logged",
            extra={
                "phone_number": phone_number,
                "event_tag": event_tag,
                "payload": payload,
            },
        )


class SparrowSmsGateway:
    """
    Sparrow SMS gateway.

    Contract:
        ``send`` posts a form-encoded ``token, from, to, text`` request to
        ``<base_url>/api/v1/sms/send`` and returns once the API accepts it.

    Guarantees:
        - Bounded by ``settings.timeout_seconds``.
        - Any failure surfaces as ``NotificationDeliveryError``.
    """

    def __init__(
        self,
        settings: NotificationSettings,
        http: requests.Session | None = None,
    ):
        if not settings.token:
            raise ValueError("Sparrow SMS gateway requires a token")
        self._settings = settings
        self._http = http or requests.Session()

    def send(self, phone_number: str, event_tag: str, payload: dict[str, Any]) -> None:
        try:
            text = render_message(event_tag, payload)
        except KeyError as exc:
            raise NotificationDeliveryError(
                phone_number, event_tag, f"missing template field {exc}"
            ) from exc

        url = self._settings.base_url.rstrip("/") + SEND_PATH
        try:
            response = self._http.post(
                url,
                data={
                    "token": self._settings.token,
                    "from": self._settings.sender_id,
                    "to": phone_number,
                    "text": text,
                },
                timeout=self._settings.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NotificationDeliveryError(phone_number, event_tag, str(exc)) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise NotificationDeliveryError(
                phone_number, event_tag, "invalid JSON response"
            ) from exc

        if body.get("response_code") != 200:
            raise NotificationDeliveryError(
                phone_number,
                event_tag,
                body.get("response") or body.get("response_message") or "gateway rejected message",
            )

        logger.info(
            "notification_sent",
            extra={
                "phone_number": phone_number,
                "event_tag": event_tag,
                "message_id": body.get("message_id"),
            },
        )


def build_notification_gateway(settings: NotificationSettings) -> NotificationGateway:
    """Gateway for the configured provider."""
    if settings.provider == "sparrow":
        return SparrowSmsGateway(settings)
    return LoggingNotificationGateway()
