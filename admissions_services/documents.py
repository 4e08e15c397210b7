"""
admissions_services.documents -- admission offer letters.

Responsibility:
    Produces the offer letter for an admitted applicant and returns the
    URL under which it is served.  ``AdmissionService`` stores that URL on
    the admission before the ``admit`` transition is persisted.

Architecture position:
    Services layer -- outbound integration.  The engine depends on the
    ``DocumentGenerator`` protocol and calls it through the
    ``CollaboratorInvoker``.

Failure modes:
    - ``OSError`` when the output directory cannot be written; the invoker
      turns it into ``CollaboratorError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Protocol

from admissions_config.schema import DocumentSettings, SchoolProfile
from admissions_kernel.logging_config import get_logger

logger = get_logger("services.documents")


@dataclass(frozen=True)
class OfferLetterData:
    temporary_id: str
    applicant_name: str
    applying_for_class: int
    admission_date: date
    valid_until: date
    school_name: str
    school_address: str
    principal_name: str | None = None


class DocumentGenerator(Protocol):
    def generate_admission_offer_letter(self, data: OfferLetterData) -> str:
        """Render the offer letter; returns its URL."""
        ...


def offer_letter_filename(temporary_id: str) -> str:
    return f"offer-{temporary_id}.txt"


def render_offer_letter(data: OfferLetterData) -> str:
    lines = [
        data.school_name,
        data.school_address,
        "",
        "ADMISSION OFFER LETTER",
        "",
        f"Reference: {data.temporary_id}",
        f"Date: {data.admission_date.isoformat()}",
        "",
        f"Dear {data.applicant_name},",
        "",
        f"We are pleased to offer you admission to Class {data.applying_for_class}.",
        f"This offer is valid until {data.valid_until.isoformat()}.",
        "Please complete the enrollment formalities before that date.",
        "",
        "Sincerely,",
        data.principal_name or "Principal",
    ]
    return "\n".join(lines) + "\n"


class FileOfferLetterGenerator:
    """
    Writes plain-text offer letters to a directory.

    Guarantees:
        - One file per temporary id; regenerating overwrites it.
        - Returned URL is ``<url_prefix>/offer-<temporary_id>.txt``.
    """

    def __init__(self, settings: DocumentSettings):
        self._output_dir = Path(settings.output_dir)
        self._url_prefix = settings.url_prefix.rstrip("/")

    def generate_admission_offer_letter(self, data: OfferLetterData) -> str:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        filename = offer_letter_filename(data.temporary_id)
        (self._output_dir / filename).write_text(render_offer_letter(data), encoding="utf-8")
        url = f"{self._url_prefix}/{filename}"
        logger.info(
            "offer_letter_generated",
            extra={"temporary_id": data.temporary_id, "url": url},
        )
        return url


def build_offer_letter_data(
    temporary_id: str,
    applicant_name: str,
    applying_for_class: int,
    admission_date: date,
    school: SchoolProfile,
    settings: DocumentSettings,
) -> OfferLetterData:
    return OfferLetterData(
        temporary_id=temporary_id,
        applicant_name=applicant_name,
        applying_for_class=applying_for_class,
        admission_date=admission_date,
        valid_until=admission_date + timedelta(days=settings.offer_valid_days),
        school_name=school.name,
        school_address=school.address,
        principal_name=school.principal_name,
    )
