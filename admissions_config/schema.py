"""
Configuration Schema (``admissions_config.schema``).

Responsibility
--------------
Frozen dataclasses describing one admissions configuration set: the
school profile used in documents and ids, the workflow policy for the
open product questions (which states may be admitted from, whether
documents must be verified first), collaborator time budgets, the SMS
gateway, offer-letter output, and pagination limits.

Architecture position
---------------------
**Config layer** -- schema only.  No I/O; ``loader.py`` builds these
from YAML.

Invariants enforced
-------------------
* ``__post_init__`` rejects inconsistent values with ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from admissions_modules.admission.models import AdmissionStatus
from admissions_modules.admission.workflows import DEFAULT_ADMIT_FROM


@dataclass(frozen=True)
class SchoolProfile:
    """School identity printed on offer letters and embedded in ids."""
    code: str = "SCH"
    name: str = "School Name"
    address: str = "School Address"
    principal_name: str | None = None

    def __post_init__(self) -> None:
        if not self.code or not self.code.isalnum() or not self.code.isupper():
            raise ValueError(
                f"school code must be non-empty upper-case alphanumeric, got {self.code!r}"
            )


@dataclass(frozen=True)
class WorkflowPolicy:
    """Product decisions the admission workflow treats as configuration."""
    admit_from: tuple[AdmissionStatus, ...] = DEFAULT_ADMIT_FROM
    require_documents_verified: bool = False

    def __post_init__(self) -> None:
        if not self.admit_from:
            raise ValueError("admit_from must name at least one status")
        illegal = {
            AdmissionStatus.INQUIRY,
            AdmissionStatus.ADMITTED,
            AdmissionStatus.ENROLLED,
            AdmissionStatus.REJECTED,
            AdmissionStatus.WITHDRAWN,
        }
        bad = [s.value for s in self.admit_from if s in illegal]
        if bad:
            raise ValueError(f"admit_from may not include {', '.join(bad)}")


@dataclass(frozen=True)
class CollaboratorSettings:
    """Time budget for synchronous collaborators (documents, id issuance)."""
    timeout_seconds: float = 10.0
    max_workers: int = 4

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")


@dataclass(frozen=True)
class NotificationSettings:
    """SMS gateway settings.  ``provider`` is ``sparrow`` or ``log``."""
    provider: str = "log"
    token: str = ""
    sender_id: str = "DEMO"
    base_url: str = "https://api.sparrowsms.com"
    timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        if self.provider not in ("sparrow", "log"):
            raise ValueError(f"unknown notification provider {self.provider!r}")
        if self.provider == "sparrow" and not self.token:
            raise ValueError("sparrow provider requires a token")
        if self.timeout_seconds <= 0:
            raise ValueError("notification timeout_seconds must be positive")


@dataclass(frozen=True)
class DocumentSettings:
    """Where offer letters are written and how they are addressed."""
    output_dir: Path = Path("uploads/documents/admission-letters")
    url_prefix: str = "/uploads/documents/admission-letters"
    offer_valid_days: int = 7

    def __post_init__(self) -> None:
        if self.offer_valid_days < 1:
            raise ValueError("offer_valid_days must be at least 1")


@dataclass(frozen=True)
class PaginationSettings:
    default_limit: int = 20
    max_limit: int = 100

    def __post_init__(self) -> None:
        if self.default_limit < 1:
            raise ValueError("default_limit must be at least 1")
        if self.max_limit < self.default_limit:
            raise ValueError("max_limit must be >= default_limit")


@dataclass(frozen=True)
class AdmissionsConfig:
    """A complete, validated admissions configuration set."""
    school: SchoolProfile = field(default_factory=SchoolProfile)
    workflow: WorkflowPolicy = field(default_factory=WorkflowPolicy)
    collaborators: CollaboratorSettings = field(default_factory=CollaboratorSettings)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    documents: DocumentSettings = field(default_factory=DocumentSettings)
    pagination: PaginationSettings = field(default_factory=PaginationSettings)
    checksum: str = ""
