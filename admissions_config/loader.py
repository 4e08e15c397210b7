"""
Configuration Loader (``admissions_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``admissions_config.schema`` dataclasses.  Runtime code obtains config
through ``admissions_config.get_active_config()``, not from here.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown status name  -> ``ValueError`` from ``AdmissionStatus``.
* Constraint violations  -> ``ValueError`` from schema ``__post_init__``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from admissions_config.schema import (
    AdmissionsConfig,
    CollaboratorSettings,
    DocumentSettings,
    NotificationSettings,
    PaginationSettings,
    SchoolProfile,
    WorkflowPolicy,
)
from admissions_modules.admission.models import AdmissionStatus


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed configuration document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_school(data: dict[str, Any]) -> SchoolProfile:
    return SchoolProfile(
        code=str(data.get("code", "SCH")),
        name=data.get("name", "School Name"),
        address=data.get("address", "School Address"),
        principal_name=data.get("principal_name"),
    )


def parse_workflow(data: dict[str, Any]) -> WorkflowPolicy:
    admit_from = data.get("admit_from")
    if admit_from is None:
        return WorkflowPolicy(
            require_documents_verified=bool(data.get("require_documents_verified", False)),
        )
    return WorkflowPolicy(
        admit_from=tuple(AdmissionStatus(s) for s in admit_from),
        require_documents_verified=bool(data.get("require_documents_verified", False)),
    )


def parse_collaborators(data: dict[str, Any]) -> CollaboratorSettings:
    return CollaboratorSettings(
        timeout_seconds=float(data.get("timeout_seconds", 10.0)),
        max_workers=int(data.get("max_workers", 4)),
    )


def parse_notifications(data: dict[str, Any]) -> NotificationSettings:
    return NotificationSettings(
        provider=data.get("provider", "log"),
        token=data.get("token", "") or "",
        sender_id=data.get("sender_id", "DEMO"),
        base_url=data.get("base_url", "https://api.sparrowsms.com"),
        timeout_seconds=float(data.get("timeout_seconds", 30.0)),
    )


def parse_documents(data: dict[str, Any]) -> DocumentSettings:
    defaults = DocumentSettings()
    return DocumentSettings(
        output_dir=Path(data["output_dir"]) if data.get("output_dir") else defaults.output_dir,
        url_prefix=data.get("url_prefix", defaults.url_prefix),
        offer_valid_days=int(data.get("offer_valid_days", defaults.offer_valid_days)),
    )


def parse_pagination(data: dict[str, Any]) -> PaginationSettings:
    return PaginationSettings(
        default_limit=int(data.get("default_limit", 20)),
        max_limit=int(data.get("max_limit", 100)),
    )


def parse_config(data: dict[str, Any]) -> AdmissionsConfig:
    """
    Parse a full ``AdmissionsConfig`` from a dict.

    Every section is optional; absent sections take schema defaults.
    """
    return AdmissionsConfig(
        school=parse_school(data.get("school") or {}),
        workflow=parse_workflow(data.get("workflow") or {}),
        collaborators=parse_collaborators(data.get("collaborators") or {}),
        notifications=parse_notifications(data.get("notifications") or {}),
        documents=parse_documents(data.get("documents") or {}),
        pagination=parse_pagination(data.get("pagination") or {}),
        checksum=compute_checksum(data),
    )
