"""
admissions_config -- single public entrypoint for admissions configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the resulting
    ``AdmissionsConfig`` by constructor injection and never read files or
    environment variables themselves.

Architecture position:
    Configuration -- YAML-driven.  Sits above ``admissions_kernel`` and
    beside ``admissions_modules``; the kernel MUST NEVER import from here.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` -- schema validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``admissions_config_loaded`` log entry with the source path and the
    checksum of the parsed document.
"""

from __future__ import annotations

from pathlib import Path

from admissions_config.loader import load_yaml_file, parse_config
from admissions_config.schema import (
    AdmissionsConfig,
    CollaboratorSettings,
    DocumentSettings,
    NotificationSettings,
    PaginationSettings,
    SchoolProfile,
    WorkflowPolicy,
)
from admissions_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration set shipped with the package
_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> AdmissionsConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load; defaults to ``sets/default.yaml``.

    Returns:
        A validated, frozen ``AdmissionsConfig``.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(path))
    _logger.info(
        "admissions_config_loaded",
        extra={
            "config_path": str(path),
            "checksum": config.checksum,
            "school_code": config.school.code,
            "admit_from": [s.value for s in config.workflow.admit_from],
            "require_documents_verified": config.workflow.require_documents_verified,
            "notification_provider": config.notifications.provider,
        },
    )
    return config


__all__ = [
    "AdmissionsConfig",
    "CollaboratorSettings",
    "DocumentSettings",
    "NotificationSettings",
    "PaginationSettings",
    "SchoolProfile",
    "WorkflowPolicy",
    "get_active_config",
]
