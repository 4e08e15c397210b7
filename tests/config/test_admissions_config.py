"""
Tests for admissions configuration: the shipped default set, YAML
parsing, schema validation and the config-driven workflow policy.
"""

from pathlib import Path

import pytest
import yaml

from admission_helpers import drive_to
from admissions_config import (
    AdmissionsConfig,
    CollaboratorSettings,
    DocumentSettings,
    NotificationSettings,
    PaginationSettings,
    SchoolProfile,
    WorkflowPolicy,
    get_active_config,
)
from admissions_config.loader import compute_checksum, parse_config
from admissions_kernel.exceptions import InvalidTransitionError
from admissions_modules.admission.models import AdmissionStatus
from admissions_modules.admission.workflows import DEFAULT_ADMIT_FROM

S = AdmissionStatus


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "admissions.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaultConfig:

    def test_loads(self):
        config = get_active_config()
        assert config.school.code == "SCH"
        assert config.workflow.admit_from == DEFAULT_ADMIT_FROM
        assert config.workflow.require_documents_verified is False
        assert config.notifications.provider == "log"
        assert config.pagination.default_limit == 20
        assert config.pagination.max_limit == 100
        assert config.documents.offer_valid_days == 7
        assert config.collaborators.timeout_seconds == 10.0

    def test_checksum_stable(self):
        assert get_active_config().checksum == get_active_config().checksum
        assert len(get_active_config().checksum) == 64

    def test_load_is_logged(self, captured_logs):
        get_active_config()
        records = [r for r in captured_logs() if r["message"] == "admissions_config_loaded"]
        assert records
        assert records[-1]["school_code"] == "SCH"
        assert records[-1]["admit_from"] == ["applied", "tested", "interviewed"]

    def test_matches_schema_defaults(self):
        loaded = get_active_config()
        defaults = AdmissionsConfig()
        assert loaded.school == defaults.school
        assert loaded.workflow == defaults.workflow
        assert loaded.pagination == defaults.pagination


class TestParsing:

    def test_empty_document_uses_defaults(self):
        config = parse_config({})
        assert config.workflow == WorkflowPolicy()
        assert config.notifications == NotificationSettings()

    def test_custom_file(self, tmp_path):
        path = _write(tmp_path, {
            "school": {"code": "KVM", "name": "Kathmandu Vidya Mandir"},
            "workflow": {"admit_from": ["interviewed"], "require_documents_verified": True},
            "documents": {"output_dir": str(tmp_path / "letters"), "offer_valid_days": 14},
        })
        config = get_active_config(path)
        assert config.school.code == "KVM"
        assert config.workflow.admit_from == (S.INTERVIEWED,)
        assert config.workflow.require_documents_verified is True
        assert config.documents.output_dir == tmp_path / "letters"
        assert config.documents.offer_valid_days == 14

    def test_checksum_changes_with_content(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            parse_config({"workflow": {"admit_from": ["graduated"]}})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("school: [unterminated")
        with pytest.raises(yaml.YAMLError):
            get_active_config(path)


class TestSchemaValidation:

    @pytest.mark.parametrize("code", ["", "sch", "SC-H"])
    def test_school_code(self, code):
        with pytest.raises(ValueError, match="school code"):
            SchoolProfile(code=code)

    @pytest.mark.parametrize("status", [S.INQUIRY, S.ADMITTED, S.ENROLLED, S.REJECTED, S.WITHDRAWN])
    def test_admit_from_excludes(self, status):
        with pytest.raises(ValueError, match="admit_from"):
            WorkflowPolicy(admit_from=(S.APPLIED, status))

    def test_admit_from_not_empty(self):
        with pytest.raises(ValueError):
            WorkflowPolicy(admit_from=())

    def test_sparrow_requires_token(self):
        with pytest.raises(ValueError, match="token"):
            NotificationSettings(provider="sparrow")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="provider"):
            NotificationSettings(provider="pigeon")

    def test_collaborator_timeout_positive(self):
        with pytest.raises(ValueError):
            CollaboratorSettings(timeout_seconds=0)

    def test_offer_validity(self):
        with pytest.raises(ValueError):
            DocumentSettings(offer_valid_days=0)

    def test_pagination_bounds(self):
        with pytest.raises(ValueError):
            PaginationSettings(default_limit=0)
        with pytest.raises(ValueError):
            PaginationSettings(default_limit=50, max_limit=10)


class TestConfigDrivenWorkflow:

    def test_admit_restricted_to_interviewed(self, make_admission_service):
        config = AdmissionsConfig(workflow=WorkflowPolicy(admit_from=(S.INTERVIEWED,)))
        svc = make_admission_service(config=config)

        applied = drive_to(svc, S.APPLIED)
        with pytest.raises(InvalidTransitionError):
            svc.admit(applied.id)
        assert svc.get_admission(applied.id).status is S.APPLIED

        interviewed = drive_to(svc, S.INTERVIEWED)
        assert svc.admit(interviewed.id).status is S.ADMITTED
