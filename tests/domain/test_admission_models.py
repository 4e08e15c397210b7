"""Tests for admission value objects and contact resolution."""

from dataclasses import FrozenInstanceError, replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from admissions_modules.admission.models import (
    CONTACT_PRIORITY,
    Admission,
    AdmissionStatus,
    resolve_contact,
)


def _admission(**overrides) -> Admission:
    base = Admission(
        id=uuid4(),
        temporary_id="SCH-INQ-2024-0001",
        first_name_en="Sita",
        last_name_en="Thapa",
        applying_for_class=5,
        status=AdmissionStatus.INQUIRY,
        inquiry_date=datetime(2024, 1, 15, 9, tzinfo=UTC),
    )
    return replace(base, **overrides)


class TestContactResolution:

    def test_priority_order(self):
        assert CONTACT_PRIORITY == ("guardian_phone", "father_phone", "mother_phone", "phone")

    def test_guardian_first(self):
        a = _admission(
            guardian_phone="9841000001",
            father_phone="9841000002",
            mother_phone="9841000003",
            phone="9841000004",
        )
        assert resolve_contact(a) == "9841000001"

    def test_falls_back_to_father(self):
        a = _admission(father_phone="9841000002", mother_phone="9841000003")
        assert resolve_contact(a) == "9841000002"

    def test_falls_back_to_mother(self):
        a = _admission(mother_phone="9841000003", phone="9841000004")
        assert resolve_contact(a) == "9841000003"

    def test_falls_back_to_applicant_phone(self):
        assert resolve_contact(_admission(phone="9841000004")) == "9841000004"

    def test_none_when_no_contact(self):
        assert resolve_contact(_admission()) is None

    def test_blank_values_are_absent(self):
        a = _admission(guardian_phone="   ", father_phone="", mother_phone="9841000003")
        assert resolve_contact(a) == "9841000003"


class TestAdmission:

    def test_frozen(self):
        a = _admission()
        with pytest.raises(FrozenInstanceError):
            a.status = AdmissionStatus.APPLIED  # type: ignore[misc]

    def test_full_name_without_middle(self):
        assert _admission().full_name_en == "Sita Thapa"

    def test_full_name_with_middle(self):
        assert _admission(middle_name_en="Kumari").full_name_en == "Sita Kumari Thapa"

    def test_terminal(self):
        assert not _admission().is_terminal
        assert _admission(status=AdmissionStatus.WITHDRAWN).is_terminal

    def test_invariants_hold_for_inquiry(self):
        _admission().check_invariants()

    def test_enrolled_requires_student(self):
        with pytest.raises(ValueError, match="enrolled_student_id"):
            _admission(status=AdmissionStatus.ENROLLED).check_invariants()

    def test_student_requires_enrolled(self):
        with pytest.raises(ValueError, match="enrolled_student_id"):
            _admission(enrolled_student_id=uuid4()).check_invariants()

    def test_rejected_requires_reason_and_date(self):
        with pytest.raises(ValueError, match="rejection"):
            _admission(status=AdmissionStatus.REJECTED, rejection_reason="x").check_invariants()
        _admission(
            status=AdmissionStatus.REJECTED,
            rejection_reason="x",
            rejection_date=datetime(2024, 2, 1, tzinfo=UTC),
        ).check_invariants()
