from __future__ import annotations

import pytest

from src.campus_attendance.campus_attendance.core.enums import BulkOutcome
from src.campus_attendance.campus_attendance.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.campus_attendance.campus_attendance.identities.service import (
    department_abbreviation,
    generate_teacher_identifier,
)

from tests.fakes import add_teacher


def test_department_abbreviation_uses_first_three_letters():
    assert department_abbreviation("Computer Science") == "COM"
    assert department_abbreviation("electrical") == "ELE"
    assert department_abbreviation("") == "GEN"
    assert department_abbreviation(None) == "GEN"


def test_generated_identifier_continues_after_highest_sequence():
    existing = ["TCH_COM_001", "TCH_COM_007", "TCH_INF_042"]
    assert generate_teacher_identifier("Computer Science", existing) == "TCH_COM_008"
    assert generate_teacher_identifier("Mechanical", existing) == "TCH_MEC_001"


def test_provision_generates_identifier_when_missing(container):
    service = container.identity_service
    first = service.provision(display_name="Dr. Rao", department="Computer Science")
    second = service.provision(display_name="Dr. Iyer", department="Computer Science")

    assert first.identifier == "TCH_COM_001"
    assert second.identifier == "TCH_COM_002"
    assert not container.identities_repo.get_by_identifier("TCH_COM_002").is_claimed


def test_provision_rejects_existing_identifier(container):
    service = container.identity_service
    service.provision(display_name="Dr. Rao", department="Computer Science", identifier="TCH_COM_001")

    with pytest.raises(DuplicateError):
        service.provision(display_name="Someone", department="Computer Science", identifier="TCH_COM_001")


def test_provision_requires_name_and_department(container):
    with pytest.raises(ValidationError):
        container.identity_service.provision(display_name="", department="Computer Science")
    with pytest.raises(ValidationError):
        container.identity_service.provision(display_name="Dr. Rao", department=" ")


def test_provision_many_reports_each_row(container):
    add_teacher(container, identifier="TCH_ELE_001", department="Electrical")
    container.identities_repo.add("TCH_MEC_001", "Old Name", "Mechanical")

    outcomes = container.identity_service.provision_many(
        [
            {"display_name": "Dr. New", "department": "Computer Science"},
            {"identifier": "TCH_MEC_001", "display_name": "Dr. Menon", "department": "Mechanical"},
            {"identifier": "TCH_ELE_001", "display_name": "Renamed", "department": "Electrical"},
            {"display_name": "", "department": "Civil"},
        ]
    )

    assert [o.outcome for o in outcomes] == [
        BulkOutcome.CREATED,
        BulkOutcome.UPDATED,
        BulkOutcome.FAILED,
        BulkOutcome.FAILED,
    ]
    assert outcomes[0].identifier == "TCH_COM_001"
    assert container.identities_repo.get_by_identifier("TCH_MEC_001").display_name == "Dr. Menon"
    # Claimed identities keep their details.
    assert container.identities_repo.get_by_identifier("TCH_ELE_001").display_name == "Dr. Rao"


def test_reset_claim_frees_identity_and_removes_teacher(container):
    teacher = add_teacher(container)

    container.identity_service.reset_claim("TCH_COM_001")

    identity = container.identities_repo.get_by_identifier("TCH_COM_001")
    assert not identity.is_claimed
    assert identity.claimed_password_hash is None
    assert container.users_repo.get_by_id(teacher.user_id) is None


def test_reset_claim_unknown_identifier(container):
    with pytest.raises(NotFoundError):
        container.identity_service.reset_claim("TCH_XXX_999")


def test_list_identities_filters_by_department(container):
    container.identities_repo.add("TCH_COM_001", "A", "Computer Science")
    container.identities_repo.add("TCH_ELE_001", "B", "Electrical")

    listed = container.identity_service.list_identities(department="Electrical")

    assert [i.identifier for i in listed] == ["TCH_ELE_001"]
    assert len(container.identity_service.list_identities()) == 2
