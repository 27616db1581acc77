from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..core.constants import (
    MAX_DEPARTMENT_LENGTH,
    MAX_IDENTIFIER_LENGTH,
    MAX_NAME_LENGTH,
    TEACHER_ID_FALLBACK_DEPT,
    TEACHER_ID_PREFIX,
)
from ..core.enums import BulkOutcome
from ..core.exceptions import DomainError, DuplicateError, NotFoundError
from .model import TeacherIdentity
from .repository import TeacherIdentityRepository

logger = logging.getLogger(__name__)

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def department_abbreviation(department: Optional[str]) -> str:
    abbr = re.sub(r"[^A-Z]", "", (department or "")[:3].upper())
    return abbr or TEACHER_ID_FALLBACK_DEPT


def generate_teacher_identifier(department: Optional[str], existing: Iterable[str]) -> str:
    """Build the next TCH_<DEPT3>_<seq3> identifier for a department.

    The sequence continues from the highest trailing number already used
    with the same prefix.
    """

    prefix = f"{TEACHER_ID_PREFIX}_{department_abbreviation(department)}_"
    highest = 0
    for identifier in existing:
        if not identifier.startswith(prefix):
            continue
        match = _TRAILING_DIGITS.search(identifier)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1:03d}"


@dataclass(frozen=True)
class ProvisionOutcome:
    identifier: Optional[str]
    outcome: BulkOutcome
    reason: Optional[str] = None


class IdentityService:
    """Use case: administrators provision teacher identities before registration."""

    def __init__(self, identities: TeacherIdentityRepository):
        self._identities = identities

    def provision(self, *, display_name: str, department: str, identifier: Optional[str] = None) -> TeacherIdentity:
        display_name = require_non_empty(display_name, "Name", MAX_NAME_LENGTH)
        department = require_non_empty(department, "Department", MAX_DEPARTMENT_LENGTH)
        identifier = optional_text(identifier, "Teacher ID", MAX_IDENTIFIER_LENGTH)

        if not identifier:
            prefix = f"{TEACHER_ID_PREFIX}_{department_abbreviation(department)}_"
            identifier = generate_teacher_identifier(
                department, self._identities.list_identifiers_with_prefix(prefix)
            )
        elif self._identities.get_by_identifier(identifier):
            raise DuplicateError(f"Teacher ID {identifier} already exists", field="identifier")

        self._identities.create(identifier=identifier, display_name=display_name, department=department)
        logger.info("Provisioned teacher identity %s (%s)", identifier, department)
        return TeacherIdentity(identifier=identifier, display_name=display_name, department=department)

    def provision_many(self, rows: Iterable[dict]) -> Sequence[ProvisionOutcome]:
        """Create missing identities and refresh unclaimed ones; one bad row never stops the rest."""

        results: list[ProvisionOutcome] = []
        for row in rows:
            identifier = None
            try:
                identifier = optional_text(row.get("identifier"), "Teacher ID", MAX_IDENTIFIER_LENGTH)
                existing = self._identities.get_by_identifier(identifier) if identifier else None
                if existing:
                    name = require_non_empty(row.get("display_name"), "Name", MAX_NAME_LENGTH)
                    dept = require_non_empty(row.get("department"), "Department", MAX_DEPARTMENT_LENGTH)
                    updated = self._identities.update_details(identifier=identifier, display_name=name, department=dept)
                    if not updated:
                        results.append(ProvisionOutcome(identifier, BulkOutcome.FAILED, "Identity already claimed"))
                        continue
                    results.append(ProvisionOutcome(identifier, BulkOutcome.UPDATED))
                    continue

                created = self.provision(
                    display_name=row.get("display_name") or "",
                    department=row.get("department") or "",
                    identifier=identifier,
                )
                results.append(ProvisionOutcome(created.identifier, BulkOutcome.CREATED))
            except DomainError as e:
                results.append(ProvisionOutcome(identifier, BulkOutcome.FAILED, str(e)))
        return results

    def reset_claim(self, identifier: str) -> None:
        identifier = require_non_empty(identifier, "Teacher ID")
        if not self._identities.reset_claim(identifier=identifier):
            raise NotFoundError(f"Teacher ID {identifier} not found")
        logger.info("Reset claim on teacher identity %s", identifier)

    def list_identities(self, *, department: Optional[str] = None) -> Sequence[TeacherIdentity]:
        return self._identities.list_all(department=optional_text(department, "Department"))
