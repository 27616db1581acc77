from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TeacherIdentity


class TeacherIdentityRepository(Protocol):
    def get_by_identifier(self, identifier: str) -> Optional[TeacherIdentity]:
        raise NotImplementedError

    def list_identifiers_with_prefix(self, prefix: str) -> Sequence[str]:
        raise NotImplementedError

    def list_all(self, *, department: Optional[str] = None) -> Sequence[TeacherIdentity]:
        raise NotImplementedError

    def create(self, *, identifier: str, display_name: str, department: str) -> None:
        """Raises DuplicateError when the identifier exists."""

        raise NotImplementedError

    def update_details(self, *, identifier: str, display_name: str, department: str) -> bool:
        """Refresh name/department of an unclaimed identity."""

        raise NotImplementedError

    def reset_claim(self, *, identifier: str) -> bool:
        """Delete the linked teacher account and mark the identity unclaimed."""

        raise NotImplementedError
