from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_roll_number(self, roll_number: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_teacher_identifier(self, teacher_identifier: str) -> Optional[User]:
        raise NotImplementedError

    def create_student(
        self,
        *,
        display_name: str,
        email: str,
        password_hash: str,
        roll_number: str,
        department: Optional[str],
    ) -> int:
        raise NotImplementedError

    def create_teacher_with_claim(
        self,
        *,
        display_name: str,
        email: str,
        password_hash: str,
        department: str,
        teacher_identifier: str,
    ) -> int:
        """Insert the teacher and claim the identity in one transaction.

        Raises ConflictError (nothing written) when the identity is already claimed.
        """

        raise NotImplementedError

    def update_profile(
        self,
        *,
        user_id: int,
        display_name: str,
        email: str,
        department: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def update_password(self, *, user_id: int, password_hash: str, teacher_identifier: Optional[str] = None) -> bool:
        """Teachers also get the identity credential updated, in the same transaction."""

        raise NotImplementedError

    def list_students(self, *, department: Optional[str]) -> Sequence[User]:
        raise NotImplementedError
