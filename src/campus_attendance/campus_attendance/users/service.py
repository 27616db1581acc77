from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import as_text, normalize_email, optional_text, require_min_length, require_non_empty
from ..core.constants import (
    MAX_DEPARTMENT_LENGTH,
    MAX_IDENTIFIER_LENGTH,
    MAX_NAME_LENGTH,
    MAX_ROLL_NUMBER_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from ..identities.repository import TeacherIdentityRepository
from .model import User
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


def _verify_password(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password or "")
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class AuthService:
    """Use cases: registration (student / teacher identity claim), login, token checks."""

    def __init__(self, users: UserRepository, identities: TeacherIdentityRepository, tokens: TokenService):
        self._users = users
        self._identities = identities
        self._tokens = tokens

    def validate_teacher_identifier(self, identifier: str) -> dict:
        identifier = require_non_empty(identifier, "Teacher ID")
        identity = self._identities.get_by_identifier(identifier)
        if not identity:
            raise NotFoundError("Invalid Teacher ID")
        if identity.is_claimed:
            raise ConflictError("This Teacher ID is already registered")
        return {
            "valid": True,
            "teacher_id": identity.identifier,
            "name": identity.display_name,
            "department": identity.department,
        }

    def _ensure_email_free(self, email: str) -> None:
        if self._users.get_by_email(email):
            raise DuplicateError("This email is already registered. Please use a different email", field="email")

    def register_student(
        self,
        *,
        display_name: str,
        email: str,
        password: str,
        roll_number: str,
        department: Optional[str],
    ) -> tuple[User, str]:
        display_name = require_non_empty(display_name, "Name", MAX_NAME_LENGTH)
        email = normalize_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        roll_number = require_non_empty(roll_number, "Roll number", MAX_ROLL_NUMBER_LENGTH)
        department = optional_text(department, "Department", MAX_DEPARTMENT_LENGTH)

        self._ensure_email_free(email)
        if self._users.get_by_roll_number(roll_number):
            raise DuplicateError("This roll number is already taken. Please use a different one", field="roll_number")

        user_id = self._users.create_student(
            display_name=display_name,
            email=email,
            password_hash=generate_password_hash(password),
            roll_number=roll_number,
            department=department,
        )
        user = self._load(user_id)
        logger.info("Registered student %s (roll %s)", user.user_id, roll_number)
        return user, self._tokens.issue(user)

    def register_teacher(
        self,
        *,
        email: str,
        password: str,
        teacher_identifier: str,
        department: str,
    ) -> tuple[User, str]:
        email = normalize_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        teacher_identifier = require_non_empty(teacher_identifier, "Teacher ID", MAX_IDENTIFIER_LENGTH)
        department = require_non_empty(department, "Department", MAX_DEPARTMENT_LENGTH)

        identity = self._identities.get_by_identifier(teacher_identifier)
        if not identity:
            raise ValidationError("Teacher ID not found. Please contact admin for correct Teacher ID.")
        if identity.department != department:
            raise ValidationError("Teacher ID and Department do not match. Please check your details.")
        if identity.is_claimed:
            raise ConflictError("This Teacher ID is already registered")
        self._ensure_email_free(email)

        user_id = self._users.create_teacher_with_claim(
            display_name=identity.display_name or "Teacher",
            email=email,
            password_hash=generate_password_hash(password),
            department=department,
            teacher_identifier=identity.identifier,
        )
        user = self._load(user_id)
        logger.info("Teacher identity %s claimed by user %s", identity.identifier, user.user_id)
        return user, self._tokens.issue(user)

    def login(self, *, login: str, password: str, role: Role) -> tuple[User, str]:
        login = (as_text(login, "Login") or "").strip()
        password = as_text(password, "Password")
        if not login or not password:
            raise ValidationError("Please enter both email/Teacher ID and password")

        if role == Role.TEACHER:
            identity = self._identities.get_by_identifier(login)
            if not identity or not _verify_password(identity.claimed_password_hash, password):
                raise AuthenticationError("Invalid Teacher ID or password")
            user = self._users.get_by_teacher_identifier(identity.identifier)
            if not user or user.role != Role.TEACHER:
                raise AuthenticationError("Invalid Teacher ID or password")
        else:
            user = self._users.get_by_email(login.lower())
            if not user or user.role != Role.STUDENT or not _verify_password(user.password_hash, password):
                raise AuthenticationError("Invalid email or password")

        return user, self._tokens.issue(user)

    def authenticate_token(self, token: str) -> User:
        user = self._users.get_by_id(self._tokens.user_id_from(token))
        if not user:
            raise AuthenticationError("Invalid token. User not found.")
        return user

    def _load(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user


class ProfileService:
    """Use cases: view and edit own account."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_profile(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(
        self,
        user: User,
        *,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
        department: Optional[str] = None,
    ) -> User:
        new_name = optional_text(display_name, "Name", MAX_NAME_LENGTH) or user.display_name
        new_email = normalize_email(email) if optional_text(email, "Email") else user.email
        new_department = optional_text(department, "Department", MAX_DEPARTMENT_LENGTH) or user.department

        if user.is_teacher and new_department != user.department:
            raise ValidationError("Teachers cannot change department; it is bound to the Teacher ID")

        if new_email != user.email:
            other = self._users.get_by_email(new_email)
            if other and other.user_id != user.user_id:
                raise DuplicateError("This email is already in use", field="email")

        if not self._users.update_profile(
            user_id=user.user_id,
            display_name=new_name,
            email=new_email,
            department=new_department,
        ):
            raise NotFoundError("User not found")
        return self.get_profile(user.user_id)

    def change_password(self, user: User, *, current_password: str, new_password: str) -> None:
        current_password = as_text(current_password, "Current password")
        if not current_password or not new_password:
            raise ValidationError("Please provide both current and new password")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)

        fresh = self.get_profile(user.user_id)
        if not _verify_password(fresh.password_hash, current_password):
            raise AuthenticationError("Current password is incorrect")

        self._users.update_password(
            user_id=fresh.user_id,
            password_hash=generate_password_hash(new_password),
            teacher_identifier=fresh.teacher_identifier if fresh.is_teacher else None,
        )
        logger.info("Password changed for user %s", fresh.user_id)
