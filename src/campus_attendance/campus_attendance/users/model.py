from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import fmt_datetime
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a student or teacher account.

    Note: plain data object, no DB access code here.
    """

    user_id: int
    display_name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str]
    roll_number: Optional[str] = None
    teacher_identifier: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    def public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.display_name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
            "roll_number": self.roll_number,
            "teacher_id": self.teacher_identifier,
            "created_at": fmt_datetime(self.created_at),
        }
