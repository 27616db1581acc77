from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TeacherIdentity:
    """Pre-provisioned teacher identity, claimed once at registration."""

    identifier: str
    display_name: str
    department: str
    claimed_password_hash: Optional[str] = None
    is_claimed: bool = False
    claimed_by_user_id: Optional[int] = None
