from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ..core.constants import DEFAULT_TOKEN_DAYS
from ..core.exceptions import AuthenticationError
from .model import User


@dataclass(frozen=True)
class TokenService:
    """Signs and verifies bearer session tokens carrying the user id."""

    secret: str
    expires_in: timedelta = timedelta(days=DEFAULT_TOKEN_DAYS)
    algorithm: str = "HS256"

    def issue(self, user: User, *, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(user.user_id),
            "role": user.role.value,
            "iat": issued_at,
            "exp": issued_at + self.expires_in,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def user_id_from(self, token: str) -> int:
        if not token:
            raise AuthenticationError("Access denied. No token provided.")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthenticationError("Token expired.")
        except JWTError:
            raise AuthenticationError("Invalid token.")

        try:
            return int(payload.get("sub"))
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token.")
