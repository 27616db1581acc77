from __future__ import annotations

from functools import wraps
from typing import Callable

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .model import User
from .service import AuthService


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        raise AuthenticationError("Access denied. No token provided.")
    return header.split(" ", 1)[1].strip()


def current_user() -> User:
    return g.current_user


class Guards:
    """Route decorators resolving the bearer token into `g.current_user`."""

    def __init__(self, auth_service: AuthService):
        self._auth = auth_service

    def login_required(self, view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = self._auth.authenticate_token(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    def role_required(self, *roles: Role) -> Callable[[Callable], Callable]:
        allowed = set(roles)

        def decorator(view: Callable) -> Callable:
            @wraps(view)
            def wrapper(*args, **kwargs):
                user = self._auth.authenticate_token(bearer_token())
                if user.role not in allowed:
                    names = " or ".join(r.value for r in roles)
                    raise AuthorizationError(f"Access denied. Required role: {names}")
                g.current_user = user
                return view(*args, **kwargs)

            return wrapper

        return decorator

    @property
    def student_required(self) -> Callable[[Callable], Callable]:
        return self.role_required(Role.STUDENT)

    @property
    def teacher_required(self) -> Callable[[Callable], Callable]:
        return self.role_required(Role.TEACHER)
