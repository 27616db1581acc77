from __future__ import annotations

import re
from typing import Any, Optional

from ..core.constants import MAX_EMAIL_LENGTH
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")


def as_text(value: Any, field_name: str) -> Optional[str]:
    """None stays None; anything that is not a string is rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters long")
    return value


def require_non_empty(value: Any, field_name: str, max_len: Optional[int] = None) -> str:
    text = (as_text(value, field_name) or "").strip()
    if not text:
        raise ValidationError(f"{field_name} is required")
    if max_len is not None:
        require_max_length(text, field_name, max_len)
    return text


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    text = as_text(value, field_name)
    if text is None or len(text) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return text


def normalize_email(value: Any, max_len: int = MAX_EMAIL_LENGTH) -> str:
    email = require_non_empty(value, "Email", max_len).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email")
    return email


def optional_text(value: Any, field_name: str = "Value", max_len: Optional[int] = None) -> Optional[str]:
    text = (as_text(value, field_name) or "").strip()
    if max_len is not None:
        require_max_length(text, field_name, max_len)
    return text or None


def clamp_page(page, limit, *, default_limit: int, max_limit: int) -> tuple[int, int]:
    try:
        page = int(page or 1)
        limit = int(limit or default_limit)
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")
    if page < 1:
        page = 1
    if limit < 1:
        limit = default_limit
    return page, min(limit, max_limit)
