from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateError, ValidationError
from .connection import DatabaseConnection

# Unique key name (see database/schema.sql) -> user-facing field name.
UNIQUE_KEY_FIELDS = {
    "uq_users_email": "email",
    "uq_users_roll_number": "roll_number",
    "uq_users_teacher_identifier": "teacher_identifier",
    "uq_attendance_student_day": "attendance_date",
    "PRIMARY": "identifier",
}

_DUP_KEY_RE = re.compile(r"for key '(?:\w+\.)?(\w+)'")
_COLUMN_RE = re.compile(r"for column '(\w+)'")


def duplicate_key_field(err: mysql.connector.Error) -> Optional[str]:
    match = _DUP_KEY_RE.search(getattr(err, "msg", "") or str(err))
    if not match:
        return None
    return UNIQUE_KEY_FIELDS.get(match.group(1), match.group(1))


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One transaction: commit when the block exits cleanly, roll back otherwise.

    Duplicate-key violations surface as DuplicateError and over-long values as
    ValidationError, so services never see those driver exceptions.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            field = duplicate_key_field(e)
            label = (field or "value").replace("_", " ")
            raise DuplicateError(f"This {label} is already taken", field=field) from e
        raise
    except mysql.connector.DataError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DATA_TOO_LONG:
            match = _COLUMN_RE.search(getattr(e, "msg", "") or str(e))
            column = match.group(1).replace("_", " ") if match else "value"
            raise ValidationError(f"The {column} is too long") from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def where_clause(clauses: List[str]) -> str:
    return " AND ".join(clauses) if clauses else "1=1"
