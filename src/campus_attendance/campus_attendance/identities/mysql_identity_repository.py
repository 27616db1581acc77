from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import TeacherIdentity
from .repository import TeacherIdentityRepository

_COLUMNS = "identifier, display_name, department, claimed_password_hash, is_claimed, claimed_by_user_id"


def _to_identity(r: dict) -> TeacherIdentity:
    return TeacherIdentity(
        identifier=r["identifier"],
        display_name=r["display_name"],
        department=r["department"],
        claimed_password_hash=r.get("claimed_password_hash"),
        is_claimed=bool(r.get("is_claimed")),
        claimed_by_user_id=r.get("claimed_by_user_id"),
    )


class MySQLTeacherIdentityRepository(TeacherIdentityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_identifier(self, identifier: str) -> Optional[TeacherIdentity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teacher_identities WHERE identifier=%s", (identifier,))
            r = fetchone(cur)
            return _to_identity(r) if r else None

    def list_identifiers_with_prefix(self, prefix: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT identifier FROM teacher_identities WHERE identifier LIKE %s", (f"{prefix}%",))
            return [r["identifier"] for r in fetchall(cur)]

    def list_all(self, *, department: Optional[str] = None) -> Sequence[TeacherIdentity]:
        with db_cursor(self._conn_factory) as (_, cur):
            if department:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM teacher_identities WHERE department=%s ORDER BY identifier",
                    (department,),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM teacher_identities ORDER BY department, identifier")
            return [_to_identity(r) for r in fetchall(cur)]

    def create(self, *, identifier: str, display_name: str, department: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_identities(identifier, display_name, department, is_claimed)
                VALUES(%s,%s,%s,0)
                """,
                (identifier, display_name, department),
            )

    def update_details(self, *, identifier: str, display_name: str, department: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_identities
                SET display_name=%s, department=%s
                WHERE identifier=%s AND is_claimed=0
                """,
                (display_name, department, identifier),
            )
            return cur.rowcount > 0

    def reset_claim(self, *, identifier: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT identifier FROM teacher_identities WHERE identifier=%s FOR UPDATE",
                (identifier,),
            )
            if not fetchone(cur):
                return False
            cur.execute(
                "DELETE FROM users WHERE teacher_identifier=%s AND role=%s",
                (identifier, Role.TEACHER.value),
            )
            cur.execute(
                """
                UPDATE teacher_identities
                SET is_claimed=0, claimed_password_hash=NULL, claimed_by_user_id=NULL
                WHERE identifier=%s
                """,
                (identifier,),
            )
            return True
