from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = (
    "user_id, display_name, email, password_hash, role, department, "
    "roll_number, teacher_identifier, created_at"
)


def _to_user(r: dict) -> User:
    return User(
        user_id=int(r["user_id"]),
        display_name=r["display_name"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        department=r.get("department"),
        roll_number=r.get("roll_number"),
        teacher_identifier=r.get("teacher_identifier"),
        created_at=r.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}", (value,))
            r = fetchone(cur)
            return _to_user(r) if r else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("user_id=%s", int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email=%s", email)

    def get_by_roll_number(self, roll_number: str) -> Optional[User]:
        return self._get_one("roll_number=%s", roll_number)

    def get_by_teacher_identifier(self, teacher_identifier: str) -> Optional[User]:
        return self._get_one("teacher_identifier=%s", teacher_identifier)

    def create_student(
        self,
        *,
        display_name: str,
        email: str,
        password_hash: str,
        roll_number: str,
        department: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(display_name, email, password_hash, role, department, roll_number)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (display_name, email, password_hash, Role.STUDENT.value, department, roll_number),
            )
            return int(cur.lastrowid)

    def create_teacher_with_claim(
        self,
        *,
        display_name: str,
        email: str,
        password_hash: str,
        department: str,
        teacher_identifier: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(display_name, email, password_hash, role, department, teacher_identifier)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (display_name, email, password_hash, Role.TEACHER.value, department, teacher_identifier),
            )
            user_id = int(cur.lastrowid)
            cur.execute(
                """
                UPDATE teacher_identities
                SET is_claimed=1, claimed_password_hash=%s, claimed_by_user_id=%s
                WHERE identifier=%s AND is_claimed=0
                """,
                (password_hash, user_id, teacher_identifier),
            )
            if cur.rowcount == 0:
                # Raising inside the block rolls back the user insert.
                raise ConflictError("This Teacher ID is already registered")
            return user_id

    def update_profile(
        self,
        *,
        user_id: int,
        display_name: str,
        email: str,
        department: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET display_name=%s, email=%s, department=%s WHERE user_id=%s",
                (display_name, email, department, int(user_id)),
            )
            return cur.rowcount > 0 or self._exists(cur, user_id)

    @staticmethod
    def _exists(cur, user_id: int) -> bool:
        # MySQL reports 0 affected rows when values are unchanged.
        cur.execute("SELECT 1 AS found FROM users WHERE user_id=%s", (int(user_id),))
        return fetchone(cur) is not None

    def update_password(self, *, user_id: int, password_hash: str, teacher_identifier: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))
            updated = cur.rowcount > 0
            if teacher_identifier:
                cur.execute(
                    "UPDATE teacher_identities SET claimed_password_hash=%s WHERE identifier=%s AND claimed_by_user_id=%s",
                    (password_hash, teacher_identifier, int(user_id)),
                )
            return updated

    def list_students(self, *, department: Optional[str]) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE role=%s AND department <=> %s
                ORDER BY roll_number, display_name
                """,
                (Role.STUDENT.value, department),
            )
            return [_to_user(r) for r in fetchall(cur)]
