from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_TOKEN_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .identities.mysql_identity_repository import MySQLTeacherIdentityRepository
from .identities.repository import TeacherIdentityRepository
from .identities.service import IdentityService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .users.guards import Guards
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, ProfileService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    identities_repo: TeacherIdentityRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository

    token_service: TokenService
    auth_service: AuthService
    profile_service: ProfileService
    identity_service: IdentityService
    attendance_service: AttendanceService
    leave_service: LeaveService
    guards: Guards


def wire_container(
    *,
    users_repo: UserRepository,
    identities_repo: TeacherIdentityRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRepository,
    token_service: TokenService,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Assemble services around any repository implementation (MySQL or in-memory)."""
    auth_service = AuthService(users_repo, identities_repo, token_service)
    return Container(
        conn=conn,
        users_repo=users_repo,
        identities_repo=identities_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        token_service=token_service,
        auth_service=auth_service,
        profile_service=ProfileService(users_repo),
        identity_service=IdentityService(identities_repo),
        attendance_service=AttendanceService(attendance_repo, users_repo),
        leave_service=LeaveService(leaves_repo, users_repo),
        guards=Guards(auth_service),
    )


def build_container(*, db_config: dict, jwt_secret: str, jwt_expire_days: int = DEFAULT_TOKEN_DAYS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return wire_container(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        identities_repo=MySQLTeacherIdentityRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        token_service=TokenService(jwt_secret, expires_in=timedelta(days=int(jwt_expire_days))),
    )
