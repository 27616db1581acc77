"""Load the demo teacher identities from database/seed.sql."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.campus_attendance.campus_attendance.database.bootstrap import apply_seed_sql
from src.campus_attendance.campus_attendance.database.connection import DBConfig, DatabaseConnection
from src.campus_attendance.campus_attendance.identities.mysql_identity_repository import (
    MySQLTeacherIdentityRepository,
)


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")

    repo = MySQLTeacherIdentityRepository(DatabaseConnection.get_instance(DBConfig.from_mapping(db_config)))
    for identity in repo.list_all():
        state = "claimed" if identity.is_claimed else "available"
        print(f"{identity.identifier:<14} {identity.department:<20} {identity.display_name} [{state}]")


if __name__ == "__main__":
    main()
