"""Manage pre-provisioned teacher identities.

    python scripts/provision_teachers.py provision --name "Dr. Rao" --department "Computer Science"
    python scripts/provision_teachers.py import teachers.csv      # columns: identifier,display_name,department
    python scripts/provision_teachers.py reset TCH_COM_001
    python scripts/provision_teachers.py list [--department "Computer Science"]
"""

from __future__ import annotations

import argparse
import csv
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.campus_attendance.campus_attendance.core.exceptions import DomainError
from src.campus_attendance.campus_attendance.database.connection import DBConfig, DatabaseConnection
from src.campus_attendance.campus_attendance.identities.mysql_identity_repository import (
    MySQLTeacherIdentityRepository,
)
from src.campus_attendance.campus_attendance.identities.service import IdentityService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("provision", help="create one identity")
    p.add_argument("--name", required=True)
    p.add_argument("--department", required=True)
    p.add_argument("--identifier", help="explicit identifier; generated when omitted")

    p = sub.add_parser("import", help="create or refresh identities from a CSV file")
    p.add_argument("csv_path", type=Path)

    p = sub.add_parser("reset", help="release a claimed identity and delete its teacher account")
    p.add_argument("identifier")

    p = sub.add_parser("list", help="list identities")
    p.add_argument("--department")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(dict(settings.DB_CONFIG)))
    service = IdentityService(MySQLTeacherIdentityRepository(conn))

    try:
        if args.command == "provision":
            identity = service.provision(display_name=args.name, department=args.department, identifier=args.identifier)
            print(f"OK: {identity.identifier} -> {identity.display_name} ({identity.department})")
        elif args.command == "import":
            with args.csv_path.open(newline="", encoding="utf-8") as fh:
                outcomes = service.provision_many(csv.DictReader(fh))
            for o in outcomes:
                print(f"{o.outcome.value:<8} {o.identifier or '-':<14} {o.reason or ''}")
            if any(o.reason for o in outcomes):
                return 1
        elif args.command == "reset":
            service.reset_claim(args.identifier)
            print(f"OK: {args.identifier} is available again")
        else:
            for identity in service.list_identities(department=args.department):
                state = "claimed" if identity.is_claimed else "available"
                print(f"{identity.identifier:<14} {identity.department:<20} {identity.display_name} [{state}]")
    except DomainError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
