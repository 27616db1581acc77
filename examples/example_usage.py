"""Using the service layer directly (no Flask).

Controllers stay thin; the business rules live in the services.
"""

import importlib
import sys

from config import get_settings_module

from src.campus_attendance.campus_attendance.container import build_container


def main(teacher_identifier: str = "TCH_COM_001") -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, jwt_secret=settings.JWT_SECRET)

    teacher = container.users_repo.get_by_teacher_identifier(teacher_identifier)
    if not teacher:
        print(f"{teacher_identifier} has not been claimed yet")
        return

    print(container.attendance_service.department_stats(teacher).to_dict())
    for row in container.leave_service.list_for_review(teacher, status="pending")["rows"]:
        print(row.to_dict())


if __name__ == "__main__":
    main(*sys.argv[1:2])
