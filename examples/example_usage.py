"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

import importlib

from config import get_settings_module

from src.timetrack.timetrack.attendance.serialization import record_to_dict
from src.timetrack.timetrack.container import build_container
from src.timetrack.timetrack.employees.model import EmployeeIdentity
from src.timetrack.timetrack.logging_setup import setup_logging


def main():
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG)

    me = EmployeeIdentity(employee_id="emp-001", name="Demo Employee", email="demo@example.com")
    print(record_to_dict(container.attendance_service.today_view(me)))
    print(container.attendance_service.quick_status(me.employee_id).to_dict())
    print(container.stats_service.stats_bundle(me.employee_id).to_dict())


if __name__ == "__main__":
    main()
