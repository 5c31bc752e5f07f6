"""Example: calling the service layer directly (no Flask).

Controllers are a thin layer; the matrix, overview and duplicate report all
come from the services wired in the container.
"""

import importlib
import sys

from config import get_settings_module

from src.membership_system.membership_system.container import build_container
from src.membership_system.membership_system.logging_config import configure_logging


def main(member_id: str, year: int):
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", None))
    container = build_container(db_config=settings.DB_CONFIG)

    overview = container.attendance_matrix_service.build_overview(member_id, year)
    print(overview.period_label, overview.weeks_in_scope_count, dict(overview.attended_counts))

    for report in container.meeting_duplicate_service.build_report():
        print(report.group.identity_key, report.dependent_counts, "->", report.suggested_meeting_id)


if __name__ == "__main__":
    main(sys.argv[1], int(sys.argv[2]))
