from __future__ import annotations

from dataclasses import dataclass

from .access.mysql_access_repository import MySQLAccessRepository
from .access.service import AccessScopeService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceMatrixService
from .core.constants import DEFAULT_QUERY_TIMEOUT_SECONDS, READ_CHUNK_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .enrollment.mysql_enrollment_repository import MySQLMemberRepository
from .enrollment.service import EnrollmentReviewService
from .meetings.factory import IdentityKeyFactory
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .meetings.service import MeetingDuplicateService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    members_repo: MySQLMemberRepository
    attendance_repo: MySQLAttendanceRepository
    meetings_repo: MySQLMeetingRepository
    access_repo: MySQLAccessRepository

    access_service: AccessScopeService
    attendance_matrix_service: AttendanceMatrixService
    enrollment_review_service: EnrollmentReviewService
    meeting_duplicate_service: MeetingDuplicateService


def build_container(
    *,
    db_config: dict,
    query_timeout: float = DEFAULT_QUERY_TIMEOUT_SECONDS,
    chunk_size: int = READ_CHUNK_SIZE,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    members_repo = MySQLMemberRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    meetings_repo = MySQLMeetingRepository(conn)
    access_repo = MySQLAccessRepository(conn)

    access_service = AccessScopeService(access_repo, timeout=query_timeout)
    attendance_matrix_service = AttendanceMatrixService(
        members_repo,
        attendance_repo,
        chunk_size=chunk_size,
        timeout=query_timeout,
    )
    enrollment_review_service = EnrollmentReviewService(members_repo)
    meeting_duplicate_service = MeetingDuplicateService(meetings_repo, factory=IdentityKeyFactory())

    return Container(
        conn=conn,
        members_repo=members_repo,
        attendance_repo=attendance_repo,
        meetings_repo=meetings_repo,
        access_repo=access_repo,
        access_service=access_service,
        attendance_matrix_service=attendance_matrix_service,
        enrollment_review_service=enrollment_review_service,
        meeting_duplicate_service=meeting_duplicate_service,
    )
