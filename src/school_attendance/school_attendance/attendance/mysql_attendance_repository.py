from __future__ import annotations

import json
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus
from ..core.exceptions import PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, student_id, student_name, student_class, event_timestamp, attendance_date,
    session, session_type, status, confidence, created_at, metadata
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=r["record_id"],
        student_id=r["student_id"],
        student_name=r["student_name"],
        student_class=str(r["student_class"]),
        timestamp=r["event_timestamp"],
        date=r["attendance_date"],
        session=r["session"],
        session_type=r["session_type"],
        status=AttendanceStatus(r["status"]),
        confidence=int(r.get("confidence") or 0),
        created_at=r["created_at"],
        metadata=json.loads(r.get("metadata") or "{}"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Attendance storage; uq_attendance_key makes the append idempotent across processes."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_student_on_date(self, student_id: str, date: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE student_id=%s AND attendance_date=%s
                ORDER BY attendance_pk
                """,
                (student_id, date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def get_by_key(self, student_id: str, date: str, session: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE student_id=%s AND attendance_date=%s AND session=%s
                """,
                (student_id, date, session),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def insert_if_absent(self, record: AttendanceRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(record_id, student_id, student_name, student_class,
                        event_timestamp, attendance_date, session, session_type, status, confidence,
                        created_at, metadata)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.record_id,
                        record.student_id,
                        record.student_name,
                        record.student_class,
                        record.timestamp,
                        record.date,
                        record.session,
                        record.session_type,
                        record.status.value,
                        record.confidence,
                        record.created_at,
                        json.dumps(record.metadata),
                    ),
                )
            return True
        except mysql_errors.Error as e:
            if is_duplicate_key(e):
                return False
            raise PersistenceError("Failed to save attendance record") from e

    def list_for_date(self, date: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_date=%s ORDER BY attendance_pk",
                (date,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_recent(self, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records ORDER BY event_timestamp DESC LIMIT %s",
                (max(0, int(limit)),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records")
            return int(fetchone(cur)["n"])
