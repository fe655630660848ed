from __future__ import annotations

import json
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import MealStatus
from ..core.exceptions import PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import MealRecord
from .repository import MealRepository

_COLUMNS = """
    record_id, student_id, student_name, student_class, meal_date, event_timestamp,
    status, created_at, metadata
"""


def _row_to_record(r: dict) -> MealRecord:
    return MealRecord(
        record_id=r["record_id"],
        student_id=r["student_id"],
        student_name=r["student_name"],
        student_class=str(r["student_class"]),
        date=r["meal_date"],
        timestamp=r["event_timestamp"],
        status=MealStatus(r["status"]),
        created_at=r["created_at"],
        metadata=json.loads(r.get("metadata") or "{}"),
    )


class MySQLMealRepository(MealRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_student_on_date(self, student_id: str, date: str) -> Sequence[MealRecord]:
        record = self.get_by_key(student_id, date)
        return [record] if record else []

    def get_by_key(self, student_id: str, date: str) -> Optional[MealRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM meal_records WHERE student_id=%s AND meal_date=%s",
                (student_id, date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def insert_if_absent(self, record: MealRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO meal_records(record_id, student_id, student_name, student_class,
                        meal_date, event_timestamp, status, created_at, metadata)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.record_id,
                        record.student_id,
                        record.student_name,
                        record.student_class,
                        record.date,
                        record.timestamp,
                        record.status.value,
                        record.created_at,
                        json.dumps(record.metadata),
                    ),
                )
            return True
        except mysql_errors.Error as e:
            if is_duplicate_key(e):
                return False
            raise PersistenceError("Failed to save meal record") from e

    def count_for_date(self, date: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM meal_records WHERE meal_date=%s", (date,))
            return int(fetchone(cur)["n"])

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM meal_records")
            return int(fetchone(cur)["n"])

    def list_recent(self, limit: int) -> Sequence[MealRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM meal_records ORDER BY event_timestamp DESC LIMIT %s",
                (max(0, int(limit)),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
