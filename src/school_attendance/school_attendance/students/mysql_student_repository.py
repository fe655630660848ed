from __future__ import annotations

import json
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.exceptions import PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student, parse_descriptors, parse_status
from .repository import StudentRepository

_COLUMNS = """
    record_id, student_id, name, class, parent_name, descriptors, face_confidence,
    status, registered_at, created_at, updated_at, metadata
"""


def _row_to_student(r: dict) -> Student:
    return Student(
        record_id=r["record_id"],
        student_id=r["student_id"],
        name=r["name"],
        student_class=str(r["class"]),
        parent_name=r["parent_name"],
        descriptors=parse_descriptors(json.loads(r["descriptors"] or "[]"), r["student_id"]),
        status=parse_status(r["status"]),
        face_confidence=float(r.get("face_confidence") or 0),
        registered_at=r.get("registered_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        metadata=json.loads(r.get("metadata") or "{}"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY student_pk")
            return [_row_to_student(r) for r in fetchall(cur)]

    def get_by_student_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM students
                WHERE BINARY student_id=%s
                ORDER BY (status='active') DESC, student_pk
                LIMIT 1
                """,
                (student_id,),
            )
            r = fetchone(cur)
            return _row_to_student(r) if r else None

    def find_active_by_student_id_ci(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM students
                WHERE LOWER(student_id)=LOWER(%s) AND status='active'
                ORDER BY student_pk
                LIMIT 1
                """,
                (student_id,),
            )
            r = fetchone(cur)
            return _row_to_student(r) if r else None

    def add(self, student: Student) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO students(record_id, student_id, name, class, parent_name, descriptors,
                                         face_confidence, status, registered_at, created_at, updated_at, metadata)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        student.record_id,
                        student.student_id,
                        student.name,
                        student.student_class,
                        student.parent_name,
                        json.dumps([list(d) for d in student.descriptors]),
                        student.face_confidence,
                        student.status.value,
                        student.registered_at,
                        student.created_at,
                        student.updated_at,
                        json.dumps(student.metadata),
                    ),
                )
        except mysql_errors.Error as e:
            raise PersistenceError("Failed to save student registration") from e

    def count_active(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM students WHERE status='active'")
            return int(fetchone(cur)["n"])
