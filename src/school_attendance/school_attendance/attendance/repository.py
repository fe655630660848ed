from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def list_for_student_on_date(self, student_id: str, date: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_by_key(self, student_id: str, date: str, session: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_if_absent(self, record: AttendanceRecord) -> bool:
        """Append ``record`` unless its (student, date, session) key is taken.

        Returns False on a key conflict; raises PersistenceError when the
        store cannot be written.
        """

        raise NotImplementedError

    def list_for_date(self, date: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError
