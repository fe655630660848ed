from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MealRecord


class MealRepository(Protocol):
    def list_for_student_on_date(self, student_id: str, date: str) -> Sequence[MealRecord]:
        raise NotImplementedError

    def get_by_key(self, student_id: str, date: str) -> Optional[MealRecord]:
        raise NotImplementedError

    def insert_if_absent(self, record: MealRecord) -> bool:
        """Append ``record`` unless (student, date) is taken; False on conflict."""

        raise NotImplementedError

    def count_for_date(self, date: str) -> int:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[MealRecord]:
        raise NotImplementedError
