from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Repository interface for students.

    Note (DIP): services depend on this interface, never on a concrete store.
    """

    def list_all(self) -> Sequence[Student]:
        """All students in registration order (the matcher's scan order)."""

        raise NotImplementedError

    def get_by_student_id(self, student_id: str) -> Optional[Student]:
        """Exact-match lookup; an active student wins over inactive ones with the same ID."""

        raise NotImplementedError

    def find_active_by_student_id_ci(self, student_id: str) -> Optional[Student]:
        """Case-insensitive lookup among active students."""

        raise NotImplementedError

    def add(self, student: Student) -> None:
        raise NotImplementedError

    def count_active(self) -> int:
        raise NotImplementedError
