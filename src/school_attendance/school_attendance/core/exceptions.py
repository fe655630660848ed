from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, errors: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class DuplicateStudentError(DomainError):
    """Raised when an active student with the same ID already exists."""


class StudentNotFoundError(DomainError):
    """Raised when a student lookup by ID finds nothing."""


class PersistenceError(Exception):
    """Raised when the storage layer cannot read or write records."""
