from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from ..core.enums import LedgerStatus

T = TypeVar("T")


@dataclass(frozen=True)
class LedgerOutcome(Generic[T]):
    """Result of a ledger decision: created, already recorded, or rejected."""

    status: LedgerStatus
    record: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def created_with(cls, record: T) -> "LedgerOutcome[T]":
        return cls(status=LedgerStatus.CREATED, record=record)

    @classmethod
    def existing(cls, record: T) -> "LedgerOutcome[T]":
        return cls(status=LedgerStatus.ALREADY_EXISTS, record=record)

    @classmethod
    def rejected_because(cls, reason: str) -> "LedgerOutcome[T]":
        return cls(status=LedgerStatus.REJECTED, reason=reason)

    @property
    def created(self) -> bool:
        return self.status == LedgerStatus.CREATED

    @property
    def already_exists(self) -> bool:
        return self.status == LedgerStatus.ALREADY_EXISTS

    @property
    def rejected(self) -> bool:
        return self.status == LedgerStatus.REJECTED
