"""Outcomes of mutating catalog operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

OK_MESSAGE: Final[str] = "OK"
PROVIDER_NOT_FOUND_MESSAGE: Final[str] = "Provider not found"
SERVICE_NOT_FOUND_MESSAGE: Final[str] = "Service not found"


class OperationStatus(StrEnum):
    OK = "ok"
    NOT_FOUND = "not_found"
    NO_CHANGES = "no_changes"


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Typed result of a create/update/delete call.

    ``message`` keeps the human readable literal (``"OK"``, a not-found text or a
    no-changes text) for callers that only relay it; ``status`` is what code
    should branch on.
    """

    status: OperationStatus
    message: str
    affected: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status is not OperationStatus.NOT_FOUND

    @property
    def changed(self) -> bool:
        return self.status is OperationStatus.OK

    def __str__(self) -> str:
        return self.message

    @classmethod
    def ok(cls, affected: int) -> OperationResult:
        return cls(OperationStatus.OK, OK_MESSAGE, affected)

    @classmethod
    def not_found(cls, message: str) -> OperationResult:
        return cls(OperationStatus.NOT_FOUND, message)

    @classmethod
    def no_changes(cls, message: str) -> OperationResult:
        return cls(OperationStatus.NO_CHANGES, message)

    @classmethod
    def from_affected(cls, affected: int, *, no_changes_message: str) -> OperationResult:
        if affected > 0:
            return cls.ok(affected)
        return cls.no_changes(no_changes_message)

