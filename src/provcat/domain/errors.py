"""Failure handling shared by the aggregate writers."""

from __future__ import annotations

from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

log = getLogger(__name__)


class OperationFailedError(RuntimeError):
    """Raised when an aggregate operation aborts because of an infrastructure failure.

    The original exception is kept on ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


@asynccontextmanager
async def operation_failures(operation: str) -> AsyncIterator[None]:
    """Log any failure inside the block and re-raise it as ``OperationFailedError``."""

    try:
        yield
    except OperationFailedError:
        raise
    except Exception as exc:
        log.exception(f"Error during {operation}")
        raise OperationFailedError(operation, exc) from exc
