"""Ports for fetching external domain data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from provcat.domain.dto import CountryRecord


@runtime_checkable
class CountryFeed(Protocol):
    """Source of country catalog records.

    Returns ``None`` when the source answered without usable data (for example a
    non-success status); transport failures are raised.
    """

    async def fetch(self) -> Sequence[CountryRecord] | None: ...


__all__ = ["CountryFeed"]
