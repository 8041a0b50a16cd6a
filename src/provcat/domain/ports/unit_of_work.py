"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from provcat.domain.ports.persistence import (
        CountryRepository,
        CustomFieldRepository,
        ProviderRepository,
        ProviderServiceRepository,
        ServiceCountryRepository,
        ServiceRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Async transactional boundary around a repository collection.

    ``flush`` is the explicit commit point writers use to obtain generated ids
    before building dependent rows. Both ``flush`` and ``commit`` report how
    many rows were written; ``commit`` returns the total for the whole unit,
    ``0`` meaning nothing changed.
    """

    @property
    def repositories(self) -> TRepositories: ...

    async def __aenter__(self) -> UnitOfWork[TRepositories]: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    async def flush(self) -> int: ...

    async def commit(self) -> int: ...

    async def rollback(self) -> None: ...


@dataclass(slots=True)
class CatalogRepositories(RepositoryCollection):
    """Repositories required to reconcile provider, service and country aggregates."""

    providers: ProviderRepository
    custom_fields: CustomFieldRepository
    services: ServiceRepository
    countries: CountryRepository
    provider_services: ProviderServiceRepository
    service_countries: ServiceCountryRepository


type CatalogUnitOfWork = UnitOfWork[CatalogRepositories]
