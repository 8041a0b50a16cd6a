"""Ports for persisting catalog aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from provcat.domain.model import (
    Country,
    CustomField,
    Provider,
    ProviderService,
    Service,
    ServiceCountry,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a surrogate-keyed table."""

    def add(self, entity: TEntity) -> None: ...

    def add_all(self, entities: Iterable[TEntity]) -> None: ...

    async def get(self, entity_id: int) -> TEntity | None: ...

    async def list_all(self) -> Sequence[TEntity]: ...

    async def remove(self, entity: TEntity) -> None: ...

    async def remove_all(self, entities: Iterable[TEntity]) -> None: ...


@runtime_checkable
class ProviderRepository(Repository[Provider], Protocol):
    """Providers are only loaded by id or listed in full."""


@runtime_checkable
class CustomFieldRepository(Repository[CustomField], Protocol):
    async def for_provider(self, provider_id: int) -> Sequence[CustomField]: ...


@runtime_checkable
class ServiceRepository(Repository[Service], Protocol):
    async def offered_by_providers_named(
        self, fragment: str
    ) -> Sequence[tuple[Provider, Service]]: ...

    async def available_in_country(self, iso_code: str) -> Sequence[tuple[Country, Service]]: ...


@runtime_checkable
class CountryRepository(Repository[Country], Protocol):
    """Countries are matched by ISO code in memory during catalog sync."""


@runtime_checkable
class ProviderServiceRepository(Repository[ProviderService], Protocol):
    async def for_provider(self, provider_id: int) -> Sequence[ProviderService]: ...

    async def for_service(self, service_id: int) -> Sequence[ProviderService]: ...


@runtime_checkable
class ServiceCountryRepository(Repository[ServiceCountry], Protocol):
    async def for_service(self, service_id: int) -> Sequence[ServiceCountry]: ...
