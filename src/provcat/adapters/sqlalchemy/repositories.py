"""Repository implementations backed by SQLAlchemy async sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from provcat.adapters.sqlalchemy.mappings import (
    country_table,
    custom_field_table,
    provider_service_table,
    provider_table,
    service_country_table,
    service_table,
)
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

    from sqlalchemy import Table
    from sqlalchemy.ext.asyncio import AsyncSession


class SqlAlchemyRepository[TEntity]:
    """Shared add/get/remove helpers for surrogate-keyed tables."""

    def __init__(self, session: AsyncSession, entity_cls: type[TEntity], table: Table) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._table = table

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def add_all(self, entities: Iterable[TEntity]) -> None:
        self.session.add_all(list(entities))

    async def get(self, entity_id: int) -> TEntity | None:
        return await self.session.get(self._entity_cls, entity_id)

    async def list_all(self) -> Sequence[TEntity]:
        stmt = select(self._entity_cls).order_by(self._table.c.id)
        return (await self.session.scalars(stmt)).all()

    async def remove(self, entity: TEntity) -> None:
        await self.session.delete(entity)

    async def remove_all(self, entities: Iterable[TEntity]) -> None:
        for entity in entities:
            await self.session.delete(entity)

    async def _where(self, *criteria: object) -> Sequence[TEntity]:
        stmt = select(self._entity_cls).where(*criteria).order_by(self._table.c.id)  # type: ignore[arg-type]
        return (await self.session.scalars(stmt)).all()


class SqlAlchemyProviderRepository(SqlAlchemyRepository[Provider]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Provider, provider_table)


class SqlAlchemyCustomFieldRepository(SqlAlchemyRepository[CustomField]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CustomField, custom_field_table)

    async def for_provider(self, provider_id: int) -> Sequence[CustomField]:
        return await self._where(custom_field_table.c.provider_id == provider_id)


class SqlAlchemyServiceRepository(SqlAlchemyRepository[Service]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Service, service_table)

    async def offered_by_providers_named(self, fragment: str) -> Sequence[tuple[Provider, Service]]:
        stmt = (
            select(Provider, Service)
            .join(provider_service_table, provider_service_table.c.provider_id == provider_table.c.id)
            .join(service_table, service_table.c.id == provider_service_table.c.service_id)
            .where(provider_table.c.name.icontains(fragment, autoescape=True))
            .order_by(provider_table.c.name, service_table.c.name, provider_service_table.c.id)
        )
        rows = (await self.session.execute(stmt)).all()
        return [cast("tuple[Provider, Service]", tuple(row)) for row in rows]

    async def available_in_country(self, iso_code: str) -> Sequence[tuple[Country, Service]]:
        stmt = (
            select(Country, Service)
            .join(service_country_table, service_country_table.c.country_id == country_table.c.id)
            .join(service_table, service_table.c.id == service_country_table.c.service_id)
            .where(country_table.c.iso_code == iso_code)
            .order_by(country_table.c.name, service_table.c.name, service_country_table.c.id)
        )
        rows = (await self.session.execute(stmt)).all()
        return [cast("tuple[Country, Service]", tuple(row)) for row in rows]


class SqlAlchemyCountryRepository(SqlAlchemyRepository[Country]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Country, country_table)


class SqlAlchemyProviderServiceRepository(SqlAlchemyRepository[ProviderService]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProviderService, provider_service_table)

    async def for_provider(self, provider_id: int) -> Sequence[ProviderService]:
        return await self._where(provider_service_table.c.provider_id == provider_id)

    async def for_service(self, service_id: int) -> Sequence[ProviderService]:
        return await self._where(provider_service_table.c.service_id == service_id)


class SqlAlchemyServiceCountryRepository(SqlAlchemyRepository[ServiceCountry]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ServiceCountry, service_country_table)

    async def for_service(self, service_id: int) -> Sequence[ServiceCountry]:
        return await self._where(service_country_table.c.service_id == service_id)


if TYPE_CHECKING:
    from provcat.domain.ports.persistence import (
        CountryRepository,
        CustomFieldRepository,
        ProviderRepository,
        ProviderServiceRepository,
        ServiceCountryRepository,
        ServiceRepository,
    )

    _session_stub = cast("AsyncSession", object())
    _provider_repo: ProviderRepository = SqlAlchemyProviderRepository(_session_stub)
    _field_repo: CustomFieldRepository = SqlAlchemyCustomFieldRepository(_session_stub)
    _service_repo: ServiceRepository = SqlAlchemyServiceRepository(_session_stub)
    _country_repo: CountryRepository = SqlAlchemyCountryRepository(_session_stub)
    _link_repo: ProviderServiceRepository = SqlAlchemyProviderServiceRepository(_session_stub)
    _coverage_repo: ServiceCountryRepository = SqlAlchemyServiceCountryRepository(_session_stub)
