"""Provider aggregate: a provider with its custom fields and offered services.

Writes follow a strict two-phase order. A parent row is added and the unit of
work is flushed (the commit point) before any child that needs its generated id
is built: provider -> custom fields, provider -> service -> provider/service link
-> service/country links. The whole call is committed once at the end.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from provcat.domain.dto import (
    CountryDto,
    CustomFieldDto,
    ProviderDto,
    ProviderSummary,
    ServiceDto,
)
from provcat.domain.errors import operation_failures
from provcat.domain.model import (
    PROVIDER_NOT_FOUND_MESSAGE,
    Country,
    CustomField,
    OperationResult,
    Provider,
    ProviderService,
    Service,
    ServiceCountry,
)
from provcat.domain.reconciliation import assign_changed, diff_by_id

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from provcat.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True)
class ProviderWriter:
    """Creates, reconciles, deletes and lists provider aggregates."""

    unit_of_work_factory: Callable[[], CatalogUnitOfWork]

    async def create(self, dto: ProviderDto) -> OperationResult:
        log.info(f"Creating provider {dto.name!r}")
        async with operation_failures("create provider"), self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            provider = Provider(nit=dto.nit, name=dto.name, email=dto.email)
            repositories.providers.add(provider)
            await uow.flush()
            provider_id = provider.require_id()
            log.debug(f"Provider stored with ID {provider_id}")

            if dto.custom_fields:
                repositories.custom_fields.add_all(
                    _new_custom_field(provider_id, field_dto) for field_dto in dto.custom_fields
                )
            for service_dto in dto.services:
                await _create_offered_service(uow, provider_id, service_dto)

            affected = await uow.commit()

        log.info(
            f"Provider created: id={provider_id}, custom_fields={len(dto.custom_fields)}, "
            f"services={len(dto.services)}"
        )
        return OperationResult.from_affected(
            affected, no_changes_message=f"Provider {dto.name!r} was not created"
        )

    async def update(self, dto: ProviderDto) -> OperationResult:
        """Write changed scalars and reconcile custom fields; services are left alone."""

        async with operation_failures("update provider"), self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            provider = await repositories.providers.get(dto.id)
            if provider is None:
                log.warning(f"Provider with ID {dto.id} does not exist")
                return OperationResult.not_found(PROVIDER_NOT_FOUND_MESSAGE)

            changed = assign_changed(
                provider, {"nit": dto.nit, "name": dto.name, "email": dto.email}
            )
            if changed:
                log.debug(f"Provider {dto.id} fields changed: {', '.join(changed)}")

            existing_fields = await repositories.custom_fields.for_provider(dto.id)
            diff = diff_by_id(
                existing_fields,
                dto.custom_fields,
                existing_id=lambda custom_field: custom_field.id,
                incoming_id=lambda field_dto: field_dto.id,
                kind="custom field",
            )
            await repositories.custom_fields.remove_all(diff.to_remove)
            touched = 0
            for custom_field, field_dto in diff.to_update:
                if assign_changed(
                    custom_field,
                    {"field_name": field_dto.field_name, "field_value": field_dto.field_value},
                ):
                    touched += 1
            repositories.custom_fields.add_all(
                _new_custom_field(dto.id, field_dto) for field_dto in diff.to_insert
            )
            log.debug(
                f"Custom fields of provider {dto.id}: removed={len(diff.to_remove)}, "
                f"updated={touched}, inserted={len(diff.to_insert)}"
            )

            affected = await uow.commit()

        result = OperationResult.from_affected(
            affected, no_changes_message=f"No changes for provider with ID: {dto.id}"
        )
        log.info(f"Provider {dto.id} update finished: {result.message}")
        return result

    async def delete(self, provider_id: int) -> OperationResult:
        """Remove the provider, its custom fields and its service links.

        Services themselves are shared and survive.
        """

        async with operation_failures("delete provider"), self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            provider = await repositories.providers.get(provider_id)
            if provider is None:
                log.warning(f"Provider with ID {provider_id} does not exist")
                return OperationResult.not_found(PROVIDER_NOT_FOUND_MESSAGE)

            await repositories.custom_fields.remove_all(
                await repositories.custom_fields.for_provider(provider_id)
            )
            await repositories.provider_services.remove_all(
                await repositories.provider_services.for_provider(provider_id)
            )
            # children must be gone before the parent row
            await uow.flush()
            await repositories.providers.remove(provider)
            affected = await uow.commit()

        log.info(f"Provider {provider_id} deleted ({affected} rows)")
        return OperationResult.from_affected(
            affected, no_changes_message=f"Provider with ID {provider_id} could not be deleted"
        )

    async def list_providers(self) -> list[ProviderSummary]:
        async with operation_failures("list providers"), self.unit_of_work_factory() as uow:
            providers = await uow.repositories.providers.list_all()
            return [
                ProviderSummary(
                    id=provider.require_id(),
                    nit=provider.nit,
                    name=provider.name,
                    email=provider.email,
                )
                for provider in providers
            ]

    async def list_complete(self) -> list[ProviderDto]:
        """Return every provider with fields, services and each service's countries."""

        log.info("Loading complete provider graph")
        async with operation_failures("list complete providers"), self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            result = build_provider_graph(
                providers=await repositories.providers.list_all(),
                custom_fields=await repositories.custom_fields.list_all(),
                provider_services=await repositories.provider_services.list_all(),
                services=await repositories.services.list_all(),
                service_countries=await repositories.service_countries.list_all(),
                countries=await repositories.countries.list_all(),
            )
        log.info(f"Loaded {len(result)} providers with complete information")
        return result


async def _create_offered_service(
    uow: CatalogUnitOfWork,
    provider_id: int,
    service_dto: ServiceDto,
) -> None:
    repositories = uow.repositories
    service = Service(name=service_dto.name, value_per_hour_usd=service_dto.value_per_hour_usd)
    repositories.services.add(service)
    await uow.flush()
    service_id = service.require_id()
    log.debug(f"Service {service_dto.name!r} stored with ID {service_id}")

    repositories.provider_services.add(
        ProviderService(provider_id=provider_id, service_id=service_id)
    )
    repositories.service_countries.add_all(
        ServiceCountry(service_id=service_id, country_id=country_id)
        for country_id in country_references(service_dto.countries, service_name=service_dto.name)
    )


def country_references(countries: Iterable[CountryDto], *, service_name: str) -> list[int]:
    """Return the catalog ids of ``countries``; entries without one are dropped.

    Countries are only ever created by the catalog synchronizer, so a reference
    without an id cannot be linked.
    """

    references: list[int] = []
    for country in countries:
        if country.id <= 0:
            log.warning(
                f"Ignoring country {country.iso_code or country.name!r} for service "
                f"{service_name!r}: no catalog id"
            )
            continue
        references.append(country.id)
    return references


def _new_custom_field(provider_id: int, dto: CustomFieldDto) -> CustomField:
    return CustomField(
        provider_id=provider_id,
        field_name=dto.field_name,
        field_value=dto.field_value,
    )


def build_provider_graph(
    *,
    providers: Sequence[Provider],
    custom_fields: Sequence[CustomField],
    provider_services: Sequence[ProviderService],
    services: Sequence[Service],
    service_countries: Sequence[ServiceCountry],
    countries: Sequence[Country],
) -> list[ProviderDto]:
    """Assemble nested provider DTOs from flat rows.

    Repeated services or countries collapse by id, links pointing at rows that no
    longer exist are ignored, and the result is ordered by provider name, then
    service name, then country name.
    """

    services_by_id = {service.require_id(): service for service in services}
    countries_by_id = {country.require_id(): country for country in countries}

    fields_by_provider: dict[int, list[CustomField]] = {}
    for custom_field in custom_fields:
        fields_by_provider.setdefault(custom_field.provider_id, []).append(custom_field)

    service_ids_by_provider: dict[int, dict[int, None]] = {}
    for link in provider_services:
        if link.service_id not in services_by_id:
            log.debug(f"Skipping dangling provider/service link {link.id}")
            continue
        service_ids_by_provider.setdefault(link.provider_id, {})[link.service_id] = None

    country_ids_by_service: dict[int, dict[int, None]] = {}
    for link in service_countries:
        if link.country_id not in countries_by_id:
            log.debug(f"Skipping dangling service/country link {link.id}")
            continue
        country_ids_by_service.setdefault(link.service_id, {})[link.country_id] = None

    result: list[ProviderDto] = []
    for provider in providers:
        provider_id = provider.require_id()
        service_dtos = [
            _service_dto(
                services_by_id[service_id],
                [countries_by_id[cid] for cid in country_ids_by_service.get(service_id, {})],
            )
            for service_id in service_ids_by_provider.get(provider_id, {})
        ]
        service_dtos.sort(key=lambda item: (item.name, item.id))
        result.append(
            ProviderDto(
                id=provider_id,
                nit=provider.nit,
                name=provider.name,
                email=provider.email,
                custom_fields=[
                    CustomFieldDto(
                        id=custom_field.require_id(),
                        field_name=custom_field.field_name,
                        field_value=custom_field.field_value,
                    )
                    for custom_field in sorted(
                        fields_by_provider.get(provider_id, []),
                        key=lambda item: item.require_id(),
                    )
                ],
                services=service_dtos,
            )
        )
    result.sort(key=lambda item: (item.name, item.id))
    return result


def _service_dto(service: Service, countries: Iterable[Country]) -> ServiceDto:
    country_dtos = [
        CountryDto(
            id=country.require_id(),
            iso_code=country.iso_code,
            name=country.name,
            flag_image=country.flag_image,
        )
        for country in countries
    ]
    country_dtos.sort(key=lambda item: (item.name, item.id))
    return ServiceDto(
        id=service.require_id(),
        name=service.name,
        value_per_hour_usd=service.value_per_hour_usd,
        countries=country_dtos,
    )
