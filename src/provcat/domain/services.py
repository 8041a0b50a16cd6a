"""Service aggregate: a service with the countries it is available in."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from provcat.domain.dto import ServiceByProvider, ServiceDto, ServicesByCountry
from provcat.domain.errors import operation_failures
from provcat.domain.model import (
    SERVICE_NOT_FOUND_MESSAGE,
    OperationResult,
    Service,
    ServiceCountry,
)
from provcat.domain.providers import country_references
from provcat.domain.reconciliation import assign_changed, diff_by_id

if TYPE_CHECKING:
    from collections.abc import Callable

    from provcat.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)


def normalize_iso_code(value: str) -> str:
    return value.strip().upper()


@dataclass(slots=True)
class ServiceWriter:
    """Creates, reconciles, deletes and queries services."""

    unit_of_work_factory: Callable[[], CatalogUnitOfWork]

    async def create(self, dto: ServiceDto) -> OperationResult:
        """Store name and hourly value as given; countries are linked on update only."""

        async with operation_failures("create service"), self.unit_of_work_factory() as uow:
            service = Service(name=dto.name, value_per_hour_usd=dto.value_per_hour_usd)
            uow.repositories.services.add(service)
            affected = await uow.commit()

        if affected:
            log.info(f"Service {dto.name!r} created with ID {service.id}")
        else:
            log.warning(f"Service {dto.name!r} was not created")
        return OperationResult.from_affected(
            affected, no_changes_message="Error creating the new service"
        )

    async def update(self, dto: ServiceDto) -> OperationResult:
        """Write changed scalars and reconcile country links by country id."""

        async with operation_failures("update service"), self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            service = await repositories.services.get(dto.id)
            if service is None:
                log.warning(f"Service with ID {dto.id} does not exist")
                return OperationResult.not_found(SERVICE_NOT_FOUND_MESSAGE)

            assign_changed(
                service, {"name": dto.name, "value_per_hour_usd": dto.value_per_hour_usd}
            )

            links = await repositories.service_countries.for_service(dto.id)
            diff = diff_by_id(
                links,
                country_references(dto.countries, service_name=dto.name),
                existing_id=lambda link: link.country_id,
                incoming_id=lambda country_id: country_id,
                kind="service country",
                warn_unknown=False,
            )
            await repositories.service_countries.remove_all(diff.to_remove)
            repositories.service_countries.add_all(
                ServiceCountry(service_id=dto.id, country_id=country_id)
                for country_id in diff.to_insert
            )
            log.debug(
                f"Country links of service {dto.id}: removed={len(diff.to_remove)}, "
                f"kept={len(diff.to_update)}, inserted={len(diff.to_insert)}"
            )

            affected = await uow.commit()

        result = OperationResult.from_affected(
            affected, no_changes_message=f"No changes for service with ID: {dto.id}"
        )
        log.info(f"Service {dto.id} update finished: {result.message}")
        return result

    async def delete(self, service_id: int) -> OperationResult:
        """Remove the service together with its country links and provider links."""

        async with operation_failures("delete service"), self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            service = await repositories.services.get(service_id)
            if service is None:
                log.warning(f"Service with ID {service_id} does not exist")
                return OperationResult.not_found(SERVICE_NOT_FOUND_MESSAGE)

            await repositories.service_countries.remove_all(
                await repositories.service_countries.for_service(service_id)
            )
            await repositories.provider_services.remove_all(
                await repositories.provider_services.for_service(service_id)
            )
            await uow.flush()
            await repositories.services.remove(service)
            affected = await uow.commit()

        log.info(f"Service {service_id} deleted ({affected} rows)")
        return OperationResult.from_affected(
            affected, no_changes_message=f"Service with ID {service_id} could not be deleted"
        )

    async def services_by_provider_name(self, name: str) -> list[ServiceByProvider]:
        """Services of every provider whose name contains ``name``."""

        async with operation_failures("query services by provider"), self.unit_of_work_factory() as uow:
            rows = await uow.repositories.services.offered_by_providers_named(name)
            return [
                ServiceByProvider(
                    provider_name=provider.name,
                    provider_nit=provider.nit,
                    service_name=service.name,
                )
                for provider, service in rows
            ]

    async def services_by_country(self, iso_code: str) -> list[ServicesByCountry]:
        """Services available in the country with ``iso_code``, grouped by country name.

        An unknown code or a country without services yields an empty list.
        """

        code = normalize_iso_code(iso_code)
        async with operation_failures("query services by country"), self.unit_of_work_factory() as uow:
            rows = await uow.repositories.services.available_in_country(code)

        groups: dict[str, ServicesByCountry] = {}
        seen: set[tuple[str, int]] = set()
        for country, service in rows:
            group = groups.setdefault(country.name, ServicesByCountry(country_name=country.name))
            service_id = service.require_id()
            if (country.name, service_id) in seen:
                continue
            seen.add((country.name, service_id))
            group.services.append(
                ServiceDto(
                    id=service_id,
                    name=service.name,
                    value_per_hour_usd=service.value_per_hour_usd,
                )
            )
        log.debug(f"Found {len(seen)} services for country code {code!r}")
        return list(groups.values())
