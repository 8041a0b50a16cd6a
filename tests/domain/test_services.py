from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import IntegrityError

from provcat.domain.errors import OperationFailedError
from provcat.domain.model import SERVICE_NOT_FOUND_MESSAGE, OperationStatus
from provcat.domain.providers import ProviderWriter
from provcat.domain.services import ServiceWriter, normalize_iso_code
from tests.helpers.catalog import (
    country_ref,
    make_provider_dto,
    make_service_dto,
    seed_countries,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from provcat.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

    UowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]

pytestmark = pytest.mark.integration


@pytest.fixture
def writer(sqlite_unit_of_work: UowFactory) -> ServiceWriter:
    return ServiceWriter(unit_of_work_factory=sqlite_unit_of_work)


@pytest.fixture
def providers(sqlite_unit_of_work: UowFactory) -> ProviderWriter:
    return ProviderWriter(unit_of_work_factory=sqlite_unit_of_work)


async def _only_service_id(sqlite_unit_of_work: UowFactory) -> int:
    async with sqlite_unit_of_work() as uow:
        (service,) = await uow.repositories.services.list_all()
        return service.require_id()


async def test_create_stores_service_without_countries(
    writer: ServiceWriter,
    sqlite_unit_of_work: UowFactory,
) -> None:
    country_ids = await seed_countries(sqlite_unit_of_work, ("COL", "Colombia"))

    result = await writer.create(
        make_service_dto("Audit", "120.5", countries=[country_ref(country_ids["COL"])])
    )

    assert result.status is OperationStatus.OK
    assert result.affected == 1
    service_id = await _only_service_id(sqlite_unit_of_work)
    async with sqlite_unit_of_work() as uow:
        service = await uow.repositories.services.get(service_id)
        assert service is not None
        assert service.value_per_hour_usd == "120.5"
        assert await uow.repositories.service_countries.for_service(service_id) == []


async def test_update_reconciles_country_links(
    writer: ServiceWriter,
    sqlite_unit_of_work: UowFactory,
) -> None:
    country_ids = await seed_countries(
        sqlite_unit_of_work, ("COL", "Colombia"), ("ARG", "Argentina"), ("PER", "Peru")
    )
    await writer.create(make_service_dto("Audit"))
    service_id = await _only_service_id(sqlite_unit_of_work)
    await writer.update(
        make_service_dto(
            "Audit",
            service_id=service_id,
            countries=[country_ref(country_ids["COL"]), country_ref(country_ids["ARG"])],
        )
    )

    result = await writer.update(
        make_service_dto(
            "Audit",
            service_id=service_id,
            countries=[country_ref(country_ids["ARG"]), country_ref(country_ids["PER"])],
        )
    )

    assert result.status is OperationStatus.OK
    assert result.affected == 2
    async with sqlite_unit_of_work() as uow:
        links = await uow.repositories.service_countries.for_service(service_id)
    assert sorted(link.country_id for link in links) == sorted(
        [country_ids["ARG"], country_ids["PER"]]
    )
    assert await writer.services_by_country("COL") == []


async def test_update_with_same_state_reports_no_changes(
    writer: ServiceWriter,
    sqlite_unit_of_work: UowFactory,
) -> None:
    country_ids = await seed_countries(sqlite_unit_of_work, ("COL", "Colombia"))
    await writer.create(make_service_dto("Audit"))
    service_id = await _only_service_id(sqlite_unit_of_work)
    dto = make_service_dto("Audit", service_id=service_id, countries=[country_ref(country_ids["COL"])])
    await writer.update(dto)

    result = await writer.update(dto)

    assert result.status is OperationStatus.NO_CHANGES
    assert result.message == f"No changes for service with ID: {service_id}"


async def test_update_missing_service_returns_not_found(writer: ServiceWriter) -> None:
    result = await writer.update(make_service_dto("Ghost", service_id=77))

    assert result.status is OperationStatus.NOT_FOUND
    assert result.message == SERVICE_NOT_FOUND_MESSAGE


async def test_update_with_unknown_country_fails_and_rolls_back(
    writer: ServiceWriter,
    sqlite_unit_of_work: UowFactory,
) -> None:
    await writer.create(make_service_dto("Audit", "10"))
    service_id = await _only_service_id(sqlite_unit_of_work)

    with pytest.raises(OperationFailedError) as excinfo:
        await writer.update(
            make_service_dto("Audit", "99", service_id=service_id, countries=[country_ref(4040)])
        )

    assert excinfo.value.operation == "update service"
    assert isinstance(excinfo.value.cause, IntegrityError)
    async with sqlite_unit_of_work() as uow:
        service = await uow.repositories.services.get(service_id)
        assert service is not None
        assert service.value_per_hour_usd == "10"


async def test_delete_removes_country_and_provider_links(
    writer: ServiceWriter,
    providers: ProviderWriter,
    sqlite_unit_of_work: UowFactory,
) -> None:
    country_ids = await seed_countries(sqlite_unit_of_work, ("COL", "Colombia"))
    await providers.create(
        make_provider_dto(
            services=[make_service_dto("Audit", countries=[country_ref(country_ids["COL"])])]
        )
    )
    service_id = await _only_service_id(sqlite_unit_of_work)

    result = await writer.delete(service_id)

    assert result.status is OperationStatus.OK
    (provider,) = await providers.list_complete()
    assert provider.services == []
    assert await writer.services_by_country("COL") == []
    async with sqlite_unit_of_work() as uow:
        assert await uow.repositories.provider_services.list_all() == []
        assert await uow.repositories.countries.get(country_ids["COL"]) is not None


async def test_delete_missing_service_returns_not_found(writer: ServiceWriter) -> None:
    result = await writer.delete(5)

    assert result.status is OperationStatus.NOT_FOUND
    assert str(result) == "Service not found"


async def test_services_by_provider_name_matches_fragment(
    writer: ServiceWriter,
    providers: ProviderWriter,
) -> None:
    await providers.create(
        make_provider_dto(
            "Acme Logistics",
            nit="900-1",
            services=[make_service_dto("Freight"), make_service_dto("Audit")],
        )
    )
    await providers.create(
        make_provider_dto("Globex", nit="900-2", services=[make_service_dto("Cleaning")])
    )

    rows = await writer.services_by_provider_name("acme")

    assert [(row.provider_name, row.provider_nit, row.service_name) for row in rows] == [
        ("Acme Logistics", "900-1", "Audit"),
        ("Acme Logistics", "900-1", "Freight"),
    ]
    assert await writer.services_by_provider_name("100%") == []


async def test_services_by_country_groups_services(
    writer: ServiceWriter,
    providers: ProviderWriter,
    sqlite_unit_of_work: UowFactory,
) -> None:
    country_ids = await seed_countries(sqlite_unit_of_work, ("COL", "Colombia"), ("ARG", "Argentina"))
    colombia = country_ref(country_ids["COL"])
    await providers.create(
        make_provider_dto(
            services=[
                make_service_dto("Freight", "30", countries=[colombia]),
                make_service_dto("Audit", "80", countries=[colombia, country_ref(country_ids["ARG"])]),
            ]
        )
    )

    groups = await writer.services_by_country(" col ")

    (group,) = groups
    assert group.country_name == "Colombia"
    assert [(service.name, service.value_per_hour_usd) for service in group.services] == [
        ("Audit", "80"),
        ("Freight", "30"),
    ]


async def test_services_by_country_unknown_code_is_empty(writer: ServiceWriter) -> None:
    assert await writer.services_by_country("XX") == []


def test_normalize_iso_code() -> None:
    assert normalize_iso_code(" col\n") == "COL"
