"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from provcat.adapters.restcountries import RestCountriesFeed
from provcat.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    shutdown,
    startup,
)
from provcat.domain.countries import CountrySynchronizer, SyncCountriesResult
from provcat.domain.ports.unit_of_work import CatalogUnitOfWork
from provcat.domain.providers import ProviderWriter
from provcat.domain.services import ServiceWriter

if TYPE_CHECKING:
    from provcat.domain.ports.fetching import CountryFeed

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


log = getLogger(__name__)


async def ensure_started(*, database_uri: str | None = None) -> None:
    """Start the persistence adapter unless a previous call already did."""

    if not is_started():
        await startup(database_uri=database_uri)


async def close() -> None:
    if is_started():
        await shutdown()


def provider_writer(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> ProviderWriter:
    return ProviderWriter(unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork)


def service_writer(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> ServiceWriter:
    return ServiceWriter(unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork)


async def sync_countries(
    *,
    feed: CountryFeed | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SyncCountriesResult:
    """Synchronise the country catalog using the configured adapters."""

    await ensure_started()
    effective_feed = feed or RestCountriesFeed()
    log.info(f"Starting country sync from {type(effective_feed).__name__}")

    synchronizer = CountrySynchronizer(
        feed=effective_feed,
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
    )
    result = await synchronizer.synchronize()

    log.info(
        f"Finished country sync: fetched={result.fetched}, created={result.created}, "
        f"updated={result.updated}, skipped={result.skipped}"
    )
    return result
