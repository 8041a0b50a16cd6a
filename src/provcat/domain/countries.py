"""Country catalog synchronization against an external feed.

Countries are matched by ISO code, never by surrogate id. Rows missing from the
feed are kept: service/country links may still point at them.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from provcat.domain.errors import operation_failures
from provcat.domain.model import Country
from provcat.domain.reconciliation import assign_changed, diff_by_natural_key
from provcat.domain.services import normalize_iso_code

if TYPE_CHECKING:
    from collections.abc import Callable

    from provcat.domain.dto import CountryRecord
    from provcat.domain.ports.fetching import CountryFeed
    from provcat.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True)
class SyncCountriesResult:
    """Outcome of a catalog synchronization run."""

    fetched: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0


@dataclass(slots=True)
class CountrySynchronizer:
    feed: CountryFeed
    unit_of_work_factory: Callable[[], CatalogUnitOfWork]

    async def fetch_external(self) -> list[CountryRecord]:
        """Fetch usable records; incomplete ones are dropped with a warning."""

        records, _ = await self._fetch_partitioned()
        return records

    async def synchronize(self) -> SyncCountriesResult:
        records, incomplete = await self._fetch_partitioned()
        if not records:
            log.warning("No countries obtained from the external feed")
            return SyncCountriesResult(skipped=incomplete)

        async with operation_failures("synchronize countries"), self.unit_of_work_factory() as uow:
            repository = uow.repositories.countries
            diff = diff_by_natural_key(
                await repository.list_all(),
                records,
                existing_key=lambda country: normalize_iso_code(country.iso_code),
                incoming_key=lambda record: normalize_iso_code(record.iso_code),
                kind="country",
            )

            for record in diff.to_insert:
                repository.add(
                    Country(
                        iso_code=normalize_iso_code(record.iso_code),
                        name=record.name,
                        flag_image=record.flag_image,
                    )
                )
                log.debug(f"New country added: {record.name} ({record.iso_code})")

            updated = 0
            for country, record in diff.to_update:
                changed = assign_changed(
                    country, {"name": record.name, "flag_image": record.flag_image}
                )
                if changed:
                    updated += 1
                    log.debug(
                        f"Country updated: {country.name} ({country.iso_code}): {', '.join(changed)}"
                    )

            await uow.commit()

        result = SyncCountriesResult(
            fetched=len(records),
            created=len(diff.to_insert),
            updated=updated,
            unchanged=len(diff.to_update) - updated,
            skipped=incomplete + len(diff.skipped),
        )
        log.info(
            f"Country synchronization completed: fetched={result.fetched}, "
            f"created={result.created}, updated={result.updated}, "
            f"unchanged={result.unchanged}, skipped={result.skipped}"
        )
        return result

    async def _fetch_partitioned(self) -> tuple[list[CountryRecord], int]:
        async with operation_failures("fetch external countries"):
            fetched = await self.feed.fetch()

        if fetched is None:
            return [], 0

        records: list[CountryRecord] = []
        incomplete = 0
        for record in fetched:
            if not record.iso_code.strip() or not record.name.strip():
                log.warning(
                    f"Ignoring country with incomplete data: {record.name or record.iso_code or 'unnamed'}"
                )
                incomplete += 1
                continue
            records.append(record)
        log.info(f"Obtained {len(records)} countries from the external feed")
        return records, incomplete
