from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from provcat import app
from provcat.domain.dto import CountryRecord
from provcat.domain.providers import ProviderWriter
from tests.helpers.catalog import FakeCountryFeed, make_provider_dto

if TYPE_CHECKING:
    from collections.abc import Callable

    from provcat.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

    UowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]

pytestmark = pytest.mark.integration


async def test_sync_countries_uses_given_feed(sqlite_unit_of_work: UowFactory) -> None:
    feed = FakeCountryFeed([CountryRecord("COL", "Colombia"), CountryRecord("ARG", "Argentina")])

    result = await app.sync_countries(feed=feed, unit_of_work_factory=sqlite_unit_of_work)

    assert result.created == 2
    assert feed.calls == 1


async def test_writers_default_to_sqlalchemy_unit_of_work(
    sqlite_unit_of_work: UowFactory,  # noqa: ARG001
) -> None:
    writer = app.provider_writer()
    await writer.create(make_provider_dto("Initech"))

    assert isinstance(writer, ProviderWriter)
    assert [summary.name for summary in await writer.list_providers()] == ["Initech"]
    assert await app.service_writer().services_by_provider_name("initech") == []
