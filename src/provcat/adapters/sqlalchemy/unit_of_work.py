"""SQLAlchemy-backed unit of work for the provider/service/country catalog."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from provcat.adapters.sqlalchemy.mappings import (
    create_all_tables,
    enforce_sqlite_foreign_keys,
    start_mappers,
)
from provcat.adapters.sqlalchemy.repositories import (
    SqlAlchemyCountryRepository,
    SqlAlchemyCustomFieldRepository,
    SqlAlchemyProviderRepository,
    SqlAlchemyProviderServiceRepository,
    SqlAlchemyServiceCountryRepository,
    SqlAlchemyServiceRepository,
)
from provcat.config.storage import get_database_config
from provcat.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncEngine
    from sqlalchemy.orm import Session, UOWTransaction

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: AsyncEngine | None = None
    _session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @engine.setter
    def engine(self, value: AsyncEngine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call provcat.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


async def startup(
    *,
    engine: AsyncEngine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the async engine, mappers, schema and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        config = get_database_config()
        engine = create_async_engine(database_uri or config.uri, echo=config.echo)
    enforce_sqlite_foreign_keys(engine)
    start_mappers()
    await create_all_tables(engine)

    log.info(f"SQLAlchemy adapter started on {engine.url.render_as_string(hide_password=True)}")
    _STATE.engine = engine


def is_started() -> bool:
    return _STATE.engine is not None


async def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        await _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyCatalogUnitOfWork:
    """Async unit of work over one session, counting the rows it writes.

    Pending inserts, deletes and modified rows are counted right before every
    flush, explicit or automatic, so ``commit`` can report the total.
    """

    def __init__(self) -> None:
        self.session_factory: async_sessionmaker[AsyncSession] = _STATE.session_factory
        self._session: AsyncSession | None = None
        self._repositories: CatalogRepositories | None = None
        self._affected = 0

    async def __aenter__(self) -> SqlAlchemyCatalogUnitOfWork:
        self.session = self.session_factory()
        event.listen(self.session.sync_session, "before_flush", self._count_pending)
        self._repositories = self._build_repositories(self.session)
        self._affected = 0
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            await self.rollback()
        await self.session.close()
        self.session = None
        self._repositories = None
        return False

    def _build_repositories(self, session: AsyncSession) -> CatalogRepositories:
        return CatalogRepositories(
            providers=SqlAlchemyProviderRepository(session),
            custom_fields=SqlAlchemyCustomFieldRepository(session),
            services=SqlAlchemyServiceRepository(session),
            countries=SqlAlchemyCountryRepository(session),
            provider_services=SqlAlchemyProviderServiceRepository(session),
            service_countries=SqlAlchemyServiceCountryRepository(session),
        )

    def _count_pending(
        self,
        session: Session,
        _flush_context: UOWTransaction,
        _instances: object,
    ) -> None:
        modified = sum(1 for instance in session.dirty if session.is_modified(instance))
        self._affected += len(session.new) + len(session.deleted) + modified

    async def flush(self) -> int:
        """Flush pending changes; returns the rows written by this unit so far."""

        await self.session.flush()
        return self._affected

    async def commit(self) -> int:
        await self.session.flush()
        affected = self._affected
        await self.session.commit()
        self._affected = 0
        log.debug(f"Committed {affected} rows")
        return affected

    async def rollback(self) -> None:
        await self.session.rollback()
        self._affected = 0

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: AsyncSession | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


if TYPE_CHECKING:
    from provcat.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
