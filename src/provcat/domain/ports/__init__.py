"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import CountryFeed
from .persistence import (
    CountryRepository,
    CustomFieldRepository,
    ProviderRepository,
    ProviderServiceRepository,
    Repository,
    ServiceCountryRepository,
    ServiceRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "CountryFeed",
    "CountryRepository",
    "CustomFieldRepository",
    "ProviderRepository",
    "ProviderServiceRepository",
    "Repository",
    "RepositoryCollection",
    "ServiceCountryRepository",
    "ServiceRepository",
    "UnitOfWork",
]
