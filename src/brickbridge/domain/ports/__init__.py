"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import CompositionFetcher, ContainerFetcher
from .persistence import (
    CompositionRepository,
    ContainerRepository,
    CrossReferenceRepository,
    MappingRepository,
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
    "CompositionFetcher",
    "CompositionRepository",
    "ContainerFetcher",
    "ContainerRepository",
    "CrossReferenceRepository",
    "MappingRepository",
    "RepositoryCollection",
    "UnitOfWork",
]
