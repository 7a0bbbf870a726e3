"""SQLAlchemy adapter package for brickbridge."""

from __future__ import annotations

from .mappings import mapper_registry
from .repositories import (
    SqlAlchemyCompositionRepository,
    SqlAlchemyContainerRepository,
    SqlAlchemyCrossReferenceRepository,
    SqlAlchemyMappingRepository,
)
from .unit_of_work import SqlAlchemyCatalogUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyCompositionRepository",
    "SqlAlchemyContainerRepository",
    "SqlAlchemyCrossReferenceRepository",
    "SqlAlchemyMappingRepository",
    "mapper_registry",
    "shutdown",
    "startup",
]
