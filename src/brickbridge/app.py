"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.adapters.primary import PrimaryCatalogFetcher
from brickbridge.adapters.secondary import SecondaryCompositionFetcher
from brickbridge.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from brickbridge.common.cache import BoundedTTLCache
from brickbridge.config import (
    MissingConfigurationError,
    get_inventory_config,
    get_matching_config,
    get_primary_catalog_config,
    get_secondary_catalog_config,
)
from brickbridge.domain.inventory import InventoryService
from brickbridge.domain.matching import run_matching_pass as run_domain_matching_pass
from brickbridge.domain.ports.unit_of_work import CatalogUnitOfWork

if TYPE_CHECKING:
    from brickbridge.config import InventoryConfig, MatchingConfig
    from brickbridge.domain.matching import MatchingReport
    from brickbridge.domain.outcomes import InventoryResult
    from brickbridge.domain.ports.fetching import CompositionFetcher, ContainerFetcher

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]

log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def run_matching_pass(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: MatchingConfig | None = None,
) -> MatchingReport:
    """Link unmapped primary minifigures to secondary ones and persist the mappings."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyCatalogUnitOfWork
    effective_config = config or get_matching_config()
    log.info("Starting matching pass with thresholds %s", effective_config.thresholds)
    return run_domain_matching_pass(
        unit_of_work_factory=effective_uow,
        settings=effective_config.settings(),
    )


def _default_secondary_fetcher() -> CompositionFetcher | None:
    try:
        return SecondaryCompositionFetcher(config=get_secondary_catalog_config())
    except MissingConfigurationError as exc:
        log.warning("Self-heal disabled: %s", exc)
        return None


def _default_primary_fetcher() -> ContainerFetcher | None:
    try:
        return PrimaryCatalogFetcher(config=get_primary_catalog_config())
    except MissingConfigurationError as exc:
        log.warning("Live inventory fallback disabled: %s", exc)
        return None


def build_inventory_service(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    secondary_fetcher: CompositionFetcher | None = None,
    primary_fetcher: ContainerFetcher | None = None,
    config: InventoryConfig | None = None,
) -> InventoryService:
    """Wire an inventory service with its own caches.

    Fetchers default to the configured catalog adapters; a catalog without
    credentials is simply left out.
    """

    if unit_of_work_factory is None:
        _ensure_started()
    effective_config = config or get_inventory_config()
    return InventoryService(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
        secondary_fetcher=secondary_fetcher or _default_secondary_fetcher(),
        primary_fetcher=primary_fetcher or _default_primary_fetcher(),
        composition_cache=BoundedTTLCache(effective_config.composition_cache),
        part_xref_cache=BoundedTTLCache(effective_config.identity_cache),
        color_xref_cache=BoundedTTLCache(effective_config.identity_cache),
        self_heal_timeout_seconds=effective_config.self_heal_timeout_seconds,
    )


def get_inventory_rows(
    container_id: str,
    *,
    service: InventoryService | None = None,
) -> InventoryResult:
    """Materialize the aggregated inventory rows of one container."""

    effective_service = service or build_inventory_service()
    return effective_service.get_inventory_rows(container_id)
