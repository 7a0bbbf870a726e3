"""Request-scoped inventory materialization for a single container."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from itertools import chain
from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.domain.errors import (
    InventoryUnavailableError,
    UpstreamUnavailableError,
    require_identifier,
)
from brickbridge.domain.identity import CrossReferenceLoader
from brickbridge.domain.model import Catalog, InventorySource

from .materializer import DEFAULT_SELF_HEAL_TIMEOUT_SECONDS, InventoryMaterializer

if TYPE_CHECKING:
    from collections.abc import Callable

    from brickbridge.common.cache import CacheService
    from brickbridge.domain.model import ContainerInventory
    from brickbridge.domain.outcomes import InventoryResult
    from brickbridge.domain.ports.fetching import CompositionFetcher, ContainerFetcher
    from brickbridge.domain.ports.unit_of_work import CatalogUnitOfWork

    from .materializer import CompositionCache

log = getLogger(__name__)


@dataclass(slots=True)
class InventoryService:
    """Loads a container's rows and materializes them.

    Local rows are preferred; when the store has nothing for the container the
    primary catalog is asked directly. Only when both come up empty is the
    request a hard failure.
    """

    unit_of_work_factory: Callable[[], CatalogUnitOfWork]
    secondary_fetcher: CompositionFetcher | None = None
    primary_fetcher: ContainerFetcher | None = None
    composition_cache: CompositionCache | None = None
    part_xref_cache: CacheService[str, str | None] | None = None
    color_xref_cache: CacheService[int, int | None] | None = None
    self_heal_timeout_seconds: float = DEFAULT_SELF_HEAL_TIMEOUT_SECONDS

    def get_inventory_rows(self, container_id: str) -> InventoryResult:
        return asyncio.run(self.materialize(container_id))

    async def materialize(self, container_id: str) -> InventoryResult:
        container_id = require_identifier(container_id, kind="container")

        with self.unit_of_work_factory() as uow:
            inventory = uow.repositories.containers.get_inventory(container_id)

        source = InventorySource.LOCAL
        if inventory is None or inventory.is_empty:
            inventory = await self._live_inventory(container_id)
            source = InventorySource.LIVE

        fig_ids = sorted({ref.primary_id for ref in inventory.minifigs})
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            local = repositories.compositions.get_compositions(Catalog.PRIMARY, fig_ids)
            mappings = repositories.mappings.get_by_primary_ids(fig_ids)
            loader = CrossReferenceLoader(
                repositories.xrefs,
                part_cache=self.part_xref_cache,
                color_cache=self.color_xref_cache,
            )
            context = loader.build_context(
                chain(inventory.parts, *local.values()),
                mappings=mappings,
            )

        materializer = InventoryMaterializer(
            self_heal=self.secondary_fetcher,
            composition_cache=self.composition_cache,
            timeout_seconds=self.self_heal_timeout_seconds,
        )
        result = await materializer.materialize(
            inventory,
            context,
            local_compositions=local,
            source=source,
        )
        log.info(
            "Materialized %s from %s: rows=%d, succeeded=%d, degraded=%d, failed=%d",
            container_id,
            source,
            len(result.rows),
            result.report.succeeded,
            result.report.degraded,
            result.report.failed,
        )
        return result

    async def _live_inventory(self, container_id: str) -> ContainerInventory:
        if self.primary_fetcher is None:
            raise InventoryUnavailableError(
                f"No inventory stored for {container_id} and no live catalog configured"
            )
        log.info("No stored inventory for %s; fetching from primary catalog", container_id)
        try:
            async with asyncio.timeout(self.self_heal_timeout_seconds * 2):
                inventory = await self.primary_fetcher.fetch_container_inventory(container_id)
        except (UpstreamUnavailableError, TimeoutError) as exc:
            raise InventoryUnavailableError(
                f"Inventory for {container_id} unavailable from every source: {exc}"
            ) from exc
        if inventory.is_empty:
            raise InventoryUnavailableError(
                f"Inventory for {container_id} is empty in every source"
            )
        return inventory
