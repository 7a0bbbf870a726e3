"""Primary catalog fetchers for live container inventories."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.domain.errors import require_identifier

from .client import PrimaryCatalogClient
from .translator import translate_inventory, translate_parts

if TYPE_CHECKING:
    from brickbridge.config.primary_catalog import PrimaryCatalogConfig
    from brickbridge.domain.model import CompositionLine, ContainerInventory

log = getLogger(__name__)


class PrimaryCatalogFetcher:
    """Live fallback used when the local store has no rows for a container."""

    def __init__(
        self,
        *,
        config: PrimaryCatalogConfig | None = None,
        client: PrimaryCatalogClient | None = None,
    ) -> None:
        if client is None:
            if config is None:
                raise ValueError("PrimaryCatalogFetcher needs a config or a client")
            client = PrimaryCatalogClient(config=config)
        self._client = client

    async def fetch_container_composition(self, container_id: str) -> list[CompositionLine]:
        set_num = require_identifier(container_id, kind="container")
        return translate_parts(await self._client.fetch_set_parts(set_num))

    async def fetch_entity_composition(self, entity_id: str) -> list[CompositionLine]:
        fig_num = require_identifier(entity_id, kind="minifig")
        return translate_parts(await self._client.fetch_minifig_parts(fig_num))

    async def fetch_container_inventory(self, container_id: str) -> ContainerInventory:
        set_num = require_identifier(container_id, kind="container")
        parts, minifigs = await asyncio.gather(
            self._client.fetch_set_parts(set_num),
            self._client.fetch_set_minifigs(set_num),
        )
        log.info(
            "Primary catalog returned %d part row(s) and %d minifig row(s) for %s",
            len(parts),
            len(minifigs),
            set_num,
        )
        return translate_inventory(set_num, parts, minifigs)
