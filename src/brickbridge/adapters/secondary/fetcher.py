"""Secondary catalog composition fetcher used for self-healing inventories."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.domain.errors import require_identifier

from .client import SecondaryCatalogClient
from .translator import translate_subsets

if TYPE_CHECKING:
    from brickbridge.config.secondary_catalog import SecondaryCatalogConfig
    from brickbridge.domain.model import CompositionLine

log = getLogger(__name__)


class SecondaryCompositionFetcher:
    def __init__(
        self,
        *,
        config: SecondaryCatalogConfig | None = None,
        client: SecondaryCatalogClient | None = None,
    ) -> None:
        if client is None:
            if config is None:
                raise ValueError("SecondaryCompositionFetcher needs a config or a client")
            client = SecondaryCatalogClient(config=config)
        self._client = client

    async def fetch_entity_composition(self, entity_id: str) -> list[CompositionLine]:
        minifig_id = require_identifier(entity_id, kind="minifig")
        response = await self._client.fetch_minifig_subsets(minifig_id)
        lines = translate_subsets(response)
        log.debug("Secondary catalog returned %d part line(s) for %s", len(lines), minifig_id)
        return lines
