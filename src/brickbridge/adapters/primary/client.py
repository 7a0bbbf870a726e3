"""Primary catalog API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from brickbridge.adapters.http_resilience import ResilientClient
from brickbridge.domain.errors import UpstreamUnavailableError

from .schema import InventoryMinifig, InventoryMinifigsPage, InventoryPart, InventoryPartsPage

if TYPE_CHECKING:
    from collections.abc import Callable

    from brickbridge.config.http_resilience import ResilienceConfig
    from brickbridge.config.primary_catalog import PrimaryCatalogConfig

log = getLogger(__name__)

MAX_PAGES = 50


class PrimaryCatalogAPIError(UpstreamUnavailableError):
    """Raised when the primary catalog API fails or returns an unexpected response."""


class PrimaryCatalogClient:
    """Low-level HTTP client for the primary catalog API.

    Every listing is paginated; ``next`` links are followed until exhausted.
    """

    def __init__(
        self,
        *,
        config: PrimaryCatalogConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def fetch_set_parts(self, set_num: str) -> list[InventoryPart]:
        path = f"/lego/sets/{quote(set_num, safe='')}/parts/"
        pages = await self._collect_pages(path, InventoryPartsPage, inc_minifig_parts="0")
        return [part for page in pages for part in page.results]

    async def fetch_minifig_parts(self, fig_num: str) -> list[InventoryPart]:
        path = f"/lego/minifigs/{quote(fig_num, safe='')}/parts/"
        pages = await self._collect_pages(path, InventoryPartsPage)
        return [part for page in pages for part in page.results]

    async def fetch_set_minifigs(self, set_num: str) -> list[InventoryMinifig]:
        path = f"/lego/sets/{quote(set_num, safe='')}/minifigs/"
        pages = await self._collect_pages(path, InventoryMinifigsPage)
        return [minifig for page in pages for minifig in page.results]

    async def _collect_pages[TPage: (InventoryPartsPage, InventoryMinifigsPage)](
        self,
        path: str,
        model: type[TPage],
        **extra_params: str,
    ) -> list[TPage]:
        pages: list[TPage] = []
        url: str | None = path
        params: dict[str, str] | None = {"page_size": str(self._config.page_size), **extra_params}
        async with self._client_factory(self._resilience) as client:
            while url is not None:
                if len(pages) >= MAX_PAGES:
                    log.warning("Stopped paging %s after %d pages", path, MAX_PAGES)
                    break
                payload = await self._get_json(client, url, params)
                pages.append(self._validate(model, payload, url))
                url, params = pages[-1].next, None
        return pages

    async def _get_json(
        self,
        client: ResilientClient,
        url: str,
        params: dict[str, str] | None,
    ) -> dict[str, object]:
        if self._resilience.base_url is None:
            raise PrimaryCatalogAPIError(
                "Missing primary catalog base_url in resilience configuration"
            )
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise PrimaryCatalogAPIError(f"Primary catalog request {url} failed: {exc}") from exc
        except ValueError as exc:
            raise PrimaryCatalogAPIError(
                f"Primary catalog returned invalid JSON for {url}"
            ) from exc
        if not isinstance(payload, dict):
            raise PrimaryCatalogAPIError("Unexpected primary catalog response payload")
        return payload

    @staticmethod
    def _validate[TPage: (InventoryPartsPage, InventoryMinifigsPage)](
        model: type[TPage], payload: dict[str, object], url: str
    ) -> TPage:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise PrimaryCatalogAPIError(f"Unexpected page payload for {url}: {exc}") from exc
