"""Secondary catalog API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from brickbridge.adapters.http_resilience import ResilientClient
from brickbridge.domain.errors import UpstreamUnavailableError

from .schema import SubsetsResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from brickbridge.config.http_resilience import ResilienceConfig
    from brickbridge.config.secondary_catalog import SecondaryCatalogConfig

log = getLogger(__name__)

MINIFIG_ITEM_TYPE = "MINIFIG"


class SecondaryCatalogAPIError(UpstreamUnavailableError):
    """Raised when the secondary catalog API fails or returns an unexpected response."""


class SecondaryCatalogClient:
    """Low-level HTTP client for the secondary catalog API."""

    def __init__(
        self,
        *,
        config: SecondaryCatalogConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def fetch_minifig_subsets(self, minifig_id: str) -> SubsetsResponse:
        path = f"/items/{MINIFIG_ITEM_TYPE}/{quote(minifig_id, safe='')}/subsets"
        async with self._client_factory(self._resilience) as client:
            return await self._perform_request(
                client=client,
                path=path,
                params={"break_minifigs": "false"},
            )

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        path: str,
        params: dict[str, str],
    ) -> SubsetsResponse:
        if self._resilience.base_url is None:
            raise SecondaryCatalogAPIError(
                "Missing secondary catalog base_url in resilience configuration"
            )
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise SecondaryCatalogAPIError(
                f"Secondary catalog request {path} failed: {exc}"
            ) from exc
        except ValueError as exc:
            raise SecondaryCatalogAPIError(
                f"Secondary catalog returned invalid JSON for {path}"
            ) from exc

        if not isinstance(payload, dict):
            raise SecondaryCatalogAPIError("Unexpected secondary catalog response payload")
        try:
            parsed = SubsetsResponse.model_validate(payload)
        except ValidationError as exc:
            raise SecondaryCatalogAPIError(f"Unexpected subsets payload for {path}: {exc}") from exc
        if not parsed.ok:
            log.warning("Secondary catalog rejected %s with meta code %s", path, parsed.meta.code)
            raise SecondaryCatalogAPIError(
                f"Secondary catalog meta {parsed.meta.code}: {parsed.meta.message or 'error'}"
            )
        return parsed
