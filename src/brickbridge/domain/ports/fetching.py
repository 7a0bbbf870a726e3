"""Ports for fetching catalog data from live upstream APIs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from brickbridge.domain.model import CompositionLine, ContainerInventory


@runtime_checkable
class CompositionFetcher(Protocol):
    """Fetch the exploded part list of one minifigure.

    Implementations raise ``UpstreamUnavailableError`` once retries are exhausted.
    """

    async def fetch_entity_composition(self, entity_id: str) -> list[CompositionLine]: ...


@runtime_checkable
class ContainerFetcher(Protocol):
    """Fetch a container's direct parts and minifigure references."""

    async def fetch_container_inventory(self, container_id: str) -> ContainerInventory: ...
