"""Translate primary catalog payloads into domain values."""

from __future__ import annotations

from collections.abc import Iterable

from brickbridge.domain.model import CompositionLine, ContainerInventory, MinifigReference

from .schema import InventoryMinifig, InventoryPart


def translate_parts(parts: Iterable[InventoryPart]) -> list[CompositionLine]:
    """Spare parts are excluded; they are extras, not requirements."""

    return [
        CompositionLine(
            part_id=item.part.part_num,
            color_id=item.color.id,
            quantity=item.quantity,
            name=item.part.name,
        )
        for item in parts
        if not item.is_spare
    ]


def translate_minifigs(minifigs: Iterable[InventoryMinifig]) -> list[MinifigReference]:
    return [
        MinifigReference(primary_id=item.set_num, quantity=item.quantity, name=item.set_name)
        for item in minifigs
    ]


def translate_inventory(
    container_id: str,
    parts: Iterable[InventoryPart],
    minifigs: Iterable[InventoryMinifig],
) -> ContainerInventory:
    return ContainerInventory(
        container_id=container_id,
        parts=tuple(translate_parts(parts)),
        minifigs=tuple(translate_minifigs(minifigs)),
    )
