"""Translate secondary catalog subsets into composition lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from brickbridge.domain.model import CompositionLine

from .schema import PART_ITEM_TYPE

if TYPE_CHECKING:
    from .schema import SubsetEntry, SubsetsResponse

DEFAULT_COLOR_ID = 0
DEFAULT_QUANTITY = 1


def translate_entry(entry: SubsetEntry) -> CompositionLine | None:
    if entry.item.type.upper() != PART_ITEM_TYPE:
        return None
    if entry.is_alternate:
        return None
    part_id = entry.item.no.strip()
    if not part_id:
        return None
    return CompositionLine(
        part_id=part_id,
        color_id=entry.color_id if entry.color_id is not None else DEFAULT_COLOR_ID,
        quantity=entry.quantity if entry.quantity is not None else DEFAULT_QUANTITY,
        name=entry.item.name,
    )


def translate_subsets(response: SubsetsResponse) -> list[CompositionLine]:
    """Keep part entries only; alternates and nested minifigs are dropped."""

    lines: list[CompositionLine] = []
    for entry in response.entries():
        line = translate_entry(entry)
        if line is not None:
            lines.append(line)
    return lines
