"""Inventory materialization: minifigure explosion and row aggregation."""

from __future__ import annotations

from .materializer import DEFAULT_SELF_HEAL_TIMEOUT_SECONDS, InventoryMaterializer
from .service import InventoryService

__all__ = ["DEFAULT_SELF_HEAL_TIMEOUT_SECONDS", "InventoryMaterializer", "InventoryService"]
