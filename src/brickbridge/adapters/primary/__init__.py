"""Primary catalog (Rebrickable-style) adapter."""

from __future__ import annotations

from .client import PrimaryCatalogAPIError, PrimaryCatalogClient
from .fetcher import PrimaryCatalogFetcher
from .translator import translate_inventory, translate_parts

__all__ = [
    "PrimaryCatalogAPIError",
    "PrimaryCatalogClient",
    "PrimaryCatalogFetcher",
    "translate_inventory",
    "translate_parts",
]
