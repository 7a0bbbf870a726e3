"""Secondary catalog (marketplace) adapter."""

from __future__ import annotations

from .client import SecondaryCatalogAPIError, SecondaryCatalogClient
from .fetcher import SecondaryCompositionFetcher
from .schema import SubsetEntry, SubsetGroup, SubsetsResponse
from .translator import translate_subsets

__all__ = [
    "SecondaryCatalogAPIError",
    "SecondaryCatalogClient",
    "SecondaryCompositionFetcher",
    "SubsetEntry",
    "SubsetGroup",
    "SubsetsResponse",
    "translate_subsets",
]
