from __future__ import annotations

from .cache import BoundedTTLCache, CachePolicy, CacheService

__all__ = ["BoundedTTLCache", "CachePolicy", "CacheService"]
