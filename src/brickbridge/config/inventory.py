"""Inventory materialization settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from brickbridge.common.cache import CachePolicy
from brickbridge.domain.inventory import DEFAULT_SELF_HEAL_TIMEOUT_SECONDS

from .env import optional_float_env, optional_int_env


@dataclass(frozen=True, slots=True)
class InventoryConfig:
    self_heal_timeout_seconds: float = DEFAULT_SELF_HEAL_TIMEOUT_SECONDS
    composition_cache: CachePolicy = field(
        default_factory=lambda: CachePolicy(max_size=500, ttl_seconds=3600.0)
    )
    identity_cache: CachePolicy = field(
        default_factory=lambda: CachePolicy(max_size=5000, ttl_seconds=24 * 3600.0)
    )


def get_inventory_config() -> InventoryConfig:
    return InventoryConfig(
        self_heal_timeout_seconds=optional_float_env(
            "BRICKBRIDGE_SELF_HEAL_TIMEOUT", DEFAULT_SELF_HEAL_TIMEOUT_SECONDS
        ),
        composition_cache=CachePolicy(
            max_size=optional_int_env("BRICKBRIDGE_COMPOSITION_CACHE_SIZE", 500),
            ttl_seconds=optional_float_env("BRICKBRIDGE_COMPOSITION_CACHE_TTL", 3600.0),
        ),
        identity_cache=CachePolicy(
            max_size=optional_int_env("BRICKBRIDGE_IDENTITY_CACHE_SIZE", 5000),
            ttl_seconds=optional_float_env("BRICKBRIDGE_IDENTITY_CACHE_TTL", 24 * 3600.0),
        ),
    )
