"""Primary catalog (Rebrickable-style) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env, optional_int_env, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_PRIMARY_CATALOG_BASE_URL = "https://rebrickable.com/api/v3"
DEFAULT_PRIMARY_PAGE_SIZE = 1000


@dataclass(frozen=True, slots=True)
class PrimaryCatalogConfig:
    resilience: ResilienceConfig
    page_size: int = DEFAULT_PRIMARY_PAGE_SIZE


def get_primary_catalog_config() -> PrimaryCatalogConfig:
    values = require_env_vars(("PRIMARY_CATALOG_API_KEY",))
    base_url = optional_env("PRIMARY_CATALOG_BASE_URL", DEFAULT_PRIMARY_CATALOG_BASE_URL)

    resilience = ResilienceConfig(
        name="primary-catalog",
        base_url=base_url,
        timeout_seconds=20.0,
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=CacheConfig(enabled=True, backend="sqlite", default_ttl_seconds=24 * 3600),
        default_headers={
            "Authorization": f"key {values['PRIMARY_CATALOG_API_KEY']}",
            "Accept": "application/json",
        },
    )
    page_size = optional_int_env("PRIMARY_CATALOG_PAGE_SIZE", DEFAULT_PRIMARY_PAGE_SIZE)
    return PrimaryCatalogConfig(resilience=resilience, page_size=page_size)
