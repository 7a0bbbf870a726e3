"""Secondary catalog (marketplace) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_SECONDARY_CATALOG_BASE_URL = "https://api.bricklink.com/api/store/v1"


def is_successful_envelope(payload: object) -> bool:
    """Only cache envelopes whose ``meta.code`` reports success."""

    if not isinstance(payload, dict):
        return False
    meta = payload.get("meta")
    if not isinstance(meta, dict):
        return True
    return meta.get("code", 200) == 200


@dataclass(frozen=True, slots=True)
class SecondaryCatalogConfig:
    resilience: ResilienceConfig


def get_secondary_catalog_config() -> SecondaryCatalogConfig:
    values = require_env_vars(("SECONDARY_CATALOG_TOKEN",))
    base_url = optional_env("SECONDARY_CATALOG_BASE_URL", DEFAULT_SECONDARY_CATALOG_BASE_URL)

    resilience = ResilienceConfig(
        name="secondary-catalog",
        base_url=base_url,
        timeout_seconds=10.0,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        retry=RetryPolicy(total=2, max_backoff_wait=8.0),
        cache=CacheConfig(
            enabled=True,
            backend="memory",
            default_ttl_seconds=3600,
            should_cache=is_successful_envelope,
        ),
        default_headers={
            "Authorization": f"Bearer {values['SECONDARY_CATALOG_TOKEN']}",
            "Accept": "application/json",
        },
    )
    return SecondaryCatalogConfig(resilience=resilience)
