from __future__ import annotations

import pytest

from brickbridge.config.http_resilience import ResilienceConfig, RetryPolicy
from brickbridge.config.primary_catalog import PrimaryCatalogConfig


@pytest.fixture
def primary_config() -> PrimaryCatalogConfig:
    return PrimaryCatalogConfig(
        resilience=ResilienceConfig(
            name="primary-test",
            base_url="https://primary.test/api/v3",
            timeout_seconds=5.0,
            retry=RetryPolicy(total=0),
            cache=None,
        ),
        page_size=2,
    )
