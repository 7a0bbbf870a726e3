from __future__ import annotations

import pytest

from brickbridge.config.http_resilience import ResilienceConfig, RetryPolicy
from brickbridge.config.secondary_catalog import SecondaryCatalogConfig


@pytest.fixture
def secondary_config() -> SecondaryCatalogConfig:
    return SecondaryCatalogConfig(
        resilience=ResilienceConfig(
            name="secondary-test",
            base_url="https://secondary.test/api",
            timeout_seconds=5.0,
            retry=RetryPolicy(total=0),
            cache=None,
            default_headers={"Authorization": "Bearer test-token"},
        )
    )


@pytest.fixture
def grouped_subsets_payload() -> dict[str, object]:
    return {
        "meta": {"code": 200, "message": "OK", "description": "OK"},
        "data": [
            {
                "match_no": 0,
                "entries": [
                    {
                        "item": {"no": "3626bpb0001", "name": "Head", "type": "PART"},
                        "color_id": 3,
                        "quantity": 1,
                        "extra_quantity": 0,
                        "is_alternate": False,
                        "is_counterpart": False,
                    }
                ],
            },
            {
                "match_no": 1,
                "entries": [
                    {
                        "item": {"no": "973pb0123c01", "name": "Torso", "type": "PART"},
                        "color_id": 11,
                        "quantity": 1,
                        "is_alternate": False,
                    },
                    {
                        "item": {"no": "973pb0124c01", "name": "Torso (alt)", "type": "PART"},
                        "color_id": 11,
                        "quantity": 1,
                        "is_alternate": True,
                    },
                ],
            },
            {
                "match_no": 2,
                "entries": [
                    {
                        "item": {"no": "970c00", "type": "PART", "category_id": 768},
                        "color_id": None,
                        "quantity": None,
                    },
                    {
                        "item": {"no": "sw0001a", "type": "MINIFIG"},
                        "quantity": 1,
                    },
                ],
            },
        ],
    }
