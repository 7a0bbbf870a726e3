from __future__ import annotations

import logging
from pathlib import Path

import pytest

from brickbridge.config import (
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    get_database_config,
    get_inventory_config,
    get_matching_config,
    get_primary_catalog_config,
    get_secondary_catalog_config,
    get_storage_config,
    optional_float_env,
    require_env_vars,
)
from brickbridge.config.secondary_catalog import is_successful_envelope


def test_require_env_vars_returns_stripped_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_optional_float_env_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOME_FLOAT", "fast")

    with pytest.raises(ConfigurationError, match="SOME_FLOAT"):
        optional_float_env("SOME_FLOAT", 1.0)


def test_matching_thresholds_can_be_overridden(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BRICKBRIDGE_MATCH_FUZZY", "0.65")
    monkeypatch.setenv("BRICKBRIDGE_MATCH_PARTS_ONLY", "0.9")

    config = get_matching_config()

    assert config.thresholds.fuzzy == 0.65
    assert config.thresholds.parts_only == 0.9
    assert config.thresholds.exact == 0.95
    assert config.settings().normalizer("970c63") == "970c00"


def test_inconsistent_thresholds_fail_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BRICKBRIDGE_MATCH_OVERLAP", "0.99")

    with pytest.raises(ValueError, match="thresholds"):
        get_matching_config()


def test_inventory_config_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BRICKBRIDGE_SELF_HEAL_TIMEOUT", "2.5")
    monkeypatch.setenv("BRICKBRIDGE_COMPOSITION_CACHE_SIZE", "10")

    config = get_inventory_config()

    assert config.self_heal_timeout_seconds == 2.5
    assert config.composition_cache.max_size == 10
    assert config.composition_cache.ttl_seconds == 3600.0


def test_inventory_config_reads_identity_cache_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BRICKBRIDGE_IDENTITY_CACHE_SIZE", "50")
    monkeypatch.setenv("BRICKBRIDGE_IDENTITY_CACHE_TTL", "60")

    config = get_inventory_config()

    assert config.identity_cache.max_size == 50
    assert config.identity_cache.ttl_seconds == 60.0
    assert config.composition_cache.max_size == 500


def test_secondary_catalog_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SECONDARY_CATALOG_TOKEN", raising=False)

    with pytest.raises(MissingConfigurationError, match="SECONDARY_CATALOG_TOKEN"):
        get_secondary_catalog_config()


def test_secondary_catalog_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SECONDARY_CATALOG_TOKEN", "secret")
    monkeypatch.setenv("SECONDARY_CATALOG_BASE_URL", "https://secondary.test/api")

    resilience = get_secondary_catalog_config().resilience

    assert resilience.base_url == "https://secondary.test/api"
    assert resilience.default_headers is not None
    assert resilience.default_headers["Authorization"] == "Bearer secret"
    assert resilience.cache is not None
    assert resilience.cache.should_cache is is_successful_envelope


def test_primary_catalog_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRIMARY_CATALOG_API_KEY", "abc")
    monkeypatch.setenv("PRIMARY_CATALOG_PAGE_SIZE", "100")

    config = get_primary_catalog_config()

    assert config.page_size == 100
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "key abc"


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"meta": {"code": 200}, "data": []}, True),
        ({"meta": {"code": 404, "message": "NOT_FOUND"}}, False),
        ({"results": []}, True),
        ([], False),
    ],
)
def test_only_successful_envelopes_are_cached(payload: object, expected: bool) -> None:
    assert is_successful_envelope(payload) is expected


def test_storage_config_uses_env_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("BRICKBRIDGE_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    storage = get_storage_config()

    assert storage.resolve_data_dir() == tmp_path.resolve()
    expected = tmp_path.resolve() / "brickbridge.db"
    assert get_database_config().uri == f"sqlite+pysqlite:///{expected}"


def test_database_uri_env_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_configure_logging_quiets_transport_loggers() -> None:
    configure_logging(level=logging.DEBUG, force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
