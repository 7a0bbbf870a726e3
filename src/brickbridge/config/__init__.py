"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env, optional_float_env, optional_int_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .inventory import InventoryConfig, get_inventory_config
from .logging import configure_logging
from .matching import DEFAULT_SECONDARY_FAMILY_RULES, MatchingConfig, get_matching_config
from .primary_catalog import PrimaryCatalogConfig, get_primary_catalog_config
from .secondary_catalog import SecondaryCatalogConfig, get_secondary_catalog_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_SECONDARY_FAMILY_RULES",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InventoryConfig",
    "MatchingConfig",
    "MissingConfigurationError",
    "PrimaryCatalogConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SecondaryCatalogConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_inventory_config",
    "get_matching_config",
    "get_primary_catalog_config",
    "get_secondary_catalog_config",
    "get_storage_config",
    "optional_env",
    "optional_float_env",
    "optional_int_env",
    "require_env_vars",
]
