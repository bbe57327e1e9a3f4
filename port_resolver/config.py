"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for all configuration:
cache capacity and lifetime, resolver thresholds, geocoder politeness
settings, dataset locations and logging.

Configuration can be overridden via environment variables:
- PORTS_CACHE_MAX_ENTRIES=200
- PORTS_CACHE_BACKEND=memory
- PORTS_RESOLVER_MIN_ONLINE_CONFIDENCE=0.7
- PORTS_GEO_USER_AGENT=my-app/1.0
- etc.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Literal, Mapping, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.errors import ConfigurationError

DAY_MS = 24 * 60 * 60 * 1000


class CacheConfig(BaseSettings):
    """Ports cache configuration.

    Environment variables prefixed with PORTS_CACHE_.
    """

    model_config = SettingsConfigDict(env_prefix="PORTS_CACHE_")

    max_entries: int = Field(default=500, ge=1)
    ttl_ms: int = Field(default=90 * DAY_MS, ge=0)
    cache_key: str = "ports_cache_v1"
    backend: Literal["file", "memory", "none"] = "file"
    storage_path: Path = Field(
        default_factory=lambda: Path.home() / ".port_resolver" / "storage.json"
    )


class ResolverConfig(BaseSettings):
    """Search orchestrator thresholds and politeness settings.

    Local results skip the online lookup only when their top score is
    strictly above high_confidence.

    Environment variables prefixed with PORTS_RESOLVER_.
    """

    model_config = SettingsConfigDict(env_prefix="PORTS_RESOLVER_")

    high_confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    min_online_confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    resolve_min_score: float = Field(default=0.7, ge=0.0, le=1.0)
    default_limit: int = Field(default=10, ge=1)
    online_limit: int = Field(default=5, ge=1)
    query_suffixes: tuple[str, ...] = ("cruise port", "port")
    batch_delay_seconds: float = Field(default=0.4, ge=0.0)
    allow_online: bool = True


class GeocodingConfig(BaseSettings):
    """Geocoding configuration.

    Environment variables prefixed with PORTS_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="PORTS_GEO_")

    user_agent: str = "port-resolver/1.0"
    timeout_seconds: int = 10
    rate_limit_delay: float = 1.0
    max_retries: int = 2
    error_wait_seconds: float = 2.0
    language: str = "en"
    lookup_cache_ttl_seconds: Optional[float] = 3600.0
    lookup_cache_size: Optional[int] = 256


class DatasetConfig(BaseSettings):
    """Reference dataset configuration.

    Environment variables prefixed with PORTS_DATASET_.
    """

    model_config = SettingsConfigDict(env_prefix="PORTS_DATASET_")

    data_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parent / "data")
    curated_file: str = "ports.curated.json"
    master_file: str = "cruise_ports_master.json"

    @property
    def curated_path(self) -> Path:
        """Full path to the curated ports file."""
        return self.data_dir / self.curated_file

    @property
    def master_path(self) -> Path:
        """Full path to the master ports file."""
        return self.data_dir / self.master_file


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with PORTS_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="PORTS_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.cache.max_entries)
        print(config.dataset.curated_path)

    Environment variables prefixed with PORTS_.
    """

    model_config = SettingsConfigDict(env_prefix="PORTS_")

    cache: CacheConfig = Field(default_factory=CacheConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache."""
    get_config.cache_clear()


def ports_cache_config(config: Optional[CacheConfig] = None) -> Mapping[str, Any]:
    """Return the read-only PORTS_CACHE_CONFIG view of the cache limits.

    Args:
        config: Cache configuration (defaults to the application config).

    Returns:
        Mapping with MAX_ENTRIES, TTL_MS and CACHE_KEY.
    """
    cfg = config or get_config().cache
    return MappingProxyType(
        {
            "MAX_ENTRIES": cfg.max_entries,
            "TTL_MS": cfg.ttl_ms,
            "CACHE_KEY": cfg.cache_key,
        }
    )


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Apply the logging level and format to the root logger.

    Raises:
        ConfigurationError: If the level is not a known logging level.
    """
    cfg = config or get_config().observability
    level = logging.getLevelName(cfg.level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(
            f"Unknown log level: {cfg.level}",
            setting_name="PORTS_LOG_LEVEL",
            expected_type="DEBUG, INFO, WARNING, ERROR or CRITICAL",
        )
    logging.basicConfig(level=level, format=cfg.format)
