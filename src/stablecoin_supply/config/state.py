"""
Unified configuration state for the supply pipeline and the dashboard feed.

Single source of truth for coins, provider endpoints, HTTP resilience, chain
bucketing, data-quality thresholds and fallback behaviour. Hierarchical YAML
files are merged with environment overrides and validated by pydantic.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from stablecoin_supply.ingestion.config.value_objects import (
    ChainNormalizationConfig,
    HttpClientConfig,
    RetryConfig,
)
from stablecoin_supply.ingestion.models.enums import DataProvider

logger = logging.getLogger(__name__)


# =============================================================================
# PYDANTIC MODELS - Type-Safe Configuration
# =============================================================================


class CoinConfig(BaseModel):
    """Provider identifiers and history files for one coin."""

    symbol: str
    coingecko_id: str
    defillama_id: str
    coinpaprika_id: str
    monthly_file: str
    yearly_file: str

    class Config:
        extra = "allow"


def _default_coins() -> dict[str, CoinConfig]:
    return {
        "usdc": CoinConfig(
            symbol="USDC",
            coingecko_id="usd-coin",
            defillama_id="2",
            coinpaprika_id="usdc-usd-coin",
            monthly_file="usdc_monthly_supply.csv",
            yearly_file="usdc_yearly_supply.csv",
        ),
        "usdt": CoinConfig(
            symbol="USDT",
            coingecko_id="tether",
            defillama_id="1",
            coinpaprika_id="usdt-tether",
            monthly_file="usdt_monthly_supply.csv",
            yearly_file="usdt_yearly_supply.csv",
        ),
    }


class HttpConfig(BaseModel):
    """HTTP timeout and retry settings shared by every provider."""

    timeout: float = Field(default=20.0, gt=0)
    user_agent: str = Field(default="stablecoin-supply/0.1")
    max_retries: int = Field(default=3, ge=0, le=10)
    base_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=30.0, ge=0)

    class Config:
        extra = "allow"

    def client_config(self) -> HttpClientConfig:
        return HttpClientConfig(timeout=self.timeout, user_agent=self.user_agent)

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
        )


class ProvidersConfig(BaseModel):
    """Provider base URLs and market-cap priority."""

    coingecko_url: str = Field(default="https://api.coingecko.com/api/v3")
    defillama_url: str = Field(default="https://stablecoins.llama.fi")
    coinpaprika_url: str = Field(default="https://api.coinpaprika.com/v1")
    market_cap_priority: list[DataProvider] = Field(
        default_factory=lambda: [
            DataProvider.COINGECKO,
            DataProvider.DEFILLAMA,
            DataProvider.COINPAPRIKA,
        ]
    )
    history_days: int = Field(default=365, ge=1)

    @field_validator("market_cap_priority")
    @classmethod
    def validate_priority(cls, v: list[DataProvider]) -> list[DataProvider]:
        """Priority must name at least one provider, each once."""
        if not v:
            raise ValueError("market_cap_priority must list at least one provider")
        if len(set(v)) != len(v):
            raise ValueError("market_cap_priority contains duplicates")
        return v

    class Config:
        extra = "allow"

    def base_url(self, provider: DataProvider) -> str:
        return {
            DataProvider.COINGECKO: self.coingecko_url,
            DataProvider.DEFILLAMA: self.defillama_url,
            DataProvider.COINPAPRIKA: self.coinpaprika_url,
        }[provider]


class ChainsConfig(BaseModel):
    """Chain distribution bucketing cutoffs."""

    top_n: int = Field(default=8, ge=1)
    min_share_pct: float = Field(default=0.5, ge=0, le=100)

    class Config:
        extra = "allow"

    def normalization_config(self) -> ChainNormalizationConfig:
        return ChainNormalizationConfig(
            top_n=self.top_n, min_share_pct=self.min_share_pct
        )


class QualityConfig(BaseModel):
    """Completeness check thresholds."""

    anomaly_threshold_pct: float = Field(default=100.0, gt=0)

    class Config:
        extra = "allow"


class FallbackConfig(BaseModel):
    """Dashboard feed fallback behaviour."""

    failure_threshold: int = Field(default=2, ge=1)
    cooldown_seconds: float = Field(default=300.0, ge=0)
    cache_ttl_seconds: float = Field(default=600.0, ge=0)
    health_probe_url: str = Field(default="https://api.coingecko.com/api/v3/ping")
    cache_file: str | None = Field(default=None)
    bundled_snapshot: str = Field(default="data.json")
    synthetic_fill: bool = Field(default=True)

    class Config:
        extra = "allow"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    class Config:
        extra = "allow"


class ConfigState(BaseModel):
    """
    Root configuration state - single source of truth for all app config.
    """

    coins: dict[str, CoinConfig] = Field(default_factory=_default_coins)
    http: HttpConfig = Field(default_factory=HttpConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    chains: ChainsConfig = Field(default_factory=ChainsConfig)
    quality: QualityConfig = Field(default_factory=QualityConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    data_dir: str = Field(default="./data")

    # Environment metadata
    env: str = Field(default="dev")
    config_dir: str = Field(default="./config")

    @model_validator(mode="after")
    def validate_coins(self) -> "ConfigState":
        if not self.coins:
            raise ValueError("At least one coin must be configured")
        return self

    class Config:
        extra = "allow"

    def coin(self, key: str) -> CoinConfig:
        """Look up a coin by key (case-insensitive).

        Raises:
            KeyError: If the coin is not configured
        """
        try:
            return self.coins[key.lower()]
        except KeyError:
            raise KeyError(
                f"Unknown coin {key!r}; configured: {sorted(self.coins)}"
            ) from None

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)


# =============================================================================
# CONFIG LOADER - Clean, Validated Loading
# =============================================================================


class ConfigLoader:
    """
    Load and validate configuration from hierarchical YAML files.

    Merges:
      1. Global defaults (hardcoded)
      2. stablecoin.yaml from config_dir
      3. env/<env>.yaml
      4. Environment variable overrides
    """

    def __init__(self, config_dir: str = "./config", env: str | None = None):
        self.config_dir = Path(config_dir)
        self._yaml_cache: dict[Path, Any] = {}
        self.env = env or os.getenv("STABLECOIN_ENV", "dev")

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML file with caching. Missing files yield an empty dict."""
        if path in self._yaml_cache:
            return self._yaml_cache[path]

        if not path.exists():
            logger.debug(f"Config file not found (using defaults): {path}")
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load {path}: {e}")
            raise

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        self._yaml_cache[path] = data
        logger.debug(f"Loaded config: {path}")
        return data

    def _apply_env_overrides(self, config: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides to config."""
        if data_dir := os.getenv("STABLECOIN_DATA_DIR"):
            config["data_dir"] = data_dir

        if log_level := os.getenv("LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level

        if (log_json := os.getenv("LOG_JSON")) is not None:
            config.setdefault("logging", {})["json_logs"] = log_json.strip().lower() in {
                "1",
                "true",
                "yes",
                "on",
            }

        return config

    def _merge_dicts(self, base: dict, override: dict) -> dict:
        """Deep merge override into base dict."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def load(self) -> ConfigState:
        """
        Load complete configuration state.

        Returns:
            ConfigState: Validated configuration object

        Raises:
            pydantic.ValidationError: If configuration is invalid
        """
        logger.info(f"Loading configuration from {self.config_dir} (env: {self.env})")

        config = self._load_yaml(self.config_dir / "stablecoin.yaml")
        env_config = self._load_yaml(self.config_dir / "env" / f"{self.env}.yaml")
        config = self._merge_dicts(config, env_config)
        config = self._apply_env_overrides(config)

        try:
            state = ConfigState(env=self.env, config_dir=str(self.config_dir), **config)
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        logger.info(
            f"Configuration loaded: coins={sorted(state.coins)}, "
            f"providers={[p.value for p in state.providers.market_cap_priority]}, "
            f"data_dir={state.data_dir}"
        )
        return state


def get_config(config_dir: str | None = None) -> ConfigState:
    """
    Load and return the configuration state.

    Args:
        config_dir: Override config directory. Defaults to STABLECOIN_CONFIG_DIR
            or ./config

    Returns:
        ConfigState: Validated configuration object
    """
    if config_dir is None:
        config_dir = os.getenv("STABLECOIN_CONFIG_DIR", "./config")
        if not Path(config_dir).exists():
            logger.warning(f"Config directory not found at {config_dir}, using defaults")

    loader = ConfigLoader(config_dir=config_dir)
    return loader.load()


__all__ = [
    "ChainsConfig",
    "CoinConfig",
    "ConfigLoader",
    "ConfigState",
    "FallbackConfig",
    "HttpConfig",
    "LoggingConfig",
    "ProvidersConfig",
    "QualityConfig",
    "get_config",
]
