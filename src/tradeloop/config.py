"""Configuration system using pydantic-settings with .env and optional YAML file."""

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_FILE = "config.yaml"


@dataclass(frozen=True)
class EngineConfig:
    """Settings the trading engine reads while it runs.

    trade_cycle_interval is the sleep in seconds between trade cycles.
    If the emergency_stop_currency balance on the exchange drops below
    emergency_stop_balance, all trading stops and manual intervention is
    required.
    """

    trade_cycle_interval: int
    emergency_stop_currency: str
    emergency_stop_balance: Decimal


class MarketConfig(BaseModel):
    """A market entry from the config file."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    base_currency: str = Field(min_length=1)
    counter_currency: str = Field(min_length=1)
    enabled: bool = True
    trading_strategy: str = Field(min_length=1)


class StrategyDefinition(BaseModel):
    """A trading strategy entry from the config file."""

    id: str = Field(min_length=1)
    name: str = ""
    class_name: str = Field(min_length=1)
    description: str = ""
    configuration: dict[str, str] = Field(default_factory=dict)

    @field_validator("configuration", mode="before")
    @classmethod
    def stringify_values(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(key): str(value) for key, value in v.items()}
        return v


class Settings(BaseSettings):
    """Application settings loaded from environment variables and optional YAML config."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Engine
    trade_cycle_interval: int = Field(default=60, ge=1)
    emergency_stop_currency: str = Field(default="BTC", min_length=1)
    emergency_stop_balance: Decimal = Field(default=Decimal("1.0"), ge=0)

    # Exchange
    exchange_adapter: str = "ccxt"
    exchange_id: str = "binance"
    exchange_api_key: str = ""
    exchange_secret_key: str = ""
    exchange_sandbox: bool = True

    # Telegram alerts
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    bot_name: str = "tradeloop"

    # Logging
    log_level: str = "INFO"

    # Markets and strategies, normally from the YAML file
    markets: list[MarketConfig] = Field(default_factory=list)
    strategies: list[StrategyDefinition] = Field(default_factory=list)

    # Config file path
    config_file: str = ""

    @field_validator("emergency_stop_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @property
    def alerts_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            trade_cycle_interval=self.trade_cycle_interval,
            emergency_stop_currency=self.emergency_stop_currency,
            emergency_stop_balance=self.emergency_stop_balance,
        )


def read_yaml_config(path: Path) -> dict[str, Any]:
    """Read a YAML config file. Returns an empty dict if the file is missing or empty."""
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return data


def load_settings(config_file: str | None = None, **overrides: Any) -> Settings:
    """Create a Settings instance from the YAML file, environment and overrides.

    Precedence, highest first: explicit overrides, YAML file, environment / .env.
    """
    path = Path(config_file) if config_file else Path(DEFAULT_CONFIG_FILE)
    values = read_yaml_config(path)
    values.update(overrides)
    values["config_file"] = str(path)
    return Settings(**values)
