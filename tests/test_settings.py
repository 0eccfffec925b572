"""Tests for configuration system."""

import os
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from tradeloop.config import (
    EngineConfig,
    Settings,
    StrategyDefinition,
    load_settings,
    read_yaml_config,
)

YAML_CONFIG = """
trade_cycle_interval: 20
emergency_stop_currency: usd
emergency_stop_balance: "250.50"
markets:
  - id: btcusd
    name: BTC/USD
    base_currency: BTC
    counter_currency: USD
    trading_strategy: scalper
strategies:
  - id: scalper
    name: Basic Scalper
    class_name: scalper
    configuration:
      buy-amount: 20
      min-gain: "2"
"""


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.trade_cycle_interval == 60
        assert settings.emergency_stop_currency == "BTC"
        assert settings.emergency_stop_balance == Decimal("1.0")
        assert settings.exchange_adapter == "ccxt"
        assert settings.exchange_sandbox is True
        assert settings.log_level == "INFO"
        assert settings.markets == []
        assert settings.strategies == []
        assert settings.alerts_enabled is False

    def test_interval_must_be_positive(self):
        Settings(trade_cycle_interval=1)
        with pytest.raises(ValidationError):
            Settings(trade_cycle_interval=0)

    def test_balance_must_not_be_negative(self):
        Settings(emergency_stop_balance="0")
        with pytest.raises(ValidationError):
            Settings(emergency_stop_balance="-0.1")

    def test_balance_is_exact_decimal(self):
        settings = Settings(emergency_stop_balance="0.30000001")
        assert isinstance(settings.emergency_stop_balance, Decimal)
        assert settings.emergency_stop_balance == Decimal("0.30000001")

    def test_currency_upper_cased(self):
        assert Settings(emergency_stop_currency="eth").emergency_stop_currency == "ETH"

    def test_log_level(self):
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    def test_alerts_enabled(self):
        assert Settings(telegram_bot_token="t", telegram_chat_id="1").alerts_enabled
        assert not Settings(telegram_bot_token="t").alerts_enabled

    def test_env_override(self):
        with patch.dict(os.environ, {"TRADE_CYCLE_INTERVAL": "15", "EXCHANGE_ID": "kraken"}):
            settings = Settings()
        assert settings.trade_cycle_interval == 15
        assert settings.exchange_id == "kraken"

    def test_engine_config(self):
        settings = Settings(
            trade_cycle_interval=5,
            emergency_stop_currency="BTC",
            emergency_stop_balance="10",
        )
        assert settings.engine_config() == EngineConfig(
            trade_cycle_interval=5,
            emergency_stop_currency="BTC",
            emergency_stop_balance=Decimal("10"),
        )


class TestStrategyDefinition:
    def test_configuration_values_become_strings(self):
        definition = StrategyDefinition(
            id="s", class_name="x", configuration={"amount": 20, "ratio": 0.5}
        )
        assert definition.configuration == {"amount": "20", "ratio": "0.5"}


class TestLoadSettings:
    def test_reads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(YAML_CONFIG)

        settings = load_settings(str(path))

        assert settings.config_file == str(path)
        assert settings.trade_cycle_interval == 20
        assert settings.emergency_stop_currency == "USD"
        assert settings.emergency_stop_balance == Decimal("250.50")
        assert settings.markets[0].id == "btcusd"
        assert settings.markets[0].enabled is True
        assert settings.strategies[0].configuration == {"buy-amount": "20", "min-gain": "2"}

    def test_overrides_beat_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(YAML_CONFIG)
        settings = load_settings(str(path), trade_cycle_interval=3)
        assert settings.trade_cycle_interval == 3

    def test_yaml_beats_environment(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(YAML_CONFIG)
        with patch.dict(os.environ, {"TRADE_CYCLE_INTERVAL": "99"}):
            settings = load_settings(str(path))
        assert settings.trade_cycle_interval == 20

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "nonexistent.yaml"))
        assert settings.trade_cycle_interval == 60

    def test_invalid_yaml_values_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("trade_cycle_interval: 0\n")
        with pytest.raises(ValidationError):
            load_settings(str(path))

    def test_non_mapping_yaml_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            read_yaml_config(path)

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert read_yaml_config(path) == {}
