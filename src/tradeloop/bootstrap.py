"""Builds a ready-to-run TradingEngine from Settings.

The markets decide *what* to trade, the strategies *how*, the exchange
adapter *where* and the engine settings *when*.
"""

from __future__ import annotations

import structlog

from tradeloop.config import Settings, StrategyDefinition
from tradeloop.engines.trading_engine import TradingEngine
from tradeloop.errors import ConfigurationError
from tradeloop.exchanges.base import ExchangeAdapter
from tradeloop.exchanges.factory import ExchangeFactory
from tradeloop.models import Market
from tradeloop.monitoring.alerts import AlertSink
from tradeloop.monitoring.telegram import TelegramNotifier
from tradeloop.strategies.base import StrategyBinding, StrategyConfig
from tradeloop.strategies.registry import resolve_strategy_class

logger = structlog.get_logger(__name__)


def create_exchange(settings: Settings) -> ExchangeAdapter:
    exchange = ExchangeFactory.create(
        settings.exchange_adapter,
        exchange_id=settings.exchange_id,
        api_key=settings.exchange_api_key,
        secret_key=settings.exchange_secret_key,
        sandbox=settings.exchange_sandbox,
    )
    logger.info("exchange_adapter_created", adapter=settings.exchange_adapter, exchange=exchange.name)
    return exchange


def _index_strategies(definitions: list[StrategyDefinition]) -> dict[str, StrategyDefinition]:
    indexed: dict[str, StrategyDefinition] = {}
    for definition in definitions:
        if definition.id in indexed:
            raise ConfigurationError(f"Duplicate strategy id in config: '{definition.id}'")
        indexed[definition.id] = definition
        logger.info("strategy_registered", strategy_id=definition.id, class_name=definition.class_name)
    return indexed


def build_bindings(settings: Settings, exchange: ExchangeAdapter) -> tuple[StrategyBinding, ...]:
    """Create one strategy per enabled market, in configured order.

    Raises:
        ConfigurationError: On a duplicate market, an unknown strategy id or an
            unresolvable strategy class.
    """
    definitions = _index_strategies(settings.strategies)
    loaded_markets: set[Market] = set()
    bindings: list[StrategyBinding] = []

    for market_config in settings.markets:
        if not market_config.enabled:
            logger.info("market_disabled_skipping", market=market_config.name)
            continue

        market = Market(
            name=market_config.name,
            id=market_config.id,
            base_currency=market_config.base_currency,
            counter_currency=market_config.counter_currency,
        )
        if market in loaded_markets:
            raise ConfigurationError(f"Found duplicate market in config: {market}")
        loaded_markets.add(market)

        definition = definitions.get(market_config.trading_strategy)
        if definition is None:
            raise ConfigurationError(
                f"Failed to find strategy '{market_config.trading_strategy}' for market "
                f"{market}. Known strategies: {sorted(definitions)}"
            )

        strategy_class = resolve_strategy_class(definition.class_name)
        config = StrategyConfig(definition.configuration)
        if not config:
            logger.info("strategy_has_no_configuration", strategy_id=definition.id)
        strategy = strategy_class(exchange=exchange, market=market, config=config)
        bindings.append(
            StrategyBinding(
                strategy_id=definition.id,
                strategy=strategy,
                market=market,
                config=config,
            )
        )
        logger.info(
            "strategy_initialized",
            strategy_id=definition.id,
            name=definition.name or definition.id,
            class_name=definition.class_name,
            market=str(market),
        )

    logger.info("markets_loaded", bindings=len(bindings))
    return tuple(bindings)


def build_engine(
    settings: Settings,
    exchange: ExchangeAdapter | None = None,
    alert_sink: AlertSink | None = None,
) -> TradingEngine:
    """Wire the exchange, alert sink and strategies into a TradingEngine."""
    exchange = exchange or create_exchange(settings)
    if alert_sink is None:
        if settings.alerts_enabled:
            logger.info("telegram_alerts_enabled")
        else:
            logger.warning("telegram_alerts_not_configured")
        alert_sink = TelegramNotifier(
            bot_token=settings.telegram_bot_token,
            chat_id=settings.telegram_chat_id,
        )

    engine_config = settings.engine_config()
    logger.info(
        "engine_config_loaded",
        trade_cycle_interval=engine_config.trade_cycle_interval,
        emergency_stop_currency=engine_config.emergency_stop_currency,
        emergency_stop_balance=str(engine_config.emergency_stop_balance),
    )
    return TradingEngine(
        config=engine_config,
        exchange=exchange,
        bindings=build_bindings(settings, exchange),
        alert_sink=alert_sink,
        bot_name=settings.bot_name,
    )
