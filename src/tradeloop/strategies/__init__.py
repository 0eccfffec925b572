"""Trading strategies package."""

from tradeloop.strategies.base import StrategyBinding, StrategyConfig, TradingStrategy
from tradeloop.strategies.registry import (
    get_registered_strategies,
    register_strategy,
    resolve_strategy_class,
)

__all__ = [
    "StrategyBinding",
    "StrategyConfig",
    "TradingStrategy",
    "get_registered_strategies",
    "register_strategy",
    "resolve_strategy_class",
]
