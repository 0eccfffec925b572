"""Base trading strategy interface and strategy binding."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tradeloop.exchanges.base import ExchangeAdapter
    from tradeloop.models import Market


class StrategyConfig(Mapping[str, str]):
    """Read-only key/value configuration handed to a strategy."""

    def __init__(self, items: Mapping[str, str] | None = None):
        self._items = MappingProxyType(dict(items or {}))

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"StrategyConfig({dict(self._items)!r})"


class TradingStrategy(ABC):
    """Abstract base class for trading strategies.

    A strategy is bound to one exchange, one market and one configuration
    when it is created, and is executed once per trade cycle.
    """

    def __init__(
        self,
        exchange: ExchangeAdapter,
        market: Market,
        config: StrategyConfig,
    ):
        self._exchange = exchange
        self._market = market
        self._config = config

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def exchange(self) -> ExchangeAdapter:
        return self._exchange

    @property
    def market(self) -> Market:
        return self._market

    @property
    def config(self) -> StrategyConfig:
        return self._config

    @abstractmethod
    async def execute(self) -> None:
        """Run one trade cycle for this strategy's market.

        Raise StrategyError when the strategy cannot continue. Exchange
        errors may be left to propagate.
        """


@dataclass(frozen=True)
class StrategyBinding:
    """One strategy instance and the market and config it was created for."""

    strategy_id: str
    strategy: TradingStrategy
    market: Market
    config: StrategyConfig
