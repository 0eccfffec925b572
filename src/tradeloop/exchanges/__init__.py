"""Exchange adapters package."""

from tradeloop.exchanges.base import ExchangeAdapter
from tradeloop.exchanges.ccxt_adapter import CcxtExchangeAdapter
from tradeloop.exchanges.factory import ExchangeFactory, register_adapter

__all__ = ["CcxtExchangeAdapter", "ExchangeAdapter", "ExchangeFactory", "register_adapter"]
