"""Tests for the exchange adapter factory."""

from decimal import Decimal

import pytest

from tradeloop.errors import ConfigurationError
from tradeloop.exchanges import CcxtExchangeAdapter, ExchangeAdapter, ExchangeFactory, register_adapter
from tradeloop.exchanges.factory import _adapter_registry


class StubAdapter(ExchangeAdapter):
    def __init__(self, **kwargs):
        self.kwargs = kwargs

    @property
    def name(self) -> str:
        return "stub"

    async def get_balance(self) -> dict[str, Decimal]:
        return {}


@pytest.fixture
def stub_registered():
    register_adapter("Stub", StubAdapter)
    yield
    _adapter_registry.pop("stub", None)


class TestExchangeFactory:
    def test_ccxt_registered_by_default(self):
        assert "ccxt" in ExchangeFactory.available()
        assert _adapter_registry["ccxt"] is CcxtExchangeAdapter

    def test_create_passes_kwargs(self, stub_registered):
        adapter = ExchangeFactory.create("STUB", exchange_id="x", api_key="k")
        assert isinstance(adapter, StubAdapter)
        assert adapter.kwargs == {"exchange_id": "x", "api_key": "k"}

    def test_unknown_adapter(self):
        with pytest.raises(ConfigurationError, match="Unknown exchange adapter: 'nope'"):
            ExchangeFactory.create("nope")

    def test_unknown_adapter_lists_available(self, stub_registered):
        with pytest.raises(ConfigurationError, match=r"Available: ccxt, stub$"):
            ExchangeFactory.create("kraken-direct")

    def test_unknown_adapter_is_value_error(self):
        with pytest.raises(ValueError):
            ExchangeFactory.create("nope")

    @pytest.mark.asyncio
    async def test_default_close_is_noop(self, stub_registered):
        adapter = ExchangeFactory.create("stub")
        await adapter.close()
