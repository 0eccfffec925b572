"""Tests for the Market model."""

import pytest
from pydantic import ValidationError

from tradeloop.models import Market


def make_market(**kwargs):
    defaults = {
        "name": "BTC/USD",
        "id": "btcusd",
        "base_currency": "BTC",
        "counter_currency": "USD",
    }
    defaults.update(kwargs)
    return Market(**defaults)


class TestMarket:
    def test_fields(self):
        market = make_market()
        assert market.name == "BTC/USD"
        assert market.id == "btcusd"
        assert market.base_currency == "BTC"
        assert market.counter_currency == "USD"

    def test_equality_uses_all_fields(self):
        assert make_market() == make_market()
        assert make_market() != make_market(name="Bitcoin/USD")
        assert make_market() != make_market(counter_currency="EUR")

    def test_hashable_for_duplicate_detection(self):
        markets = {make_market(), make_market(), make_market(id="btceur")}
        assert len(markets) == 2

    def test_frozen(self):
        market = make_market()
        with pytest.raises(ValidationError):
            market.id = "ethusd"

    def test_currencies_upper_cased(self):
        market = make_market(base_currency="btc", counter_currency="usd")
        assert market.base_currency == "BTC"
        assert market.counter_currency == "USD"

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            make_market(id="")

    def test_str(self):
        assert str(make_market()) == "BTC/USD (btcusd) BTC/USD"
