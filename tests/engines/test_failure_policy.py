"""Tests for trade cycle failure classification."""

import asyncio

import ccxt
import pytest

from tradeloop.engines.failure_policy import (
    FATAL_ERROR_MESSAGES,
    CycleOutcome,
    FailureKind,
    classify_failure,
)
from tradeloop.errors import (
    BalanceIntegrityError,
    ConfigurationError,
    ExchangeApiError,
    ExchangeNetworkError,
    StrategyError,
)


class TestClassifyFailure:
    @pytest.mark.parametrize(
        "exc",
        [
            ExchangeNetworkError("reset"),
            ConnectionError("refused"),
            TimeoutError("slow"),
            asyncio.TimeoutError(),
            ccxt.RequestTimeout("timeout"),
            ccxt.NetworkError("unreachable"),
            ccxt.DDoSProtection("slow down"),
        ],
    )
    def test_transient(self, exc):
        assert classify_failure(exc) == FailureKind.TRANSIENT

    def test_adapter(self):
        assert classify_failure(ExchangeApiError("auth")) == FailureKind.FATAL_ADAPTER

    @pytest.mark.parametrize(
        "exc",
        [ccxt.AuthenticationError("bad key"), ccxt.InsufficientFunds("empty"), ccxt.ExchangeError("x")],
    )
    def test_raw_ccxt_exchange_error_is_adapter_fault(self, exc):
        assert classify_failure(exc) == FailureKind.FATAL_ADAPTER

    def test_strategy(self):
        assert classify_failure(StrategyError("oops")) == FailureKind.FATAL_STRATEGY

    @pytest.mark.parametrize(
        "exc",
        [
            BalanceIntegrityError("missing BTC"),
            ValueError("bad"),
            ConfigurationError("bad config"),
            ZeroDivisionError(),
        ],
    )
    def test_unexpected(self, exc):
        assert classify_failure(exc) == FailureKind.FATAL_UNEXPECTED


class TestFailureKind:
    def test_only_transient_is_recoverable(self):
        assert not FailureKind.TRANSIENT.is_fatal
        for kind in FailureKind:
            if kind is not FailureKind.TRANSIENT:
                assert kind.is_fatal

    def test_fatal_messages(self):
        assert "Exchange Adapter" in FATAL_ERROR_MESSAGES[FailureKind.FATAL_ADAPTER]
        assert "Trading Strategy" in FATAL_ERROR_MESSAGES[FailureKind.FATAL_STRATEGY]
        assert "unexpected" in FATAL_ERROR_MESSAGES[FailureKind.FATAL_UNEXPECTED]


class TestCycleOutcome:
    def test_completed(self):
        outcome = CycleOutcome.completed()
        assert outcome.ok
        assert not outcome.is_fatal
        assert outcome.error is None

    def test_breached(self):
        outcome = CycleOutcome.breached()
        assert not outcome.ok
        assert outcome.is_fatal
        assert outcome.failure == FailureKind.EMERGENCY_BREACH

    def test_failed_transient(self):
        error = ExchangeNetworkError("reset")
        outcome = CycleOutcome.failed(error)
        assert outcome.failure == FailureKind.TRANSIENT
        assert outcome.error is error
        assert not outcome.ok
        assert not outcome.is_fatal

    def test_failed_strategy(self):
        outcome = CycleOutcome.failed(StrategyError("x"))
        assert outcome.is_fatal
