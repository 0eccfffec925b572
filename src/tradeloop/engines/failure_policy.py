"""Classification of trade cycle failures into retry or shutdown.

Network trouble talking to the exchange is expected background noise: the
cycle is skipped and retried after the normal interval. Everything else
(exchange integration faults, strategy faults, unexpected errors, a blown
emergency stop) shuts the engine down.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import ccxt

from tradeloop.errors import ExchangeApiError, StrategyError


class FailureKind(str, Enum):
    """Why a trade cycle did not complete."""

    TRANSIENT = "transient"
    FATAL_ADAPTER = "fatal_adapter"
    FATAL_STRATEGY = "fatal_strategy"
    FATAL_UNEXPECTED = "fatal_unexpected"
    EMERGENCY_BREACH = "emergency_breach"

    @property
    def is_fatal(self) -> bool:
        return self is not FailureKind.TRANSIENT


FATAL_ERROR_MESSAGES: dict[FailureKind, str] = {
    FailureKind.FATAL_ADAPTER: "A FATAL error has occurred in Exchange Adapter!",
    FailureKind.FATAL_STRATEGY: "A FATAL error has occurred in Trading Strategy!",
    FailureKind.FATAL_UNEXPECTED: (
        "An unexpected FATAL error has occurred in Exchange Adapter or Trading Strategy!"
    ),
}


def classify_failure(exc: BaseException) -> FailureKind:
    """Map an exception raised inside a trade cycle to a FailureKind."""
    # TimeoutError also covers asyncio.TimeoutError
    if isinstance(exc, (ConnectionError, TimeoutError, ccxt.NetworkError)):
        return FailureKind.TRANSIENT
    # strategies talk to ccxt directly, so its errors can arrive unwrapped
    if isinstance(exc, (ExchangeApiError, ccxt.ExchangeError)):
        return FailureKind.FATAL_ADAPTER
    if isinstance(exc, StrategyError):
        return FailureKind.FATAL_STRATEGY
    return FailureKind.FATAL_UNEXPECTED


@dataclass(frozen=True)
class CycleOutcome:
    """Result of one trade cycle: completed, or the kind of failure that ended it."""

    failure: FailureKind | None = None
    error: BaseException | None = None

    @classmethod
    def completed(cls) -> CycleOutcome:
        return cls()

    @classmethod
    def breached(cls) -> CycleOutcome:
        return cls(failure=FailureKind.EMERGENCY_BREACH)

    @classmethod
    def failed(cls, exc: BaseException) -> CycleOutcome:
        return cls(failure=classify_failure(exc), error=exc)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def is_fatal(self) -> bool:
        return self.failure is not None and self.failure.is_fatal
