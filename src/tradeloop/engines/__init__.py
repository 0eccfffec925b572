"""Trading engine: control loop, emergency stop and failure policy."""

from tradeloop.engines.emergency_stop import EmergencyStopChecker, EmergencyStopResult
from tradeloop.engines.failure_policy import (
    FATAL_ERROR_MESSAGES,
    CycleOutcome,
    FailureKind,
    classify_failure,
)
from tradeloop.engines.run_state import RunState, RunStateGuard
from tradeloop.engines.trading_engine import TradingEngine

__all__ = [
    "FATAL_ERROR_MESSAGES",
    "CycleOutcome",
    "EmergencyStopChecker",
    "EmergencyStopResult",
    "FailureKind",
    "RunState",
    "RunStateGuard",
    "TradingEngine",
    "classify_failure",
]
