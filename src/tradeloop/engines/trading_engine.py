"""The main trading engine.

The engine fails hard and fast whenever something unexpected happens: the
operator is alerted with details of the problem and the engine stops. The
only failures it rides out are network errors talking to the exchange, which
are logged and retried on the next trade cycle.

Strategies run one after another on the engine's task, never concurrently.
The engine trades on one exchange and runs one strategy per market.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog

from tradeloop.engines.emergency_stop import EmergencyStopChecker
from tradeloop.engines.failure_policy import (
    FATAL_ERROR_MESSAGES,
    CycleOutcome,
    FailureKind,
)
from tradeloop.engines.run_state import RunState, RunStateGuard
from tradeloop.errors import EngineAlreadyRunningError
from tradeloop.monitoring.alerts import (
    build_critical_alert_body,
    critical_alert_subject,
    format_failure_details,
)

if TYPE_CHECKING:
    from tradeloop.config import EngineConfig
    from tradeloop.exchanges.base import ExchangeAdapter
    from tradeloop.monitoring.alerts import AlertSink
    from tradeloop.strategies.base import StrategyBinding

logger = structlog.get_logger(__name__)


class TradingEngine:
    """Runs the trade cycle loop: emergency stop check, strategies, sleep."""

    def __init__(
        self,
        config: EngineConfig,
        exchange: ExchangeAdapter,
        bindings: Sequence[StrategyBinding],
        alert_sink: AlertSink | None = None,
        bot_name: str = "tradeloop",
    ):
        self._config = config
        self._exchange = exchange
        self._bindings = tuple(bindings)
        self._alert_sink = alert_sink
        self._alert_subject = critical_alert_subject(bot_name)
        self._emergency_stop = EmergencyStopChecker(
            exchange=exchange,
            currency=config.emergency_stop_currency,
            floor=config.emergency_stop_balance,
            alert_sink=alert_sink,
            alert_subject=self._alert_subject,
        )

        self._run_state = RunStateGuard()
        # Guards keep-alive and the wake-up handles together with the run state
        self._control_lock = threading.Lock()
        self._keep_alive = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wake: asyncio.Event | None = None
        self._engine_task: asyncio.Task | None = None

        self._cycle_count = 0
        self._failed_cycle_count = 0
        self._last_outcome: CycleOutcome | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._run_state.state

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def bindings(self) -> tuple[StrategyBinding, ...]:
        return self._bindings

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def failed_cycle_count(self) -> int:
        return self._failed_cycle_count

    @property
    def last_outcome(self) -> CycleOutcome | None:
        return self._last_outcome

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Run the engine until it stops.

        Returns normally once the main loop exits, including after a fatal
        error or an emergency stop.

        Raises:
            EngineAlreadyRunningError: The engine is already running. Nothing is changed.
        """
        with self._control_lock:
            try:
                self._run_state.transition(RunState.RUNNING)
            except EngineAlreadyRunningError:
                logger.error("engine_start_rejected", reason="already_running")
                raise
            self._keep_alive = True
            self._loop = asyncio.get_running_loop()
            self._wake = asyncio.Event()
            # kept so shutdown() can report which task it is stopping
            self._engine_task = asyncio.current_task()
            self._cycle_count = 0
            self._failed_cycle_count = 0
            self._last_outcome = None

        logger.info(
            "engine_starting",
            exchange=self._exchange.name,
            strategies=len(self._bindings),
            trade_cycle_interval=self._config.trade_cycle_interval,
        )
        try:
            await self._run_main_loop()
        finally:
            logger.critical("engine_shutting_down_now", cycles=self._cycle_count)
            with self._control_lock:
                self._keep_alive = False
                self._run_state.transition(RunState.STOPPED)

    def shutdown(self) -> None:
        """Ask the engine to stop. Safe to call from any thread; never blocks.

        Wakes the engine if it is sleeping between trade cycles. Does nothing
        if the engine is not running.
        """
        with self._control_lock:
            if not self._run_state.is_running:
                logger.info("shutdown_ignored", state=self._run_state.state.value)
                return
            task_name = self._engine_task.get_name() if self._engine_task else None
            logger.info("shutdown_requested", engine_task=task_name)
            self._keep_alive = False
            loop, wake = self._loop, self._wake

        try:
            loop.call_soon_threadsafe(wake.set)
        except RuntimeError:
            # Event loop already closed: the engine has finished by itself
            logger.debug("shutdown_wake_skipped_loop_closed")

    def is_running(self) -> bool:
        return self._run_state.is_running

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def _run_main_loop(self) -> None:
        while self._keep_alive:
            outcome = await self._run_cycle()
            self._last_outcome = outcome
            self._cycle_count += 1

            if outcome.ok:
                logger.info(
                    "trade_cycle_sleeping",
                    seconds=self._config.trade_cycle_interval,
                )
                await self._sleep_until_next_cycle()
            elif outcome.failure is FailureKind.TRANSIENT:
                self._failed_cycle_count += 1
                logger.error(
                    "exchange_network_error",
                    retry_in_seconds=self._config.trade_cycle_interval,
                    exc_info=outcome.error,
                )
                await self._sleep_until_next_cycle()
            elif outcome.failure is FailureKind.EMERGENCY_BREACH:
                # already logged and alerted by the emergency stop check
                self._keep_alive = False
            else:
                await self._handle_fatal(outcome)

    async def _run_cycle(self) -> CycleOutcome:
        logger.info("trade_cycle_started", cycle=self._cycle_count + 1)
        try:
            # The emergency stop check MUST run before any strategy
            result = await self._emergency_stop.check()
            if result.breached:
                return CycleOutcome.breached()

            for binding in self._bindings:
                logger.info(
                    "executing_strategy",
                    strategy=binding.strategy.name,
                    strategy_id=binding.strategy_id,
                    market=binding.market.id,
                )
                await binding.strategy.execute()
        except Exception as e:
            return CycleOutcome.failed(e)
        return CycleOutcome.completed()

    async def _sleep_until_next_cycle(self) -> None:
        if not self._keep_alive:
            return
        try:
            await asyncio.wait_for(
                self._wake.wait(), timeout=self._config.trade_cycle_interval
            )
        except asyncio.TimeoutError:
            return
        logger.warning("trade_cycle_sleep_interrupted")

    async def _handle_fatal(self, outcome: CycleOutcome) -> None:
        message = FATAL_ERROR_MESSAGES[outcome.failure]
        logger.critical(
            "engine_fatal_error",
            kind=outcome.failure.value,
            detail=message,
            exc_info=outcome.error,
        )
        details = format_failure_details(message, outcome.error)
        await self._send_alert(details, outcome.error)
        self._keep_alive = False

    async def _send_alert(self, details: str, exc: BaseException | None) -> None:
        if self._alert_sink is None:
            return
        body = build_critical_alert_body(self._exchange.name, details, exc)
        try:
            await self._alert_sink.send(self._alert_subject, body)
        except Exception:
            logger.warning("engine_alert_failed", exc_info=True)

    def get_status_dict(self) -> dict[str, Any]:
        """Build a status summary for operators."""
        last = self._last_outcome
        return {
            "state": self.state.value,
            "exchange": self._exchange.name,
            "cycle_count": self._cycle_count,
            "failed_cycle_count": self._failed_cycle_count,
            "last_failure": last.failure.value if last and last.failure else None,
            "trade_cycle_interval": self._config.trade_cycle_interval,
            "emergency_stop_currency": self._config.emergency_stop_currency,
            "emergency_stop_balance": str(self._config.emergency_stop_balance),
            "strategies": [
                {
                    "id": b.strategy_id,
                    "strategy": b.strategy.name,
                    "market": b.market.id,
                }
                for b in self._bindings
            ],
        }
