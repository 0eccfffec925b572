"""Emergency stop check run at the start of every trade cycle.

Protects against runaway losses from buggy strategies, bugs in the engine
or exchange adapter, and corrupt market data misleading a strategy. If the
emergency stop currency balance drops below the configured floor, trading
stops on all markets and needs manual intervention to restart.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from typing import TYPE_CHECKING

import structlog

from tradeloop.errors import BalanceIntegrityError
from tradeloop.monitoring.alerts import build_critical_alert_body

if TYPE_CHECKING:
    from tradeloop.exchanges.base import ExchangeAdapter
    from tradeloop.monitoring.alerts import AlertSink

logger = structlog.get_logger(__name__)

_DISPLAY_QUANTUM = Decimal("0.00000001")


def format_amount(value: Decimal) -> str:
    """Render an amount with at most 8 decimal places and no trailing zeros."""
    if not value.is_finite():
        return str(value)
    with localcontext() as ctx:
        # integer digits plus the 8 decimal places must fit the precision
        ctx.prec = max(ctx.prec, value.adjusted() + 9)
        text = format(value.quantize(_DISPLAY_QUANTUM, rounding=ROUND_HALF_EVEN), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True)
class EmergencyStopResult:
    breached: bool
    currency: str
    balance: Decimal
    floor: Decimal

    @property
    def passed(self) -> bool:
        return not self.breached


class EmergencyStopChecker:
    """Compares the exchange balance of one currency against a floor."""

    def __init__(
        self,
        exchange: ExchangeAdapter,
        currency: str,
        floor: Decimal,
        alert_sink: AlertSink | None = None,
        alert_subject: str = "",
    ):
        self._exchange = exchange
        self._currency = currency
        self._floor = floor
        self._alert_sink = alert_sink
        self._alert_subject = alert_subject

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def floor(self) -> Decimal:
        return self._floor

    async def check(self) -> EmergencyStopResult:
        """Fetch balances and compare.

        Exchange errors propagate unchanged so the engine's failure policy
        decides between retry and shutdown.

        Raises:
            BalanceIntegrityError: The currency is missing from the balances.
        """
        logger.info("emergency_stop_check_started", currency=self._currency)

        try:
            balances = await self._exchange.get_balance()
        except Exception:
            logger.error(
                "emergency_stop_balance_fetch_failed",
                exchange=self._exchange.name,
                exc_info=True,
            )
            raise

        balance = balances.get(self._currency)
        if balance is None:
            msg = (
                f"Emergency stop check: no balance returned for emergency stop "
                f"currency '{self._currency}'. Balances returned: {balances}"
            )
            logger.error("emergency_stop_currency_missing", currency=self._currency)
            raise BalanceIntegrityError(msg)

        breached = balance < self._floor
        logger.info(
            "emergency_stop_balances",
            currency=self._currency,
            available=format_amount(balance),
            stop_below=format_amount(self._floor),
        )

        if breached:
            msg = (
                f"EMERGENCY STOP triggered! Current emergency stop currency "
                f"[{self._currency}] wallet balance [{format_amount(balance)}] on "
                f"exchange is lower than configured emergency stop balance "
                f"[{format_amount(self._floor)}] {self._currency}"
            )
            logger.critical("emergency_stop_triggered", detail=msg)
            await self._send_alert(msg)
            return EmergencyStopResult(True, self._currency, balance, self._floor)

        logger.info("emergency_stop_check_passed", currency=self._currency)
        return EmergencyStopResult(False, self._currency, balance, self._floor)

    async def _send_alert(self, details: str) -> None:
        if self._alert_sink is None:
            return
        body = build_critical_alert_body(self._exchange.name, details)
        try:
            await self._alert_sink.send(self._alert_subject, body)
        except Exception:
            logger.warning("emergency_stop_alert_failed", exc_info=True)
