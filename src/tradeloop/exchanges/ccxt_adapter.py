"""Exchange adapter backed by ccxt's async client."""

from decimal import Decimal

import ccxt.async_support as ccxt
import structlog

from tradeloop.errors import ConfigurationError, ExchangeApiError, ExchangeNetworkError
from tradeloop.exchanges.base import ExchangeAdapter
from tradeloop.exchanges.factory import register_adapter

logger = structlog.get_logger(__name__)


class CcxtExchangeAdapter(ExchangeAdapter):
    """Balance queries against any exchange ccxt supports."""

    def __init__(
        self,
        exchange_id: str = "binance",
        api_key: str = "",
        secret_key: str = "",
        sandbox: bool = True,
        **kwargs,
    ):
        exchange_class = getattr(ccxt, exchange_id, None)
        if exchange_class is None:
            raise ConfigurationError(f"ccxt does not support exchange: '{exchange_id}'")
        self._exchange_id = exchange_id
        self._exchange = exchange_class(
            {
                "apiKey": api_key,
                "secret": secret_key,
                "enableRateLimit": True,
            }
        )
        if sandbox:
            self._exchange.set_sandbox_mode(True)

    @property
    def name(self) -> str:
        return self._exchange_id

    async def get_balance(self) -> dict[str, Decimal]:
        try:
            balance = await self._exchange.fetch_balance()
        except ccxt.NetworkError as e:
            raise ExchangeNetworkError(f"Network error fetching balance: {e}") from e
        except ccxt.ExchangeError as e:
            raise ExchangeApiError(f"Exchange error fetching balance: {e}") from e

        free = balance.get("free")
        if not isinstance(free, dict):
            raise ExchangeApiError(
                f"Malformed balance response from {self._exchange_id}: missing 'free' section"
            )
        # str() first so float amounts keep their printed digits
        return {
            currency: Decimal(str(amount))
            for currency, amount in free.items()
            if amount is not None
        }

    async def close(self) -> None:
        await self._exchange.close()
        logger.debug("exchange_closed", exchange=self._exchange_id)


register_adapter("ccxt", CcxtExchangeAdapter)
