"""Abstract exchange adapter interface."""

from abc import ABC, abstractmethod
from decimal import Decimal


class ExchangeAdapter(ABC):
    """Abstract base class for exchange adapters.

    All methods are async to support non-blocking I/O. Connectivity failures
    must surface as ExchangeNetworkError (or ConnectionError / TimeoutError);
    anything else the exchange integration cannot handle as ExchangeApiError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the exchange name."""

    @abstractmethod
    async def get_balance(self) -> dict[str, Decimal]:
        """Get available balances. Returns {currency: available_amount}.

        Currencies with a zero balance are included.
        """

    async def close(self) -> None:
        """Clean up resources. Override if needed."""
