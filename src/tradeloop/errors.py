"""Exception types raised by collaborators and by the engine core."""


class TradeLoopError(Exception):
    """Base class for all tradeloop errors."""


class ExchangeNetworkError(TradeLoopError, ConnectionError):
    """Connectivity failure talking to the exchange. Expected to clear by the next cycle."""


class ExchangeApiError(TradeLoopError):
    """Structural failure in the exchange integration (bad response, auth, protocol)."""


class StrategyError(TradeLoopError):
    """Raised by trading strategy logic when it cannot continue."""


class BalanceIntegrityError(TradeLoopError):
    """The exchange did not report a balance for a currency the operator configured."""


class EngineAlreadyRunningError(TradeLoopError, RuntimeError):
    """start() was called while the engine is already running."""


class ConfigurationError(TradeLoopError, ValueError):
    """Invalid market, strategy or exchange configuration."""
