"""tradeloop: single-exchange trading engine with an emergency-stop circuit breaker."""

__version__ = "0.1.0"
