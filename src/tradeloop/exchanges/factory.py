"""Exchange factory for creating adapter instances."""

from typing import Any

from tradeloop.errors import ConfigurationError
from tradeloop.exchanges.base import ExchangeAdapter

# Registry of exchange adapter classes
_adapter_registry: dict[str, type[ExchangeAdapter]] = {}


def register_adapter(name: str, adapter_class: type[ExchangeAdapter]) -> None:
    """Register an exchange adapter class."""
    _adapter_registry[name.lower()] = adapter_class


class ExchangeFactory:
    """Factory for creating exchange adapter instances."""

    @staticmethod
    def create(name: str, **kwargs: Any) -> ExchangeAdapter:
        """Create an exchange adapter by name.

        Args:
            name: Registered adapter name (e.g., 'ccxt')
            **kwargs: Configuration passed to the adapter constructor

        Returns:
            ExchangeAdapter instance

        Raises:
            ConfigurationError: If the adapter name is not registered
        """
        adapter_class = _adapter_registry.get(name.lower())
        if adapter_class is None:
            available = ", ".join(ExchangeFactory.available()) or "none"
            raise ConfigurationError(
                f"Unknown exchange adapter: '{name}'. Available: {available}"
            )
        return adapter_class(**kwargs)

    @staticmethod
    def available() -> list[str]:
        """Return list of available exchange adapters."""
        return sorted(_adapter_registry)
