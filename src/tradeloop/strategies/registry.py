"""Strategy class registry.

Strategies are looked up by registered name first, then by a
``package.module:ClassName`` import path.
"""

import importlib
from typing import Callable, TypeVar

from tradeloop.errors import ConfigurationError
from tradeloop.strategies.base import TradingStrategy

S = TypeVar("S", bound=type[TradingStrategy])

_strategy_registry: dict[str, type[TradingStrategy]] = {}


def register_strategy(name: str) -> Callable[[S], S]:
    """Class decorator registering a strategy under ``name``.

        @register_strategy("scalper")
        class ScalperStrategy(TradingStrategy):
            ...
    """

    def decorator(cls: S) -> S:
        _strategy_registry[name.lower()] = cls
        return cls

    return decorator


def get_registered_strategies() -> list[str]:
    """Return list of registered strategy names."""
    return list(_strategy_registry.keys())


def _import_class(path: str) -> type:
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(
            f"Strategy class path must look like 'package.module:ClassName', got '{path}'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import strategy module '{module_name}': {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ConfigurationError(f"Module '{module_name}' has no attribute '{attr}'") from e


def resolve_strategy_class(class_name: str) -> type[TradingStrategy]:
    """Find the strategy class for a configured class name.

    Raises:
        ConfigurationError: If the name is unknown or does not name a TradingStrategy.
    """
    cls = _strategy_registry.get(class_name.lower())
    if cls is None:
        if ":" not in class_name:
            available = ", ".join(get_registered_strategies()) or "none"
            raise ConfigurationError(
                f"Unknown strategy: '{class_name}'. Registered: {available}"
            )
        cls = _import_class(class_name)

    if not (isinstance(cls, type) and issubclass(cls, TradingStrategy)):
        raise ConfigurationError(f"'{class_name}' is not a TradingStrategy subclass")
    return cls
