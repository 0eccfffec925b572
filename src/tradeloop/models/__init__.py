"""Core data models."""

from tradeloop.models.base import FrozenModel
from tradeloop.models.market import Market

__all__ = ["FrozenModel", "Market"]
