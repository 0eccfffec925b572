"""Market data model."""

from pydantic import Field, field_validator

from tradeloop.models.base import FrozenModel


class Market(FrozenModel):
    """A market traded on the exchange, e.g. BTC/USD.

    Equality and hashing cover every field, so two markets configured with the
    same label, id and currencies compare equal.
    """

    name: str = Field(min_length=1)
    id: str = Field(min_length=1)
    base_currency: str = Field(min_length=1)
    counter_currency: str = Field(min_length=1)

    @field_validator("base_currency", "counter_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    def __str__(self) -> str:
        return f"{self.name} ({self.id}) {self.base_currency}/{self.counter_currency}"
