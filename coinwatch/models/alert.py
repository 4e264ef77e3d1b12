"""Alert data model."""

from datetime import datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field, RootModel, field_validator


Condition = Literal["above", "below"]

VALID_CONDITIONS: tuple[str, ...] = ("above", "below")


class ChatId(RootModel[str]):
    """Opaque identifier of a notification destination.

    Integer and string chat ids compare equal once normalized, so
    ``ChatId(42) == ChatId("42")``.
    """

    model_config = {"frozen": True}

    @field_validator("root", mode="before")
    @classmethod
    def _normalize(cls, value):
        if isinstance(value, ChatId):
            return value.root
        if isinstance(value, bool):
            raise ValueError("chat id must be a string or an integer")
        if isinstance(value, int):
            value = str(value)
        if not isinstance(value, str):
            raise ValueError("chat id must be a string or an integer")
        value = value.strip()
        if not value:
            raise ValueError("chat id must not be empty")
        return value

    def __str__(self) -> str:
        return self.root


def _new_alert_id() -> str:
    return uuid4().hex


class Alert(BaseModel):
    """A standing instruction to notify ``owner`` when ``symbol`` crosses a price."""

    id: str = Field(default_factory=_new_alert_id, min_length=1, description="Alert ID")
    owner: ChatId = Field(..., description="Destination to notify")
    symbol: str = Field(..., min_length=1, description="Uppercase asset ticker")
    target_price: float = Field(..., gt=0, allow_inf_nan=False, description="Threshold price")
    condition: Condition = Field(..., description="Crossing direction")
    triggered: bool = Field(default=False, description="Whether alert has triggered")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Alert creation timestamp"
    )

    model_config = {"frozen": True}

    @field_validator("symbol", mode="before")
    @classmethod
    def _upper_symbol(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("condition", mode="before")
    @classmethod
    def _lower_condition(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def is_crossed(self, price: float) -> bool:
        """Check whether ``price`` satisfies the alert condition.

        Both directions are inclusive: a price equal to the target counts.
        """
        if self.condition == "above":
            return price >= self.target_price
        return price <= self.target_price

    @property
    def active(self) -> bool:
        return not self.triggered

    def describe(self) -> str:
        """Short human readable form, e.g. ``BTC above 50000``."""
        return f"{self.symbol} {self.condition} {self.target_price:g}"
