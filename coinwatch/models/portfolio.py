"""Portfolio holding data model."""

from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from coinwatch.models.alert import ChatId


class PortfolioHolding(BaseModel):
    """An amount of one coin held by an owner."""

    id: str = Field(default_factory=lambda: uuid4().hex, description="Holding ID")
    owner: ChatId = Field(..., description="Owner of the holding")
    symbol: str = Field(..., min_length=1, description="Uppercase asset ticker")
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Number of coins held")

    model_config = {"frozen": True}

    @field_validator("symbol", mode="before")
    @classmethod
    def _upper_symbol(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value
