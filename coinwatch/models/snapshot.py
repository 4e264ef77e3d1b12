"""Price snapshot data model."""

from typing import Optional

from pydantic import BaseModel, Field


class PriceSnapshot(BaseModel):
    """Current price and 24h statistics for one symbol.

    Snapshots are produced fresh for every lookup and never cached.
    """

    symbol: str = Field(..., min_length=1, description="Uppercase asset ticker")
    price: float = Field(..., ge=0, description="Last traded price")
    change_24h: float = Field(default=0.0, description="Absolute 24h change")
    change_percent_24h: float = Field(default=0.0, description="Percentage 24h change")
    volume_24h: float = Field(default=0.0, ge=0, description="24h base asset volume")
    high_24h: float = Field(default=0.0, ge=0, description="24h high")
    low_24h: float = Field(default=0.0, ge=0, description="24h low")
    quote_volume_24h: Optional[float] = Field(
        default=None, ge=0, description="24h volume in the quote asset"
    )

    model_config = {"frozen": True}
