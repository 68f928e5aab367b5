"""Drop models"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DropState(str, Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    SOLD_OUT = "sold_out"
    ENDED = "ended"


class Drop(BaseModel):
    """A time-boxed, limited-quantity release"""
    id: str
    title_en: str
    title_nl: str
    description_en: Optional[str] = None
    description_nl: Optional[str] = None
    price: Decimal = Field(ge=0)
    quantity_available: int = Field(ge=0)
    quantity_sold: int = 0
    image_url: Optional[str] = None
    shopify_product_id: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None
    is_active: bool = True
    is_public: bool = False

    @field_validator("quantity_sold", mode="before")
    @classmethod
    def default_sold(cls, v):
        return 0 if v is None else v

    @field_validator("is_active", "is_public", mode="before")
    @classmethod
    def default_flag(cls, v):
        return False if v is None else v


class TimeLeft(BaseModel):
    """Countdown broken into display units"""
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @property
    def is_zero(self) -> bool:
        return not (self.days or self.hours or self.minutes or self.seconds)


class StockLevel(BaseModel):
    """Stock indicator for a drop"""
    remaining: int
    percentage_sold: int
    is_low_stock: bool
    is_almost_gone: bool
    sold_out: bool


class DropDisplay(BaseModel):
    """Everything the drop page shows besides the copy"""
    drop: Drop
    state: DropState
    stock: StockLevel
    countdown_target: Optional[datetime] = None
    time_left: Optional[TimeLeft] = None


class DropsOverviewResponse(BaseModel):
    """Live and upcoming drops"""
    live: list[DropDisplay]
    upcoming: list[DropDisplay]
