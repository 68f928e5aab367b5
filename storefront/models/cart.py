"""Cart models"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CartProduct(BaseModel):
    """A purchasable drop variant, before a quantity is chosen"""
    drop_id: str
    variant_id: str
    title: str
    price: Decimal = Field(ge=0)
    image_url: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LineItem(CartProduct):
    """One variant and its quantity within a cart"""
    quantity: int = Field(ge=1)


class CartState(BaseModel):
    """Persisted cart record"""
    items: list[LineItem] = []
    is_loading: bool = False
    checkout_url: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AddToCartRequest(BaseModel):
    """Request to add a drop variant to the cart"""
    drop_id: str
    variant_id: str
    title: str
    price: Decimal = Field(ge=0)
    image_url: Optional[str] = None
    quantity: int = Field(default=1, gt=0)

    def to_product(self) -> CartProduct:
        return CartProduct(
            drop_id=self.drop_id,
            variant_id=self.variant_id,
            title=self.title,
            price=self.price,
            image_url=self.image_url,
        )


class UpdateCartItemRequest(BaseModel):
    """Request to set a line item's quantity; zero or less removes it"""
    quantity: int


class CartResponse(BaseModel):
    """Cart API response, serialized with field names rather than the storage aliases"""
    items: list[LineItem]
    total_items: int
    total_price: Decimal
    is_loading: bool = False
    checkout_url: Optional[str] = None
    message: Optional[str] = None


class CheckoutResponse(BaseModel):
    """Checkout API response"""
    checkout_url: str
