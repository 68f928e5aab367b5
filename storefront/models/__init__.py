# Storefront Models

from .cart import (
    CartProduct,
    LineItem,
    CartState,
    AddToCartRequest,
    UpdateCartItemRequest,
    CartResponse,
    CheckoutResponse,
)
from .identity import AuthUser, Profile, DeliveryAddress, BuyerIdentity
from .drop import Drop, DropState, TimeLeft, StockLevel, DropDisplay, DropsOverviewResponse

__all__ = [
    "CartProduct",
    "LineItem",
    "CartState",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "CheckoutResponse",
    "AuthUser",
    "Profile",
    "DeliveryAddress",
    "BuyerIdentity",
    "Drop",
    "DropState",
    "TimeLeft",
    "StockLevel",
    "DropDisplay",
    "DropsOverviewResponse",
]
