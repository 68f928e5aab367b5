"""Cart API routes"""

from typing import Optional

from fastapi import APIRouter, Depends

from ..models.cart import AddToCartRequest, UpdateCartItemRequest, CartResponse
from ..services.cart_store import CartStore
from .deps import get_cart_store

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def cart_response(store: CartStore, message: Optional[str] = None) -> CartResponse:
    return CartResponse(
        items=store.items,
        total_items=store.get_total_items(),
        total_price=store.get_total_price(),
        is_loading=store.is_loading,
        checkout_url=store.checkout_url,
        message=message,
    )


@router.get("", response_model=CartResponse, response_model_by_alias=False)
async def get_cart(store: CartStore = Depends(get_cart_store)):
    """Get the device's cart"""
    return cart_response(store)


@router.post("/items", response_model=CartResponse, response_model_by_alias=False)
async def add_to_cart(
    request: AddToCartRequest,
    store: CartStore = Depends(get_cart_store),
):
    """Add a drop variant to the cart, merging with an existing line"""
    store.add_item(request.to_product(), request.quantity)
    return cart_response(store, message=f"Added {request.quantity}x {request.title} to cart")


@router.put("/items/{variant_id:path}", response_model=CartResponse, response_model_by_alias=False)
async def update_cart_item(
    variant_id: str,
    request: UpdateCartItemRequest,
    store: CartStore = Depends(get_cart_store),
):
    """Set a line item's quantity; zero or less removes it"""
    store.update_quantity(variant_id, request.quantity)
    return cart_response(store, message="Cart updated")


@router.delete("/items/{variant_id:path}", response_model=CartResponse, response_model_by_alias=False)
async def remove_from_cart(
    variant_id: str,
    store: CartStore = Depends(get_cart_store),
):
    """Remove a line item from the cart"""
    store.remove_item(variant_id)
    return cart_response(store, message="Item removed")


@router.delete("", response_model=CartResponse, response_model_by_alias=False)
async def clear_cart(store: CartStore = Depends(get_cart_store)):
    """Clear all items from the cart"""
    store.clear_cart()
    return cart_response(store, message="Cart cleared")
