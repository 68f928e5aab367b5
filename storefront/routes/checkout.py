"""Checkout handoff routes"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from ..models.cart import CheckoutResponse
from ..services.cart_store import CartStore, EmptyCartError, CheckoutInProgressError
from ..services.buyer_identity import BuyerIdentityResolver
from ..services.checkout_return import complete_checkout_return
from ..services.shopify import CheckoutError
from .deps import get_cart_store, get_identity_resolver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Checkout"])


@router.post("/api/checkout", response_model=CheckoutResponse)
async def create_checkout(
    store: CartStore = Depends(get_cart_store),
    resolver: BuyerIdentityResolver = Depends(get_identity_resolver),
):
    """
    Create a Shopify checkout for the cart.

    The client redirects the shopper to the returned URL. The cart is
    kept until the shopper reaches the confirmation page.
    """
    try:
        checkout_url = await store.create_checkout(resolver)
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CheckoutInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CheckoutError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return CheckoutResponse(checkout_url=checkout_url)


async def thank_you(store: CartStore = Depends(get_cart_store)):
    """
    Order confirmation page: the shopper is back from a completed checkout.

    Mounted by the app at the configured confirmation path.
    """
    complete_checkout_return(store)
    return {
        "title": "Thank you for your order!",
        "subtitle": "You will receive a confirmation email shortly.",
        "links": {
            "orders": "/dashboard",
            "drop": "/drop",
        },
    }
