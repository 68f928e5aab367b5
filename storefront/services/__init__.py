# Storefront services

from .shopify import (
    StorefrontClient,
    CheckoutLine,
    CheckoutError,
    GatewayError,
    GraphQLError,
    UserError,
    MissingCheckoutUrlError,
)
from .supabase import SupabaseClient, SupabaseError
from .buyer_identity import BuyerIdentityResolver, IdentityResolution, build_buyer_identity
from .cart_store import CartStore, CartError, EmptyCartError, CheckoutInProgressError
from .checkout_return import CheckoutFlag, CheckoutReturnReconciler, complete_checkout_return

__all__ = [
    "StorefrontClient",
    "CheckoutLine",
    "CheckoutError",
    "GatewayError",
    "GraphQLError",
    "UserError",
    "MissingCheckoutUrlError",
    "SupabaseClient",
    "SupabaseError",
    "BuyerIdentityResolver",
    "IdentityResolution",
    "build_buyer_identity",
    "CartStore",
    "CartError",
    "EmptyCartError",
    "CheckoutInProgressError",
    "CheckoutFlag",
    "CheckoutReturnReconciler",
    "complete_checkout_return",
]
