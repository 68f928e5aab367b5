# Storefront Routes

from .cart import router as cart_router
from .checkout import router as checkout_router, thank_you
from .drops import router as drops_router

__all__ = ["cart_router", "checkout_router", "drops_router", "thank_you"]
