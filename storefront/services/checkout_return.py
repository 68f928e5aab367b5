"""
Checkout return handling

Shopify does not send the shopper back with any proof of purchase, so the
return is detected locally: a marker is written when a checkout URL is
issued and the confirmation page clears both the cart and the marker.
Other pages only observe the return.
"""

import logging
from typing import TYPE_CHECKING

from ..core.storage import Storage

if TYPE_CHECKING:
    from .cart_store import CartStore

logger = logging.getLogger(__name__)

CHECKOUT_STARTED_KEY = "checkout_started"

CONFIRMATION_PATH = "/thank-you"

# Pages besides the confirmation page a shopper lands on after leaving Shopify checkout
RETURN_LANDING_PATHS = ("/dashboard", "/drop")


def post_checkout_paths(confirmation_path: str = CONFIRMATION_PATH) -> tuple[str, ...]:
    return (confirmation_path.rstrip("/") or "/", *RETURN_LANDING_PATHS)


class CheckoutFlag:
    """The checkout-in-flight marker; a weak signal, not proof of purchase"""

    def __init__(self, storage: Storage):
        self.storage = storage

    def is_set(self) -> bool:
        return self.storage.get_item(CHECKOUT_STARTED_KEY) is not None

    def set(self) -> None:
        self.storage.set_item(CHECKOUT_STARTED_KEY, "true")

    def clear(self) -> None:
        self.storage.remove_item(CHECKOUT_STARTED_KEY)


class CheckoutReturnReconciler:
    """Runs on every page navigation and detects a return from checkout"""

    def __init__(self, store: "CartStore", confirmation_path: str = CONFIRMATION_PATH):
        self.store = store
        self.flag = CheckoutFlag(store.storage)
        self.post_checkout_paths = post_checkout_paths(confirmation_path)

    def on_navigate(self, path: str) -> bool:
        """
        Report whether this navigation looks like a return from checkout.

        Detection only: clearing is left to the confirmation page so a
        shopper who abandoned checkout keeps their cart.
        """
        if not self.flag.is_set() or self.store.get_total_items() == 0:
            return False

        normalized = path.rstrip("/") or "/"
        if normalized not in self.post_checkout_paths:
            return False

        logger.info(f"Shopper returned from checkout to {normalized} with items still in cart")
        return True


def complete_checkout_return(store: "CartStore") -> None:
    """Mount effect of the confirmation page: empty the cart, drop the marker"""
    store.clear_cart()
    CheckoutFlag(store.storage).clear()
    logger.info("Checkout confirmed, cart cleared")
