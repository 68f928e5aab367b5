"""
Cart store

The shopper's cart: line items merged by variant, persisted to device
storage after every mutation, and handed off to Shopify checkout.
"""

import json
import logging
from decimal import Decimal
from typing import Optional, Awaitable, Callable, Protocol, Iterable
from urllib.parse import urlsplit

from pydantic import ValidationError

from ..core.storage import Storage
from ..models.cart import CartProduct, LineItem, CartState
from ..models.identity import BuyerIdentity
from .buyer_identity import IdentityResolution
from .checkout_return import CheckoutFlag
from .shopify import CheckoutLine

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "trgc-cart"
CART_STORAGE_VERSION = 0

IdentityResolver = Callable[[], Awaitable[IdentityResolution]]


class CheckoutClient(Protocol):
    async def create_checkout(
        self,
        lines: Iterable[CheckoutLine],
        buyer_identity: Optional[BuyerIdentity] = None,
    ) -> str:
        ...


class CartError(Exception):
    """Base exception for cart operations"""
    pass


class EmptyCartError(CartError):
    """Raised when checking out a cart with no items"""

    def __init__(self):
        super().__init__("Cannot checkout an empty cart")


class CheckoutInProgressError(CartError):
    """Raised when a checkout session is already being created for this cart"""

    def __init__(self):
        super().__init__("A checkout is already in progress")


class CartStore:
    """Cart state for a single device"""

    def __init__(
        self,
        storage: Storage,
        checkout_client: CheckoutClient,
        identity_resolver: Optional[IdentityResolver] = None,
    ):
        self.storage = storage
        self.checkout_client = checkout_client
        self.identity_resolver = identity_resolver
        self.checkout_flag = CheckoutFlag(storage)
        self._state = self._rehydrate()

    # ==================== Persistence ====================

    def _rehydrate(self) -> CartState:
        raw = self.storage.get_item(CART_STORAGE_KEY)
        if raw is None:
            return CartState()

        try:
            envelope = json.loads(raw)
            state = CartState.model_validate(envelope.get("state", {}))
        except (ValueError, AttributeError, ValidationError) as e:
            logger.warning(f"Discarding unreadable cart record: {e}")
            return CartState()

        # Nothing can still be in flight after a reload
        state.is_loading = False
        return state

    def _persist(self) -> None:
        envelope = {
            "state": self._state.model_dump(mode="json", by_alias=True),
            "version": CART_STORAGE_VERSION,
        }
        self.storage.set_item(CART_STORAGE_KEY, json.dumps(envelope))

    # ==================== Reads ====================

    @property
    def items(self) -> list[LineItem]:
        return list(self._state.items)

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def checkout_url(self) -> Optional[str]:
        return self._state.checkout_url

    def get_item(self, variant_id: str) -> Optional[LineItem]:
        return next((i for i in self._state.items if i.variant_id == variant_id), None)

    def get_total_items(self) -> int:
        return sum(item.quantity for item in self._state.items)

    def get_total_price(self) -> Decimal:
        return sum((item.price * item.quantity for item in self._state.items), Decimal("0"))

    # ==================== Mutations ====================

    def add_item(self, product: CartProduct, quantity: int = 1) -> None:
        """Add a variant, incrementing its quantity if already in the cart"""
        if quantity < 1:
            raise ValueError(f"Quantity must be at least 1, got {quantity}")

        existing = self.get_item(product.variant_id)
        if existing:
            self._state.items = [
                i.model_copy(update={"quantity": i.quantity + quantity})
                if i.variant_id == product.variant_id
                else i
                for i in self._state.items
            ]
        else:
            self._state.items = [
                *self._state.items,
                LineItem(**product.model_dump(exclude={"quantity"}), quantity=quantity),
            ]
        self._persist()

    def update_quantity(self, variant_id: str, quantity: int) -> None:
        """Set a line item's quantity exactly; zero or less removes it"""
        if quantity <= 0:
            self.remove_item(variant_id)
            return

        self._state.items = [
            i.model_copy(update={"quantity": quantity}) if i.variant_id == variant_id else i
            for i in self._state.items
        ]
        self._persist()

    def remove_item(self, variant_id: str) -> None:
        self._state.items = [i for i in self._state.items if i.variant_id != variant_id]
        self._persist()

    def clear_cart(self) -> None:
        """Empty the cart. The checkout marker is left alone."""
        self._state.items = []
        self._state.checkout_url = None
        self._persist()

    def _set_loading(self, loading: bool) -> None:
        self._state.is_loading = loading
        self._persist()

    # ==================== Checkout ====================

    async def _resolve_identity(self, resolver: Optional[IdentityResolver]) -> Optional[BuyerIdentity]:
        if resolver is None:
            return None
        try:
            resolution = await resolver()
        except Exception as e:
            # resolvers are not supposed to raise; checkout goes ahead regardless
            logger.warning(f"Buyer identity resolver raised: {e}")
            return None
        if resolution.diagnostic:
            logger.info(f"Checkout without buyer identity: {resolution.diagnostic}")
        return resolution.identity

    async def create_checkout(self, identity_resolver: Optional[IdentityResolver] = None) -> str:
        """
        Create a Shopify checkout for the current items.

        Args:
            identity_resolver: Overrides the store's resolver for this call

        Returns:
            Checkout URL to redirect the shopper to

        Raises:
            EmptyCartError: nothing to check out, no request is made
            CheckoutInProgressError: a checkout is already being created
            CheckoutError: from the checkout client, cart left unchanged
        """
        if not self._state.items:
            raise EmptyCartError()
        if self._state.is_loading:
            raise CheckoutInProgressError()

        self._set_loading(True)
        try:
            identity = await self._resolve_identity(identity_resolver or self.identity_resolver)
            lines = [CheckoutLine(variant_id=i.variant_id, quantity=i.quantity) for i in self._state.items]
            checkout_url = await self.checkout_client.create_checkout(lines, buyer_identity=identity)
            # The cart only changes once the marker is written
            self.checkout_flag.set()
            self._state.checkout_url = checkout_url
        except Exception as e:
            logger.error(f"Checkout creation failed: {e}")
            raise
        finally:
            self._set_loading(False)

        logger.info(f"Checkout created, redirecting to {urlsplit(checkout_url).netloc}")
        return checkout_url
