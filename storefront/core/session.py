"""Per-device cart registry"""

import os
import uuid
import logging
from collections import OrderedDict
from typing import Callable, Optional

from .storage import Storage, MemoryStorage, FileStorage
from ..services.cart_store import CartStore, CheckoutClient

logger = logging.getLogger(__name__)


def parse_device_id(value: Optional[str]) -> Optional[str]:
    """Normalize a device id, None if it is not a UUID"""
    if not value:
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None


def new_device_id() -> str:
    return str(uuid.uuid4())


def file_storage_factory(base_dir: str) -> Callable[[str], Storage]:
    """One storage directory per device under base_dir"""
    def factory(device_id: str) -> Storage:
        return FileStorage(os.path.join(base_dir, device_id))
    return factory


def memory_storage_factory() -> Callable[[str], Storage]:
    return lambda device_id: MemoryStorage()


class CartSessionManager:
    """
    Keeps one CartStore per device, least recently used first out.

    Sharing the instance is what makes the in-flight checkout guard hold
    across concurrent requests from the same browser. Evicted carts are
    rehydrated from storage on their next use; a store with a checkout
    in flight is never evicted.
    """

    def __init__(
        self,
        checkout_client: CheckoutClient,
        storage_factory: Optional[Callable[[str], Storage]] = None,
        max_stores: int = 1000,
    ):
        self.checkout_client = checkout_client
        self.storage_factory = storage_factory or memory_storage_factory()
        self.max_stores = max_stores
        self.stores: OrderedDict[str, CartStore] = OrderedDict()

    def get_store(self, device_id: str) -> CartStore:
        """Get the device's cart, rehydrating it from storage on first use"""
        store = self.stores.get(device_id)
        if store is None:
            store = CartStore(
                storage=self.storage_factory(device_id),
                checkout_client=self.checkout_client,
            )
            self._evict_overflow()
            self.stores[device_id] = store
        else:
            self.stores.move_to_end(device_id)
        return store

    def has_store(self, device_id: str) -> bool:
        return device_id in self.stores

    def evict(self, device_id: str) -> bool:
        """Forget the in-memory instance; persisted state is kept"""
        if device_id in self.stores:
            del self.stores[device_id]
            return True
        return False

    def _evict_overflow(self) -> int:
        """Make room for one more store"""
        overflow = len(self.stores) + 1 - self.max_stores
        if overflow <= 0:
            return 0

        idle = [did for did, store in self.stores.items() if not store.is_loading][:overflow]
        for did in idle:
            del self.stores[did]
        logger.debug(f"Evicted {len(idle)} idle carts, {len(self.stores)} active")
        return len(idle)
