import pytest

from storefront.core.storage import MemoryStorage
from storefront.services.cart_store import CartStore

from .helpers import FakeCheckoutClient


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def checkout_client():
    return FakeCheckoutClient()


@pytest.fixture
def store(storage, checkout_client):
    return CartStore(storage=storage, checkout_client=checkout_client)
