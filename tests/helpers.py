from decimal import Decimal
from typing import Optional

from storefront.models.cart import CartProduct


class FakeCheckoutClient:
    """Records checkout requests and answers with a fixed URL or error"""

    def __init__(self, url: str = "https://shop.example/checkouts/c1?channel=online_store", error: Optional[Exception] = None):
        self.url = url
        self.error = error
        self.calls = []

    async def create_checkout(self, lines, buyer_identity=None):
        self.calls.append((list(lines), buyer_identity))
        if self.error:
            raise self.error
        return self.url


def make_product(variant_id: str = "A", price: str = "10.00", drop_id: str = "drop-1") -> CartProduct:
    return CartProduct(
        drop_id=drop_id,
        variant_id=variant_id,
        title=f"Bottle {variant_id}",
        price=Decimal(price),
        image_url=None,
    )
