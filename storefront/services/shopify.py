"""
Shopify Storefront Client

Creates checkout sessions through the Storefront GraphQL API.
The shopper is redirected to the returned checkout URL; payment,
fulfillment and order tracking happen entirely on Shopify's side.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Any, Iterable
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

import httpx

from ..models.identity import BuyerIdentity

logger = logging.getLogger(__name__)


CART_CREATE_MUTATION = """
  mutation cartCreate($input: CartInput!) {
    cartCreate(input: $input) {
      cart {
        id
        checkoutUrl
        totalQuantity
        cost {
          totalAmount {
            amount
            currencyCode
          }
        }
      }
      userErrors {
        field
        message
      }
    }
  }
"""


class CheckoutError(Exception):
    """Base exception for checkout session creation failures"""
    pass


class GatewayError(CheckoutError):
    """The Storefront API did not answer with a successful HTTP status"""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        message = f"Shopify API error: {status_code}"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message)


class GraphQLError(CheckoutError):
    """The response carried a top-level errors array"""

    def __init__(self, messages: list[str]):
        self.messages = messages
        super().__init__(f"Shopify GraphQL error: {', '.join(messages)}")


class UserError(CheckoutError):
    """Shopify rejected the cart input (e.g. an unavailable variant)"""

    def __init__(self, user_errors: list[dict]):
        self.user_errors = user_errors
        rendered = [_render_user_error(e) for e in user_errors]
        super().__init__(f"Cart creation failed: {', '.join(rendered)}")


class MissingCheckoutUrlError(CheckoutError):
    """cartCreate reported no errors but returned no checkout URL"""

    def __init__(self):
        super().__init__("No checkout URL returned from Shopify")


def _render_user_error(error: dict) -> str:
    field = error.get("field")
    if isinstance(field, (list, tuple)):
        field = ".".join(str(part) for part in field)
    message = error.get("message", "")
    return f"{field}: {message}" if field else message


@dataclass
class CheckoutLine:
    """One (variant, quantity) pair sent to cartCreate"""
    variant_id: str
    quantity: int

    def to_input(self) -> dict:
        return {"quantity": self.quantity, "merchandiseId": self.variant_id}


def with_query_param(url: str, name: str, value: str) -> str:
    """Set (or replace) a query parameter on a URL"""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
    query.append((name, value))
    return urlunsplit(parts._replace(query=urlencode(query)))


class StorefrontClient:
    """
    Client for the Shopify Storefront GraphQL API.

    Stateless apart from the pooled HTTP connection.
    """

    def __init__(
        self,
        storefront_url: str,
        storefront_token: str,
        channel: str = "online_store",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize storefront client.

        Args:
            storefront_url: Full GraphQL endpoint URL
            storefront_token: Public Storefront access token
            channel: Sales channel attributed on the checkout URL
            timeout: Request timeout in seconds
            http_client: Pre-built client (tests pass one with a mock transport)
        """
        self.storefront_url = storefront_url
        self.channel = channel
        self._token = storefront_token
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

        if not storefront_token:
            logger.warning("No Storefront access token configured - Shopify will reject requests")

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def request(self, query: str, variables: Optional[dict] = None) -> dict[str, Any]:
        """Send a GraphQL operation and return the decoded body"""
        response = await self._http_client.post(
            self.storefront_url,
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Storefront-Access-Token": self._token,
            },
            json={"query": query, "variables": variables or {}},
        )

        if not response.is_success:
            logger.error(f"Storefront request failed: {response.status_code} - {response.text}")
            raise GatewayError(response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise GatewayError(response.status_code, "response body is not JSON")

        if not isinstance(data, dict):
            raise GatewayError(response.status_code, "response body is not a JSON object")

        # An empty errors array still counts as a failure
        errors = data.get("errors")
        if errors is not None:
            if not isinstance(errors, list):
                errors = [errors]
            raise GraphQLError([
                e.get("message", str(e)) if isinstance(e, dict) else str(e)
                for e in errors
            ])

        return data

    async def create_checkout(
        self,
        lines: Iterable[CheckoutLine],
        buyer_identity: Optional[BuyerIdentity] = None,
    ) -> str:
        """
        Create a Shopify cart and return its checkout URL.

        The caller guarantees a non-empty line list.

        Returns:
            Checkout URL tagged with the sales channel
        """
        cart_input: dict[str, Any] = {"lines": [line.to_input() for line in lines]}
        if buyer_identity:
            identity_input = buyer_identity.to_input()
            if identity_input:
                cart_input["buyerIdentity"] = identity_input

        response = await self.request(CART_CREATE_MUTATION, {"input": cart_input})

        data = response.get("data")
        cart_create = (data.get("cartCreate") if isinstance(data, dict) else None) or {}
        user_errors = cart_create.get("userErrors") or []
        if user_errors:
            raise UserError(user_errors)

        cart = cart_create.get("cart")
        checkout_url = cart.get("checkoutUrl") if cart else None
        if not checkout_url:
            raise MissingCheckoutUrlError()

        logger.info(f"Created Shopify cart {cart.get('id')} with {len(cart_input['lines'])} line(s)")
        return with_query_param(checkout_url, "channel", self.channel)
