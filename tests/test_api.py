import uuid
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.core.config import Settings
from storefront.core.session import CartSessionManager, file_storage_factory
from storefront.main import create_app
from storefront.services.checkout_return import CHECKOUT_STARTED_KEY
from storefront.services.shopify import UserError
from storefront.services.supabase import SupabaseClient

from .helpers import FakeCheckoutClient

DEVICE = "6f1c7a52-8a0e-4c55-9a57-3a0c5d3f8a11"
HEADERS = {"X-Device-Id": DEVICE}

ITEM = {
    "drop_id": "drop-1",
    "variant_id": "gid-variant-1",
    "title": "Single Cask",
    "price": "10.00",
    "quantity": 2,
}


def build(checkout_client=None, supabase_handler=None, settings=None, sessions=None):
    checkout_client = checkout_client or FakeCheckoutClient()
    supabase = None
    if supabase_handler:
        supabase = SupabaseClient(
            supabase_url="https://db.example",
            anon_key="anon",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(supabase_handler)),
        )
    sessions = sessions or CartSessionManager(checkout_client=checkout_client)
    app = create_app(
        settings=settings or Settings(cart_storage="memory"),
        storefront_client=checkout_client,
        supabase_client=supabase,
        session_manager=sessions,
    )
    return TestClient(app), sessions, checkout_client


def test_add_and_read_cart():
    client, _, _ = build()

    client.post("/api/cart/items", json=ITEM, headers=HEADERS)
    response = client.post("/api/cart/items", json={**ITEM, "quantity": 3}, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["total_items"] == 5
    assert len(body["items"]) == 1
    assert body["items"][0]["variant_id"] == "gid-variant-1"

    body = client.get("/api/cart", headers=HEADERS).json()
    assert body["total_items"] == 5


def test_new_device_gets_cookie():
    client, _, _ = build()

    response = client.get("/api/cart")

    assert response.status_code == 200
    assert "trgc_device" in response.cookies


def test_update_to_zero_removes_item():
    client, _, _ = build()
    client.post("/api/cart/items", json=ITEM, headers=HEADERS)

    body = client.put("/api/cart/items/gid-variant-1", json={"quantity": 0}, headers=HEADERS).json()

    assert body["items"] == []
    assert body["total_items"] == 0


def test_remove_and_clear():
    client, _, _ = build()
    client.post("/api/cart/items", json=ITEM, headers=HEADERS)
    client.post("/api/cart/items", json={**ITEM, "variant_id": "gid-variant-2"}, headers=HEADERS)

    body = client.delete("/api/cart/items/gid-variant-1", headers=HEADERS).json()
    assert [i["variant_id"] for i in body["items"]] == ["gid-variant-2"]

    body = client.delete("/api/cart", headers=HEADERS).json()
    assert body["total_items"] == 0


def test_checkout_empty_cart_is_400():
    client, _, checkout_client = build()

    response = client.post("/api/checkout", headers=HEADERS)

    assert response.status_code == 400
    assert checkout_client.calls == []


def test_checkout_returns_url_and_sets_flag():
    client, sessions, checkout_client = build()
    client.post("/api/cart/items", json=ITEM, headers=HEADERS)

    response = client.post("/api/checkout", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["checkout_url"] == checkout_client.url
    assert sessions.get_store(DEVICE).storage.get_item(CHECKOUT_STARTED_KEY) == "true"


def test_checkout_failure_is_502_and_keeps_cart():
    failing = FakeCheckoutClient(error=UserError([{"field": ["lines"], "message": "Sold out"}]))
    client, _, _ = build(checkout_client=failing)
    client.post("/api/cart/items", json=ITEM, headers=HEADERS)

    response = client.post("/api/checkout", headers=HEADERS)

    assert response.status_code == 502
    assert "Sold out" in response.json()["detail"]
    cart = client.get("/api/cart", headers=HEADERS).json()
    assert cart["total_items"] == 2
    assert cart["is_loading"] is False


def test_checkout_uses_bearer_token_for_identity():
    def supabase(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/v1/user":
            return httpx.Response(200, json={"id": "u1", "email": "member@example.com"})
        return httpx.Response(200, json=[])

    client, _, checkout_client = build(supabase_handler=supabase)
    client.post("/api/cart/items", json=ITEM, headers=HEADERS)

    client.post("/api/checkout", headers={**HEADERS, "Authorization": "Bearer user-token"})

    identity = checkout_client.calls[0][1]
    assert identity.email == "member@example.com"


def test_dashboard_visit_keeps_cart_and_thank_you_clears_it():
    client, sessions, _ = build()
    client.post("/api/cart/items", json=ITEM, headers=HEADERS)
    client.post("/api/checkout", headers=HEADERS)
    storage = sessions.get_store(DEVICE).storage

    client.get("/dashboard", headers=HEADERS)
    assert client.get("/api/cart", headers=HEADERS).json()["total_items"] == 2
    assert storage.get_item(CHECKOUT_STARTED_KEY) == "true"

    response = client.get("/thank-you", headers=HEADERS)

    assert response.status_code == 200
    assert client.get("/api/cart", headers=HEADERS).json()["items"] == []
    assert storage.get_item(CHECKOUT_STARTED_KEY) is None


def test_drops_unconfigured_is_503():
    client, _, _ = build()
    assert client.get("/api/drops/current").status_code == 503


def test_current_drop():
    now = datetime.now(timezone.utc)
    row = {
        "id": "drop-1",
        "title_en": "Single Cask",
        "title_nl": "Enkel Vat",
        "price": 89.0,
        "quantity_available": 50,
        "quantity_sold": 48,
        "starts_at": (now - timedelta(days=1)).isoformat(),
        "ends_at": (now + timedelta(days=1)).isoformat(),
        "is_active": True,
        "is_public": None,
    }

    def supabase(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/rest/v1/drops"
        return httpx.Response(200, json=[row])

    client, _, _ = build(supabase_handler=supabase)
    body = client.get("/api/drops/current").json()

    assert body["state"] == "live"
    assert body["stock"]["remaining"] == 2
    assert body["stock"]["is_almost_gone"] is True
    assert body["time_left"]["days"] in (0, 1)


def test_no_live_drop_is_404():
    client, _, _ = build(supabase_handler=lambda request: httpx.Response(200, json=[]))
    assert client.get("/api/drops/current").status_code == 404


@pytest.mark.parametrize("status", [500, 401])
def test_drop_lookup_failure_is_502(status):
    client, _, _ = build(supabase_handler=lambda request: httpx.Response(status, text="nope"))
    assert client.get("/api/drops").status_code == 502


def test_health():
    client, _, _ = build()
    assert client.get("/health").json()["status"] == "healthy"


def test_cart_response_uses_field_names():
    client, _, _ = build()

    body = client.post("/api/cart/items", json=ITEM, headers=HEADERS).json()

    assert set(body) >= {"items", "total_items", "total_price", "is_loading", "checkout_url"}
    assert set(body["items"][0]) == {"drop_id", "variant_id", "title", "price", "image_url", "quantity"}


def test_page_visits_do_not_register_carts():
    client, sessions, _ = build()

    for _ in range(5):
        client.get("/health", headers={"X-Device-Id": str(uuid.uuid4())})
        client.get("/dashboard", headers={"X-Device-Id": str(uuid.uuid4())})

    assert sessions.stores == {}


def test_new_devices_leave_nothing_on_disk_until_they_write(tmp_path):
    checkout_client = FakeCheckoutClient()
    sessions = CartSessionManager(checkout_client, file_storage_factory(str(tmp_path)), max_stores=3)
    client, _, _ = build(checkout_client=checkout_client, sessions=sessions)

    for _ in range(10):
        client.cookies.clear()
        assert client.get("/api/cart").status_code == 200

    assert list(tmp_path.iterdir()) == []
    assert len(sessions.stores) == 3

    client.post("/api/cart/items", json=ITEM, headers=HEADERS)
    assert [p.name for p in tmp_path.iterdir()] == [DEVICE]


def test_confirmation_path_is_configurable():
    client, sessions, _ = build(settings=Settings(cart_storage="memory", confirmation_path="/order-complete"))
    client.post("/api/cart/items", json=ITEM, headers=HEADERS)
    client.post("/api/checkout", headers=HEADERS)

    assert client.get("/thank-you", headers=HEADERS).status_code == 404
    assert client.get("/api/cart", headers=HEADERS).json()["total_items"] == 2

    response = client.get("/order-complete", headers=HEADERS)

    assert response.status_code == 200
    assert client.get("/api/cart", headers=HEADERS).json()["items"] == []
    assert sessions.get_store(DEVICE).storage.get_item(CHECKOUT_STARTED_KEY) is None
