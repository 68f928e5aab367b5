"""Request dependencies shared by the routers"""

from typing import Optional

from fastapi import Cookie, Depends, Header, Request, Response

from ..core.session import CartSessionManager, parse_device_id, new_device_id
from ..services.cart_store import CartStore
from ..services.buyer_identity import BuyerIdentityResolver
from ..services.supabase import SupabaseClient

DEVICE_COOKIE = "trgc_device"
DEVICE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


def resolve_device_id(cookie_value: Optional[str], header_value: Optional[str]) -> Optional[str]:
    """Device id from the header, falling back to the cookie"""
    return parse_device_id(header_value) or parse_device_id(cookie_value)


def get_device_id(
    response: Response,
    trgc_device: Optional[str] = Cookie(None),
    x_device_id: Optional[str] = Header(None),
) -> str:
    """Identify the browser; issue a new device cookie when there is none"""
    device_id = resolve_device_id(trgc_device, x_device_id)
    if device_id is None:
        device_id = new_device_id()
        response.set_cookie(
            DEVICE_COOKIE,
            device_id,
            max_age=DEVICE_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )
    return device_id


def get_session_manager(request: Request) -> CartSessionManager:
    return request.app.state.sessions


def get_supabase_client(request: Request) -> Optional[SupabaseClient]:
    return request.app.state.supabase


def get_cart_store(
    request: Request,
    device_id: str = Depends(get_device_id),
) -> CartStore:
    """The requesting device's cart"""
    return get_session_manager(request).get_store(device_id)


def get_access_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Bearer token of the signed-in shopper, if any"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_identity_resolver(
    request: Request,
    access_token: Optional[str] = Depends(get_access_token),
) -> BuyerIdentityResolver:
    return BuyerIdentityResolver(get_supabase_client(request), access_token)
