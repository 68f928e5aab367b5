"""
Buyer identity resolution

Shapes the signed-in shopper's profile into Shopify's checkout pre-fill.
Identity is an enhancement: every failure degrades to "no identity" and
checkout carries on without pre-fill.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..models.identity import AuthUser, Profile, BuyerIdentity, DeliveryAddress
from .supabase import SupabaseClient

logger = logging.getLogger(__name__)


@dataclass
class IdentityResolution:
    """Resolved identity, or None plus a non-fatal diagnostic"""
    identity: Optional[BuyerIdentity] = None
    diagnostic: Optional[str] = None


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def compose_street_line(street: Optional[str], house_number: Optional[str]) -> Optional[str]:
    """Join street and house number with a space, skipping blank parts"""
    parts = [p for p in (_clean(street), _clean(house_number)) if p]
    return " ".join(parts) or None


def build_buyer_identity(user: AuthUser, profile: Optional[Profile]) -> Optional[BuyerIdentity]:
    """Pure transformation of user + profile into checkout pre-fill"""
    email = _clean(user.email)
    phone = None
    country_code = None
    address = None

    if profile:
        phone = _clean(profile.phone)
        country = _clean(profile.country)
        if country and len(country) == 2 and country.isalpha():
            country_code = country.upper()

        address1 = compose_street_line(profile.street_address, profile.house_number)
        city = _clean(profile.city)
        zip_code = _clean(profile.postal_code)
        if address1 or city or zip_code:
            address = DeliveryAddress(
                first_name=_clean(profile.first_name),
                last_name=_clean(profile.last_name),
                address1=address1,
                city=city,
                zip=zip_code,
                country=country,
            )

    if not (email or phone or address):
        return None

    return BuyerIdentity(
        email=email,
        phone=phone,
        country_code=country_code,
        delivery_address=address,
    )


class BuyerIdentityResolver:
    """Resolves the identity of the shopper behind an access token"""

    def __init__(self, supabase: Optional[SupabaseClient], access_token: Optional[str] = None):
        self.supabase = supabase
        self.access_token = access_token

    async def resolve(self) -> IdentityResolution:
        """Never raises"""
        if not self.access_token or self.supabase is None:
            return IdentityResolution()

        try:
            user = await self.supabase.get_user(self.access_token)
        except Exception as e:
            logger.warning(f"Could not load authenticated user: {e}")
            return IdentityResolution(diagnostic=f"user lookup failed: {e}")

        try:
            profile = await self.supabase.get_profile(user.id, access_token=self.access_token)
        except Exception as e:
            logger.warning(f"Could not load profile for user {user.id}: {e}")
            return IdentityResolution(diagnostic=f"profile lookup failed: {e}")

        identity = build_buyer_identity(user, profile)
        if identity is None:
            return IdentityResolution(diagnostic="profile has no contact or address data")
        return IdentityResolution(identity=identity)

    async def __call__(self) -> IdentityResolution:
        return await self.resolve()
