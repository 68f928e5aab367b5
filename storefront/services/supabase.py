"""
Supabase Client

Thin HTTP client for the hosted database: the auth user endpoint,
the profiles table and the drops table (via PostgREST).
"""

import logging
from datetime import datetime
from typing import Optional, Any

import httpx

from ..models.identity import AuthUser, Profile
from ..models.drop import Drop

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = (
    "id,first_name,last_name,phone,street_address,house_number,postal_code,city,country"
)


class SupabaseError(Exception):
    """Base exception for Supabase client errors"""
    pass


class SupabaseClient:
    """
    Client for Supabase Auth and PostgREST.

    Requests made on behalf of a shopper pass the shopper's access token
    so row-level policies apply; anonymous reads use the anon key.
    """

    def __init__(
        self,
        supabase_url: str,
        anon_key: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = supabase_url.rstrip("/")
        self._anon_key = anon_key
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _headers(self, access_token: Optional[str] = None) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {access_token or self._anon_key}",
            "Accept": "application/json",
        }

    async def _get(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
        access_token: Optional[str] = None,
    ) -> Any:
        response = await self._http_client.get(
            f"{self.base_url}{path}",
            params=params,
            headers=self._headers(access_token),
        )
        if response.status_code >= 400:
            raise SupabaseError(f"GET {path} failed: {response.status_code} - {response.text}")
        return response.json()

    # ==================== Auth ====================

    async def get_user(self, access_token: str) -> AuthUser:
        """Resolve the user behind an access token"""
        data = await self._get("/auth/v1/user", access_token=access_token)
        return AuthUser(id=data["id"], email=data.get("email"))

    # ==================== Profiles ====================

    async def get_profile(self, user_id: str, access_token: Optional[str] = None) -> Optional[Profile]:
        """Load a profile row, None if the user has none"""
        rows = await self._get(
            "/rest/v1/profiles",
            params={"id": f"eq.{user_id}", "select": PROFILE_COLUMNS, "limit": "1"},
            access_token=access_token,
        )
        if not rows:
            return None
        return Profile.from_row(rows[0])

    # ==================== Drops ====================

    async def get_live_drops(self, now: datetime) -> list[Drop]:
        """Active drops that have started and not yet ended, newest first"""
        stamp = now.isoformat()
        rows = await self._get(
            "/rest/v1/drops",
            params={
                "select": "*",
                "is_active": "eq.true",
                "starts_at": f"lt.{stamp}",
                "or": f"(ends_at.is.null,ends_at.gt.{stamp})",
                "order": "starts_at.desc",
            },
        )
        return [Drop.model_validate(row) for row in rows]

    async def get_upcoming_drops(self, now: datetime) -> list[Drop]:
        """Active drops that start in the future, soonest first"""
        rows = await self._get(
            "/rest/v1/drops",
            params={
                "select": "*",
                "is_active": "eq.true",
                "starts_at": f"gt.{now.isoformat()}",
                "order": "starts_at.asc",
            },
        )
        return [Drop.model_validate(row) for row in rows]
