"""Drop display routes"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends

from ..models.drop import DropDisplay, DropsOverviewResponse
from ..services.drops import describe_drop
from ..services.supabase import SupabaseClient, SupabaseError
from .deps import get_supabase_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/drops", tags=["Drops"])


def require_supabase(client: Optional[SupabaseClient] = Depends(get_supabase_client)) -> SupabaseClient:
    if client is None:
        raise HTTPException(status_code=503, detail="Drop catalog is not configured")
    return client


@router.get("", response_model=DropsOverviewResponse)
async def list_drops(supabase: SupabaseClient = Depends(require_supabase)):
    """Live and upcoming drops with their countdowns"""
    now = datetime.now(timezone.utc)
    try:
        live = await supabase.get_live_drops(now)
        upcoming = await supabase.get_upcoming_drops(now)
    except SupabaseError as e:
        logger.error(f"Failed to load drops: {e}")
        raise HTTPException(status_code=502, detail="Could not load drops")

    return DropsOverviewResponse(
        live=[describe_drop(d, now) for d in live],
        upcoming=[describe_drop(d, now) for d in upcoming],
    )


@router.get("/current", response_model=DropDisplay)
async def get_current_drop(supabase: SupabaseClient = Depends(require_supabase)):
    """The drop currently on sale"""
    now = datetime.now(timezone.utc)
    try:
        live = await supabase.get_live_drops(now)
    except SupabaseError as e:
        logger.error(f"Failed to load current drop: {e}")
        raise HTTPException(status_code=502, detail="Could not load drop")

    if not live:
        raise HTTPException(status_code=404, detail="No drop is live")
    return describe_drop(live[0], now)
