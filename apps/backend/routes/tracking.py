import asyncio
import logging
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from apps.backend.db import get_supabase
from apps.backend.services.core_service import get_optional_user
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.loyalty.loyalty_service import LoyaltyService
from apps.backend.services.realtime.activity_hub import LiveQueue
from apps.backend.services.tracking.tracking_repository import TrackingRepository
from apps.backend.services.tracking.tracking_service import TrackingService
from apps.backend.utils.envelope import ok

log = logging.getLogger("telco.routes.tracking")

router = APIRouter(prefix="/tracking", tags=["Tracking"])


class InteractionIn(BaseModel):
    action: Literal["view", "click", "search", "chat"] = "click"
    category: Optional[str] = None
    category_name: Optional[str] = None
    item_id: Optional[str] = None
    item_name: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    device: Optional[Dict[str, Any]] = None


def _service(request: Request, supabase: Any) -> TrackingService:
    return TrackingService(
        TrackingRepository(supabase),
        loyalty=LoyaltyService(LoyaltyRepository(supabase)),
        hub=getattr(request.app.state, "activity_hub", None),
    )


@router.post("/interaction")
async def tracking_interaction(inb: InteractionIn, request: Request, supabase: Any = Depends(get_supabase)):
    user = get_optional_user(request, supabase)
    result = await _service(request, supabase).record_interaction(
        action=inb.action,
        user_id=user["id"] if user else None,
        category=inb.category,
        category_name=inb.category_name,
        item_id=inb.item_id,
        item_name=inb.item_name,
        metadata=inb.metadata,
        device=inb.device,
    )
    return ok(result, status=201)


@router.get("/activity")
async def tracking_activity(request: Request, supabase: Any = Depends(get_supabase)):
    summary = await _service(request, supabase).activity_summary()
    hub = getattr(request.app.state, "activity_hub", None)
    return ok(summary, meta={"version": hub.version if hub is not None else 0})


@router.get("/recent")
async def tracking_recent(request: Request, supabase: Any = Depends(get_supabase)):
    user = get_optional_user(request, supabase)
    return ok(await _service(request, supabase).recent_views(user["id"] if user else None))


@router.get("/personalized")
async def tracking_personalized(request: Request, supabase: Any = Depends(get_supabase)):
    user = get_optional_user(request, supabase)
    return ok(await _service(request, supabase).personalized_views(user["id"] if user else None))


@router.websocket("/live")
async def tracking_live(websocket: WebSocket):
    """
    Push channel: one message per coalesced batch of new interactions.
    """
    hub = getattr(websocket.app.state, "activity_hub", None)
    await websocket.accept()
    if hub is None:
        await websocket.close(code=1011)
        return

    live = LiveQueue(hub)
    await websocket.send_json({"type": "subscribed", "version": hub.version})

    async def forward() -> None:
        while True:
            batch = await live.get()
            await websocket.send_json({"type": "activity", "version": hub.version, "events": batch})

    pusher = asyncio.create_task(forward())
    try:
        # client messages are ignored; receiving surfaces the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        log.info("Live activity subscriber left")
    finally:
        pusher.cancel()
        live.close()
