from fastapi import APIRouter, Request

from apps.backend.services.settings import settings
from apps.backend.utils.envelope import ok

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_root(request: Request):
    state = request.app.state
    scheduler = getattr(state, "scheduler", None)
    hub = getattr(state, "activity_hub", None)
    return ok(
        {
            "status": "ok",
            "version": settings.APP_VERSION,
            "supabase": getattr(state, "supabase", None) is not None,
            "scheduler": bool(scheduler is not None and scheduler.running),
            "realtime_subscribers": hub.subscriber_count if hub is not None else 0,
        }
    )
