# apps/backend/main.py
import logging
from typing import Any, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.backend.db import create_supabase_client
from apps.backend.routes.account import router as account_router
from apps.backend.routes.chat import router as chat_router
from apps.backend.routes.health import router as health_router
from apps.backend.routes.loyalty import router as loyalty_router
from apps.backend.routes.plans import router as plans_router
from apps.backend.routes.shop import router as shop_router
from apps.backend.routes.tracking import router as tracking_router
from apps.backend.routes.usage import router as usage_router
from apps.backend.routes.vouchers import router as vouchers_router
from apps.backend.services.admin.logger import install_request_logging
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.realtime.activity_hub import ActivityHub
from apps.backend.services.realtime.recommendation_feed import RecommendationFeed
from apps.backend.services.recommendations.voucher_service import VoucherService
from apps.backend.services.settings import settings
from apps.backend.services.tracking.tracking_repository import TrackingRepository
from apps.backend.utils.errors import install_error_handlers

log = logging.getLogger("telco.main")

ROUTES = [
    "/health",
    "/loyalty",
    "/vouchers",
    "/tracking",
    "/chat",
    "/usage",
    "/plans",
    "/shop",
    "/account",
]


def _recommendation_feed(app: FastAPI) -> RecommendationFeed:
    async def compute(user_id):
        sb = app.state.supabase
        svc = VoucherService(LoyaltyRepository(sb), TrackingRepository(sb))
        return await svc.smart(user_id, limit=settings.RECOMMENDATION_LIMIT)

    return RecommendationFeed(compute)


def create_app(supabase_client: Optional[Any] = None) -> FastAPI:
    """
    The Supabase client is built here (or passed in) and shared through
    app.state; nothing connects at import time.
    """
    app = FastAPI(
        title="Telco Care",
        version=settings.APP_VERSION,
        description="Customer account, rewards, recommendations and support chat",
    )
    app.state.supabase = supabase_client
    app.state.scheduler = None
    app.state.activity_hub = ActivityHub(delay_seconds=settings.REALTIME_REFRESH_DELAY_SECONDS)
    app.state.recommendation_feed = _recommendation_feed(app)
    app.state.activity_hub.subscribe(app.state.recommendation_feed.on_activity)

    # -------------------------------------------------------------------
    # Error handling (stable envelopes, no stack leaks)
    # -------------------------------------------------------------------
    install_error_handlers(app)
    install_request_logging(app)

    # -------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------
    if settings.CORS_MODE == "allowlist":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ALLOW_ORIGINS,
            allow_credentials=False,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # -------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------
    app.include_router(health_router)
    app.include_router(loyalty_router)
    app.include_router(vouchers_router)
    app.include_router(tracking_router)
    app.include_router(chat_router)
    app.include_router(usage_router)
    app.include_router(plans_router)
    app.include_router(shop_router)
    app.include_router(account_router)

    # -------------------------------------------------------------------
    # Root
    # -------------------------------------------------------------------
    @app.get("/")
    async def root():
        return {
            "status": "Telco Care Online",
            "version": settings.APP_VERSION,
            "env": settings.APP_ENV,
            "routes": ROUTES,
        }

    # -------------------------------------------------------------------
    # Startup / shutdown: backend client + realtime scheduler
    # -------------------------------------------------------------------
    @app.on_event("startup")
    async def startup_event():
        if app.state.supabase is None:
            app.state.supabase = create_supabase_client()

        scheduler = AsyncIOScheduler()
        scheduler.start()
        app.state.scheduler = scheduler
        app.state.activity_hub.scheduler = scheduler
        log.info(
            "Telco Care starting (supabase=%s, realtime delay=%ss)",
            app.state.supabase is not None,
            settings.REALTIME_REFRESH_DELAY_SECONDS,
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        scheduler = app.state.scheduler
        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)
        app.state.activity_hub.scheduler = None
        log.info("Telco Care stopped")

    return app


app = create_app()
