import logging
import os
from typing import Any, Optional

from fastapi import Request
from supabase import Client, create_client

from apps.backend.services.core_service import CoreError

log = logging.getLogger("telco.db")


def create_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Optional[Client]:
    """
    Build the Supabase client once, from the app entry point.

    Requires env (unless passed explicitly):
    - SUPABASE_URL
    - SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY

    Returns None when not configured so the app can still boot and
    serve its demo fallbacks.
    """
    url = (url or os.getenv("SUPABASE_URL") or "").strip()
    key = (key or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY") or "").strip()

    if not url or not key:
        log.warning("Supabase not configured: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY)")
        return None

    return create_client(url, key)


def get_supabase(request: Request) -> Any:
    """
    FastAPI dependency: the client owned by app.state.
    """
    supabase = getattr(request.app.state, "supabase", None)
    if supabase is None:
        raise CoreError("Supabase client unavailable", 503)
    return supabase


def get_optional_supabase(request: Request) -> Optional[Any]:
    """
    FastAPI dependency for read paths that can serve demo data without a
    backend.
    """
    return getattr(request.app.state, "supabase", None)
