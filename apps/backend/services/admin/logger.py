import logging
import time
from typing import Dict

from fastapi import FastAPI, Request

log = logging.getLogger("telco.requests")

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "apikey",
    "x-api-key",
    "x-supabase-key",
}

QUIET_PATHS = {"/health"}


def mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    return {k: ("***masked***" if k.lower() in SENSITIVE_HEADERS else v) for k, v in headers.items()}


def install_request_logging(app: FastAPI) -> None:
    """
    One line per request at INFO; masked headers at DEBUG.
    Health probes only log at DEBUG.
    """

    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - started) * 1000)

        path = request.url.path
        level = logging.DEBUG if path in QUIET_PATHS else logging.INFO
        log.log(
            level,
            "%s %s -> %s (%dms) user=%s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            "yes" if request.headers.get("authorization") else "anon",
        )
        if log.isEnabledFor(logging.DEBUG):
            log.debug("headers=%s client=%s", mask_headers(dict(request.headers)), request.client.host if request.client else None)
        return response
