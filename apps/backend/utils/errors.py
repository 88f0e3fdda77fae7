import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from apps.backend.services.core_service import CoreError
from apps.backend.utils.envelope import error

log = logging.getLogger("telco.errors")


def install_error_handlers(app: FastAPI) -> None:
    """
    Stable envelopes for every failure; stack traces stay in the logs.
    """

    @app.exception_handler(CoreError)
    async def _core_error(request: Request, exc: CoreError):
        return error(exc.message, exc.code, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(x) for x in first.get("loc", []) if x != "body")
        message = f"{field}: {first.get('msg', 'invalid request')}" if field else "invalid request"
        return error(message, "validation_error", 422)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error("Internal server error", "internal_error", 500)
