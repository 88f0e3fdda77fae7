from typing import Dict, Optional

from fastapi import Request


class CoreError(Exception):
    def __init__(self, message: str, status_code: int = 400, code: str = "error"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class NotFoundError(CoreError):
    def __init__(self, message: str):
        super().__init__(message, 404, "not_found")


class InsufficientPointsError(CoreError):
    def __init__(self, needed: int, balance: int):
        super().__init__(f"You need {needed} points to redeem this voucher.", 409, "insufficient_points")
        self.needed = needed
        self.balance = balance


def get_optional_user(request: Request, supabase) -> Optional[Dict[str, str]]:
    """
    Resolve the signed-in customer from a bearer token.
    Anonymous callers are allowed (the app works signed out), so a missing
    header returns None; a present but invalid token is an error.
    """
    auth = request.headers.get("Authorization")
    if not auth:
        return None
    if not auth.lower().startswith("bearer "):
        raise CoreError("Missing or invalid Authorization header", 401, "unauthorized")

    token = auth.split(" ", 1)[1]
    if supabase is None:
        raise CoreError("Supabase client unavailable", 503)

    try:
        res = supabase.auth.get_user(token)
        user = res.user
    except Exception:
        raise CoreError("Invalid or expired token", 401, "unauthorized")

    if not user or not user.id:
        raise CoreError("Unable to resolve user identity", 401, "unauthorized")

    return {"id": user.id, "email": getattr(user, "email", None) or ""}


def require_user(request: Request, supabase) -> Dict[str, str]:
    user = get_optional_user(request, supabase)
    if not user:
        raise CoreError("Please sign in to continue", 401, "sign_in_required")
    return user
