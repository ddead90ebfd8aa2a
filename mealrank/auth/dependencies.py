from __future__ import annotations

from fastapi import HTTPException, Request


def get_current_user_id(request: Request) -> str | None:
    """Username of the logged-in user; ``None`` means anonymous."""
    user = request.session.get("user")
    return user["username"] if user else None


def require_user(request: Request) -> dict:
    """Raise 401 unless someone is logged in; personalised routes need an identity."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(request: Request) -> dict:
    """Operator routes (cache control, analytics): 401 when anonymous, 403 for non-admins."""
    user = require_user(request)
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
