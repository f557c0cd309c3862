"""Bearer credential helpers (header parsing, request guard)."""
from __future__ import annotations

from fastapi import Request

from vita.core.errors import AuthenticationError
from vita.core.tokens import Identity

BEARER_PREFIX = "bearer "


def bearer_token(request: Request) -> str | None:
    """Return the token from `Authorization: Bearer <token>`, if any."""
    header = request.headers.get("authorization") or ""
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


def current_identity(request: Request) -> Identity:
    """FastAPI dependency guarding every route except register/login."""
    token = bearer_token(request)
    if not token:
        raise AuthenticationError()
    auth_service = getattr(request.app.state, "auth_service", None)
    if auth_service is None:
        raise RuntimeError("AuthService is not configured")
    return auth_service.authenticate(token)
