"""Bearer token helpers (JWT issue and verification)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    """Minimal claims carried by a bearer token."""

    id: str
    email: str


class TokenInvalidError(Exception):
    """Raised for any token that cannot be trusted (malformed, tampered, expired)."""


def issue_token(user_id: str, email: str, *, secret: str, ttl_seconds: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token: str, *, secret: str) -> Identity:
    """Verify signature and expiry and return the identity claims."""
    if not token:
        raise TokenInvalidError("empty token")
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "id", "email"]},
        )
    except jwt.PyJWTError as exc:
        raise TokenInvalidError(str(exc)) from exc
    user_id = payload.get("id")
    email = payload.get("email")
    if not isinstance(user_id, str) or not isinstance(email, str) or not user_id:
        raise TokenInvalidError("missing identity claims")
    return Identity(id=user_id, email=email)
