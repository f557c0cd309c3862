"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from vita.core.config import Settings
from vita.core.errors import AuthenticationError, InvalidCredentialsError, UserExistsError
from vita.core.security import hash_password, verify_password
from vita.core.tokens import Identity, TokenInvalidError, decode_token, issue_token
from vita.repositories.base import Repository

logger = logging.getLogger(__name__)


@dataclass
class RegisterResult:
    id: str
    email: str


@dataclass
class LoginResult:
    token: str
    identity: Identity


class AuthService:
    """Handles registration, login and bearer token verification."""

    def __init__(self, repository: Repository, settings: Settings) -> None:
        self.repository = repository
        self.settings = settings

    # -------------------------------------- register --------------------------------------
    def register(self, email: str, password: str, name: str) -> RegisterResult:
        raw_email = (email or "").strip().lower()
        if self.repository.get_user_by_email(raw_email):
            raise UserExistsError()
        user = self.repository.create_user(raw_email, name, hash_password(password))
        logger.info("Registered user %s", user["id"])
        return RegisterResult(id=user["id"], email=user["email"])

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> LoginResult:
        raw_email = (email or "").strip().lower()
        user = self.repository.get_user_by_email(raw_email) if raw_email else None
        if not user or not verify_password(password, user.get("password_hash")):
            logger.info("Rejected login attempt for %s", raw_email or "<empty>")
            raise InvalidCredentialsError()
        token = issue_token(
            user["id"],
            user["email"],
            secret=self.settings.jwt_secret,
            ttl_seconds=self.settings.jwt_ttl_seconds,
        )
        return LoginResult(token=token, identity=Identity(id=user["id"], email=user["email"]))

    # -------------------------------------- token --------------------------------------
    def authenticate(self, token: str | None) -> Identity:
        """Resolve a bearer token to its identity; every failure looks the same."""
        try:
            return decode_token(token or "", secret=self.settings.jwt_secret)
        except TokenInvalidError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise AuthenticationError() from exc
