"""GameVault authentication API client (login / register)."""

import logging

from game_vault.api.client import BaseAPIClient
from game_vault.errors import (
    AutoLoginError,
    GameVaultAPIError,
    ResponseFormatError,
    ValidationError,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"

MIN_PASSWORD_LENGTH = 6


def validate_login(email: str, password: str) -> None:
    """Reject empty login fields before hitting the server."""
    if not email or not password:
        raise ValidationError("auth.missing_credentials")


def validate_signup(name: str, email: str, password: str, password_confirm: str) -> None:
    """Client-side checks done before creating an account."""
    if not name.strip():
        raise ValidationError("auth.name_required")
    if not email.strip():
        raise ValidationError("auth.email_required")
    if not password:
        raise ValidationError("auth.password_required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("auth.password_too_short")
    if password != password_confirm:
        raise ValidationError("auth.password_mismatch")


class AuthClient(BaseAPIClient):
    """Client for the account endpoints. Tokens are handed back, not stored."""

    async def login(self, email: str, password: str) -> str:
        """Exchange email/password for a bearer token."""
        validate_login(email, password)
        response = await self._request(
            "POST", LOGIN_PATH, json={"email": email, "password": password}
        )
        body = self._json(response)
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise ResponseFormatError("Login response carries no token")
        logger.info("Logged in as %s", email)
        return token

    async def register(self, name: str, email: str, password: str) -> None:
        """Create an account."""
        await self._request(
            "POST",
            REGISTER_PATH,
            json={"name": name, "email": email, "password": password},
        )
        logger.info("Registered account for %s", email)

    async def sign_up(
        self, name: str, email: str, password: str, password_confirm: str
    ) -> str:
        """Register, then log in with the same credentials.

        Returns:
            The bearer token from the automatic login.

        Raises:
            ValidationError: A field failed the client-side checks.
            AutoLoginError: The account exists but the login right after failed.
        """
        validate_signup(name, email, password, password_confirm)
        await self.register(name, email, password)
        try:
            return await self.login(email, password)
        except GameVaultAPIError as e:
            logger.warning("Automatic login after signup failed: %s", e)
            raise AutoLoginError(e) from e
