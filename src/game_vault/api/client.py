"""GameVault games API client.

Endpoints (relative to GAME_VAULT_API_BASE):
    GET    /api/games?status=&platform=&q=&page=&limit=
    POST   /api/games
    PUT    /api/games/{id}
    DELETE /api/games/{id}

The list endpoint answers ``{"data": [...], "meta": {"total": N}}``; that is
the only shape accepted.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from game_vault.config import DEFAULT_API_BASE, DEFAULT_TIMEOUT, Settings
from game_vault.errors import NetworkError, ResponseFormatError, error_for_status
from game_vault.models import EntryId, GameEntry, ListResult

logger = logging.getLogger(__name__)

GAMES_PATH = "/api/games"


class _ListMeta(BaseModel):
    total: int = Field(ge=0)


class _ListResponse(BaseModel):
    data: list[GameEntry]
    meta: _ListMeta


def auth_headers(credential: str | None) -> dict[str, str]:
    """Bearer header for a credential, or nothing when logged out."""
    return {"Authorization": f"Bearer {credential}"} if credential else {}


def error_detail(response: httpx.Response) -> str | None:
    """Pull the server's ``{"error": ...}`` message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message")
        return str(detail) if detail else None
    return None


class BaseAPIClient:
    """Shared request plumbing for the GameVault API clients."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root. Defaults to GAME_VAULT_API_BASE's default.
            timeout: Request timeout in seconds.
            http_client: Pre-built client (e.g. with a mock transport). When
                given, the caller owns it and ``close()`` leaves it open.
        """
        self.base_url = (base_url or DEFAULT_API_BASE).rstrip("/")
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs):
        return cls(base_url=settings.api_base, timeout=settings.timeout, **kwargs)

    async def _request(
        self,
        method: str,
        path: str,
        credential: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request; map any httpx request failure and non-2xx statuses to our errors."""
        url = f"{self.base_url}{path}"
        headers = {**kwargs.pop("headers", {}), **auth_headers(credential)}
        try:
            response = await self._http_client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            logger.warning("%s %s -> HTTP %s", method, url, response.status_code)
            raise error_for_status(response.status_code, error_detail(response))

        logger.debug("%s %s -> HTTP %s", method, url, response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Response is not JSON: {e}") from e

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._http_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()


class GameVaultClient(BaseAPIClient):
    """Client for the games collection endpoints."""

    async def list(self, query: dict[str, Any], credential: str | None = None) -> ListResult:
        """Fetch one page of entries.

        Args:
            query: Parameters from ``build_query``.
            credential: Bearer token; the listing is also requested without one.

        Returns:
            ListResult with the page's entries and the query's total.
        """
        response = await self._request("GET", GAMES_PATH, credential, params=query)
        try:
            body = _ListResponse.model_validate(self._json(response))
        except PydanticValidationError as e:
            raise ResponseFormatError(f"Unexpected list response: {e}") from e
        return ListResult(entries=tuple(body.data), total=body.meta.total)

    async def create(self, entry: GameEntry, credential: str | None = None) -> GameEntry:
        """Create an entry. The server assigns the id; any local id is dropped."""
        response = await self._request(
            "POST", GAMES_PATH, credential, json=entry.to_payload(include_id=False)
        )
        return self._entry(response)

    async def update(
        self, entry_id: EntryId, entry: GameEntry, credential: str | None = None
    ) -> GameEntry:
        """Replace an entry (PUT) and return the server's canonical copy."""
        payload = entry.model_copy(update={"id": entry_id}).to_payload()
        response = await self._request(
            "PUT", f"{GAMES_PATH}/{entry_id}", credential, json=payload
        )
        return self._entry(response)

    async def remove(self, entry_id: EntryId, credential: str | None = None) -> None:
        """Delete an entry. 401/403/404 raise their specific HttpError subclasses."""
        await self._request("DELETE", f"{GAMES_PATH}/{entry_id}", credential)

    def _entry(self, response: httpx.Response) -> GameEntry:
        try:
            return GameEntry.model_validate(self._json(response))
        except PydanticValidationError as e:
            raise ResponseFormatError(f"Unexpected entry response: {e}") from e
