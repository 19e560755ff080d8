"""Exception hierarchy shared by the API clients and the synchronizer."""


class GameVaultError(Exception):
    """Base class for all GameVault errors."""

    pass


class ValidationError(GameVaultError):
    """Input rejected locally, before anything is sent to the server.

    ``message_key`` names the i18n message shown to the user and ``params``
    fills its placeholders.
    """

    def __init__(self, message_key: str, **params):
        self.message_key = message_key
        self.params = params
        super().__init__(message_key)


class InconsistentStateError(GameVaultError):
    """An optimistic assumption about local state no longer holds."""

    pass


class GameVaultAPIError(GameVaultError):
    """Error talking to the GameVault API."""

    pass


class NetworkError(GameVaultAPIError):
    """The request never got a response (connection refused, timeout, ...)."""

    pass


class ResponseFormatError(GameVaultAPIError):
    """The server answered 2xx with a body that does not match the schema."""

    pass


class HttpError(GameVaultAPIError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, detail: str | None = None):
        self.status = status
        self.detail = detail
        message = f"HTTP {status}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class NotAuthorizedError(HttpError):
    """401 or 403."""

    pass


class NotAuthenticatedError(NotAuthorizedError):
    """401: no credential, or the credential was rejected."""

    pass


class ForbiddenError(NotAuthorizedError):
    """403: authenticated but not allowed to touch this entry."""

    pass


class NotFoundError(HttpError):
    """404."""

    pass


class AutoLoginError(GameVaultAPIError):
    """Registration succeeded but the follow-up login did not."""

    def __init__(self, cause: GameVaultAPIError):
        self.cause = cause
        super().__init__(f"Registered, but automatic login failed: {cause}")


def error_for_status(status: int, detail: str | None = None) -> HttpError:
    """Build the most specific HttpError for a status code."""
    if status == 401:
        return NotAuthenticatedError(status, detail)
    if status == 403:
        return ForbiddenError(status, detail)
    if status == 404:
        return NotFoundError(status, detail)
    return HttpError(status, detail)
