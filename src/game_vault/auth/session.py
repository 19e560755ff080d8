"""Auth session: owns the bearer token and tells observers about login/logout."""

import logging
from collections.abc import Callable
from enum import Enum

from game_vault.storage import Storage

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    """Signals emitted by the session."""

    LOGIN = "login"
    LOGOUT = "logout"


AuthListener = Callable[[AuthEvent], None]


class Subscription:
    """Handle returned by ``AuthSession.subscribe``; close it to stop listening."""

    def __init__(self, session: "AuthSession", event: AuthEvent, listener: AuthListener):
        self._session = session
        self.event = event
        self.listener = listener
        self.active = True

    def close(self) -> None:
        if self.active:
            self._session._remove(self)
            self.active = False

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class AuthSession:
    """The current user's credential plus explicit login/logout observers."""

    def __init__(self, storage: Storage | None = None):
        """Initialize the session.

        Args:
            storage: Where the token is persisted. Without one the session
                lives in memory only.
        """
        self._storage = storage
        self._token = storage.load_token() if storage else None
        self._subscriptions: list[Subscription] = []

    def get_credential(self) -> str | None:
        """Current bearer token, or None when logged out."""
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def login(self, token: str) -> None:
        """Adopt a freshly issued token and notify observers."""
        if not token:
            raise ValueError("token must be non-empty")
        self._token = token
        if self._storage:
            self._storage.save_token(token)
        self._emit(AuthEvent.LOGIN)

    def logout(self) -> None:
        """Drop the token and notify observers."""
        self._token = None
        if self._storage:
            self._storage.clear_token()
        self._emit(AuthEvent.LOGOUT)

    def subscribe(self, event: AuthEvent, listener: AuthListener) -> Subscription:
        """Register ``listener`` for one event; returns the handle that removes it."""
        subscription = Subscription(self, AuthEvent(event), listener)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _emit(self, event: AuthEvent) -> None:
        logger.info("Auth signal: %s", event.value)
        # Copy: a listener may unsubscribe while we iterate
        for subscription in list(self._subscriptions):
            if subscription.event == event:
                subscription.listener(event)
