"""Vault synchronizer: one page of the user's vault, kept in step with the server.

The synchronizer is a read-through, write-through cache of a single page. It
owns the view state (entries, filters, pagination, loading/error), turns view
changes into list requests, and applies create/edit/delete/favorite mutations.

Only the response to the most recent list request is allowed to commit; an
older response that arrives late is dropped.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from game_vault.api import GameVaultClient
from game_vault.auth import AuthEvent, AuthSession
from game_vault.errors import GameVaultAPIError, InconsistentStateError, ValidationError
from game_vault.i18n import describe_error
from game_vault.models import (
    ALLOWED_LIMITS,
    DEFAULT_LIMIT,
    EntryId,
    FilterState,
    GameEntry,
    PageState,
    VaultState,
)
from game_vault.query import build_query

logger = logging.getLogger(__name__)

Alert = Callable[[str], None]
StateListener = Callable[[VaultState], None]


def validate_entry(entry: GameEntry) -> GameEntry:
    """Return the entry with a trimmed title; reject an empty one."""
    title = entry.title.strip()
    if not title:
        raise ValidationError("entry.title_required")
    return entry.model_copy(update={"title": title})


def _log_alert(message: str) -> None:
    logger.warning("Alert: %s", message)


@dataclass(frozen=True)
class PendingToggle:
    """An in-flight favorite toggle and the page it would roll back to."""

    entry_id: EntryId
    snapshot: tuple[GameEntry, ...]
    optimistic: GameEntry


class VaultSynchronizer:
    """Owns the vault view state and keeps it consistent with the server."""

    def __init__(
        self,
        client: GameVaultClient,
        session: AuthSession,
        limit: int = DEFAULT_LIMIT,
        alert: Alert | None = None,
        on_change: StateListener | None = None,
        language: str | None = None,
    ):
        """Initialize the synchronizer and subscribe to the session's signals.

        Args:
            client: Games API client.
            session: Supplies the credential and login/logout signals.
            limit: Initial page size, one of ALLOWED_LIMITS.
            alert: Shows a mutation failure to the user. Defaults to logging.
            on_change: Called with every new state (the re-render hook).
            language: Language for user-facing messages.
        """
        _check_limit(limit)
        self._client = client
        self._session = session
        self._alert = alert or _log_alert
        self._on_change = on_change
        self._language = language

        self._state = VaultState(pagination=PageState(limit=limit))
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()
        self._subscriptions = [
            session.subscribe(AuthEvent.LOGIN, self._on_auth_signal),
            session.subscribe(AuthEvent.LOGOUT, self._on_auth_signal),
        ]

    @property
    def state(self) -> VaultState:
        return self._state

    # =========================================================================
    # Reconciliation
    # =========================================================================

    async def sync(self, **overrides: Any) -> VaultState:
        """Fetch the page described by the state (plus ``overrides``) and commit it.

        Failures leave the previous entries visible and set ``error``. A
        response is discarded if another sync started after this one.
        """
        query = build_query(self._state.filters, self._state.pagination, overrides)
        filters = self._filters(
            **{k: overrides[k] for k in ("status", "platform", "q") if k in overrides}
        )
        self._generation += 1
        generation = self._generation
        self._commit(loading=True, error=None)

        try:
            result = await self._client.list(query, self._session.get_credential())
        except GameVaultAPIError as e:
            if generation != self._generation:
                logger.debug("Dropping failure of superseded request #%d", generation)
                return self._state
            logger.error("Failed to load games %s: %s", query, e)
            return self._commit(
                loading=False, error=describe_error(e, "load", self._language), loaded=True
            )

        if generation != self._generation:
            logger.debug("Dropping stale response of request #%d", generation)
            return self._state

        pagination = PageState(page=query["page"], limit=query["limit"], total=result.total)
        return self._commit(
            games=result.entries,
            filters=filters,
            pagination=pagination,
            loading=False,
            error=None,
            loaded=True,
        )

    # =========================================================================
    # View changes
    # =========================================================================

    async def set_status_filter(self, status: str) -> VaultState:
        return await self._change_dimension(filters=self._filters(status=status))

    async def set_platform_filter(self, platform: str) -> VaultState:
        return await self._change_dimension(filters=self._filters(platform=platform))

    async def set_search(self, q: str) -> VaultState:
        return await self._change_dimension(filters=self._filters(q=q))

    async def set_limit(self, limit: int) -> VaultState:
        _check_limit(limit)
        return await self._change_dimension(limit=limit)

    async def set_page(self, page: int) -> VaultState:
        """Go to ``page``, clamped into the known page range."""
        pagination = self._state.pagination
        self._commit(pagination=pagination.model_copy(update={"page": pagination.clamp(page)}))
        return await self.sync()

    async def next_page(self) -> VaultState:
        return await self.set_page(self._state.pagination.page + 1)

    async def previous_page(self) -> VaultState:
        return await self.set_page(self._state.pagination.page - 1)

    async def _change_dimension(
        self, filters: FilterState | None = None, limit: int | None = None
    ) -> VaultState:
        # A new filter, search or page size makes the old page number meaningless
        update: dict[str, Any] = {"page": 1}
        if limit is not None:
            update["limit"] = limit
        self._commit(
            filters=filters or self._state.filters,
            pagination=self._state.pagination.model_copy(update=update),
        )
        return await self.sync()

    def _filters(self, **changes: Any) -> FilterState:
        try:
            return FilterState.model_validate({**self._state.filters.model_dump(), **changes})
        except PydanticValidationError as e:
            value = next(iter(changes.values()), None)
            raise ValidationError("entry.invalid_filter", value=value) from e

    # =========================================================================
    # Mutations
    # =========================================================================

    async def save(self, entry: GameEntry) -> bool:
        """Create (no id) or replace (with id) an entry, then refresh.

        New entries jump the view back to page 1; edits keep the current page.

        Raises:
            ValidationError: The title is empty. Nothing is sent.
        """
        entry = validate_entry(entry)
        credential = self._session.get_credential()
        try:
            if entry.id is None:
                created = await self._client.create(entry, credential)
            else:
                saved = await self._client.update(entry.id, entry, credential)
        except GameVaultAPIError as e:
            logger.error("Failed to save %r: %s", entry.title, e)
            self._alert(describe_error(e, "save", self._language))
            return False

        if entry.id is None:
            logger.info("Created entry %s (%s)", created.id, created.title)
            self._commit(pagination=self._state.pagination.model_copy(update={"page": 1}))
            await self.sync(page=1)
        else:
            self._adopt(entry.id, saved)
            await self.sync()
        return True

    async def delete(self, entry_id: EntryId, confirmed: bool = False) -> bool:
        """Delete an entry the user has confirmed, then refresh.

        Deleting the last row of a page other than the first moves back one
        page so the view is never left on an empty page.
        """
        if not confirmed:
            logger.info("Delete of entry %s not confirmed, skipping", entry_id)
            return False

        remaining = sum(1 for g in self._state.games if g.id != entry_id)
        page = self._state.pagination.page
        try:
            await self._client.remove(entry_id, self._session.get_credential())
        except GameVaultAPIError as e:
            logger.error("Failed to delete entry %s: %s", entry_id, e)
            self._alert(describe_error(e, "delete", self._language))
            return False

        logger.info("Deleted entry %s", entry_id)
        if remaining <= 0 and page > 1:
            self._commit(pagination=self._state.pagination.model_copy(update={"page": page - 1}))
            await self.sync(page=page - 1)
        else:
            await self.sync()

        # The total may have shrunk by more than one row
        pagination = self._state.pagination
        if self._state.error is None and pagination.page > pagination.total_pages:
            self._commit(pagination=pagination.model_copy(update={"page": pagination.total_pages}))
            await self.sync(page=pagination.total_pages)
        return True

    async def toggle_favorite(self, entry_id: EntryId) -> bool:
        """Flip an entry's favorite flag right away, then confirm with the server.

        On failure the whole page is restored to what it was before the flip.
        """
        target = self._state.find(entry_id)
        if target is None:
            logger.warning("Cannot toggle favorite: entry %s is not on this page", entry_id)
            return False

        optimistic = target.model_copy(update={"favorite": not target.favorite})
        toggle = PendingToggle(entry_id=entry_id, snapshot=self._state.games, optimistic=optimistic)
        self._commit(
            games=tuple(optimistic if g.id == entry_id else g for g in toggle.snapshot),
            pending=self._state.pending | {entry_id},
        )

        try:
            confirmed = await self._client.update(
                entry_id, toggle.optimistic, self._session.get_credential()
            )
        except GameVaultAPIError as e:
            logger.warning("Favorite toggle of %s failed, rolling back: %s", entry_id, e)
            self._commit(games=toggle.snapshot, pending=self._state.pending - {entry_id})
            self._alert(describe_error(e, "favorite", self._language))
            return False

        self._adopt(entry_id, confirmed)
        return True

    def _adopt(self, entry_id: EntryId, entry: GameEntry) -> None:
        """Replace one entry with the server's copy, leaving the others alone."""
        try:
            games = _merged(self._state.games, entry_id, entry)
        except InconsistentStateError as e:
            logger.warning("%s; nothing to merge", e)
            games = self._state.games
        self._commit(games=games, pending=self._state.pending - {entry_id})

    # =========================================================================
    # Auth signals and lifecycle
    # =========================================================================

    def _on_auth_signal(self, event: AuthEvent) -> None:
        logger.info("Refreshing vault after %s", event.value)
        task = asyncio.get_running_loop().create_task(self.sync())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait for refreshes scheduled by auth signals to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        """Stop listening to auth signals and cancel scheduled refreshes."""
        for subscription in self._subscriptions:
            subscription.close()
        for task in list(self._tasks):
            task.cancel()

    async def __aenter__(self):
        await self.sync()
        return self

    async def __aexit__(self, *args):
        self.close()

    def _commit(self, **changes: Any) -> VaultState:
        self._state = self._state.model_copy(update=changes)
        if self._on_change:
            self._on_change(self._state)
        return self._state


def _check_limit(limit: int) -> None:
    if limit not in ALLOWED_LIMITS:
        raise ValidationError(
            "entry.invalid_limit", choices=", ".join(str(n) for n in ALLOWED_LIMITS)
        )


def _merged(
    games: tuple[GameEntry, ...], entry_id: EntryId, entry: GameEntry
) -> tuple[GameEntry, ...]:
    if not any(g.id == entry_id for g in games):
        raise InconsistentStateError(f"Entry {entry_id} left the page before its update returned")
    return tuple(entry if g.id == entry_id else g for g in games)
