"""Core data models for game entries and the vault view state."""

import math
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Page sizes offered by the vault view
ALLOWED_LIMITS = (4, 8, 12)
DEFAULT_LIMIT = 8

# Sentinel meaning "no filter applied" for a dimension
ALL = "all"

EntryId = int | str


class Platform(str, Enum):
    """Gaming platforms an entry can belong to."""

    PS5 = "PS5"
    PC = "PC"
    SWITCH = "Switch"
    XBOX = "Xbox"


class Status(str, Enum):
    """Play status of an entry."""

    BACKLOG = "backlog"
    PLAYING = "playing"
    FINISHED = "finished"


class EntrySyncState(str, Enum):
    """Whether the local copy of an entry is server truth or an optimistic guess."""

    CONFIRMED = "confirmed"
    PENDING_OPTIMISTIC = "pending_optimistic"


class VaultPhase(str, Enum):
    """Lifecycle of the synchronizer's view."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


# =============================================================================
# Game Entries
# =============================================================================


class GameEntry(BaseModel):
    """A game in the user's vault, as projected from the server."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    id: EntryId | None = None  # Server-assigned, absent until created
    title: str
    platform: Platform = Platform.PS5
    status: Status = Status.BACKLOG
    hours_played: int = Field(default=0, ge=0, alias="hoursPlayed")
    favorite: bool = False

    def to_payload(self, include_id: bool = True) -> dict:
        """Serialize to the wire format (camelCase, JSON-safe)."""
        exclude = {"id"} if not include_id or self.id is None else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class ListResult(BaseModel):
    """One page of entries plus the server's count for the whole query."""

    entries: tuple[GameEntry, ...] = ()
    total: int = Field(default=0, ge=0)


# =============================================================================
# View State
# =============================================================================


class FilterState(BaseModel):
    """Active filters. "all" disables a dimension, an empty q disables search."""

    model_config = ConfigDict(frozen=True)

    status: Status | Literal["all"] = ALL
    platform: Platform | Literal["all"] = ALL
    q: str = ""


class PageState(BaseModel):
    """Pagination position and the server-reported total."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = DEFAULT_LIMIT
    total: int = Field(default=0, ge=0)

    @property
    def total_pages(self) -> int:
        """Number of pages for the current total, never less than one."""
        return max(1, math.ceil(self.total / self.limit))

    def clamp(self, page: int) -> int:
        """Clamp a page number into [1, total_pages]."""
        return min(max(1, page), self.total_pages)


class VaultState(BaseModel):
    """Everything the vault view renders. Replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    games: tuple[GameEntry, ...] = ()
    filters: FilterState = Field(default_factory=FilterState)
    pagination: PageState = Field(default_factory=PageState)
    loading: bool = False
    error: str | None = None
    pending: frozenset[EntryId] = frozenset()
    loaded: bool = False  # At least one sync has settled

    @property
    def phase(self) -> VaultPhase:
        if self.loading:
            return VaultPhase.LOADING
        if self.error is not None:
            return VaultPhase.FAILED
        if self.loaded:
            return VaultPhase.READY
        return VaultPhase.IDLE

    def find(self, entry_id: EntryId) -> GameEntry | None:
        """Return the entry with this id on the current page, if any."""
        return next((g for g in self.games if g.id == entry_id), None)

    def sync_state(self, entry_id: EntryId) -> EntrySyncState:
        if entry_id in self.pending:
            return EntrySyncState.PENDING_OPTIMISTIC
        return EntrySyncState.CONFIRMED
