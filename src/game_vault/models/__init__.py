"""Data models for GameVault."""

from game_vault.models.game import (
    ALL,
    ALLOWED_LIMITS,
    DEFAULT_LIMIT,
    EntryId,
    EntrySyncState,
    FilterState,
    GameEntry,
    ListResult,
    PageState,
    Platform,
    Status,
    VaultPhase,
    VaultState,
)

__all__ = [
    # Constants
    "ALL",
    "ALLOWED_LIMITS",
    "DEFAULT_LIMIT",
    # Entries
    "EntryId",
    "GameEntry",
    "ListResult",
    "Platform",
    "Status",
    # View state
    "EntrySyncState",
    "FilterState",
    "PageState",
    "VaultPhase",
    "VaultState",
]
