"""Local persistence."""

from game_vault.storage.local import Storage

__all__ = ["Storage"]
