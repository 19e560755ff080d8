"""The vault view: state synchronization with the games API."""

from game_vault.vault.synchronizer import PendingToggle, VaultSynchronizer, validate_entry

__all__ = ["PendingToggle", "VaultSynchronizer", "validate_entry"]
