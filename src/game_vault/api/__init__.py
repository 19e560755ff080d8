"""HTTP clients for the GameVault API."""

from game_vault.api.auth import AuthClient, validate_login, validate_signup
from game_vault.api.client import GameVaultClient

__all__ = ["AuthClient", "GameVaultClient", "validate_login", "validate_signup"]
