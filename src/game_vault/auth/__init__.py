"""Authentication state shared by the vault view."""

from game_vault.auth.session import AuthEvent, AuthSession, Subscription

__all__ = ["AuthEvent", "AuthSession", "Subscription"]
