"""Message catalogues for the vault: status labels, prompts and error texts.

Catalogues live next to this module as ``<language>.json`` and are nested by
area, and keys are looked up with dots, e.g. ``errors.forbidden``.
"""

import json
import os
from pathlib import Path
from typing import Any

from game_vault.errors import (
    AutoLoginError,
    ForbiddenError,
    GameVaultError,
    HttpError,
    NetworkError,
    NotAuthenticatedError,
    NotFoundError,
    ValidationError,
)

CATALOGUE_DIR = Path(__file__).parent

SUPPORTED_LANGUAGES = {
    "en": "English",
    "fr": "Français",
}

DEFAULT_LANGUAGE = "en"

_catalogues: dict[str, dict[str, Any]] = {}


def load_translations(language: str) -> dict[str, Any]:
    """Return the catalogue for ``language``.

    Unsupported languages share the English catalogue. An unreadable file
    gives an empty catalogue, so lookups fall back to their keys.
    """
    code = language if language in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE
    if code not in _catalogues:
        try:
            raw = (CATALOGUE_DIR / f"{code}.json").read_text(encoding="utf-8")
            _catalogues[code] = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            return {}
    return _catalogues[code]


def get_text(key: str, language: str | None = None, **params) -> str:
    """Look up a message and fill its ``{placeholders}`` from ``params``.

    A key that is missing, or that names a group rather than a message,
    comes back unchanged so the gap shows up on screen.
    """
    node: Any = load_translations(language or get_current_language())
    for part in key.split("."):
        node = node.get(part) if isinstance(node, dict) else None
    if not isinstance(node, str):
        return key
    try:
        return node.format(**params) if params else node
    except KeyError:
        return node


def get_current_language() -> str:
    """The DISPLAY_LANGUAGE setting, or English when it is unset or unsupported."""
    lang = os.getenv("DISPLAY_LANGUAGE", DEFAULT_LANGUAGE)
    return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def status_label(status: Any, language: str | None = None) -> str:
    value = getattr(status, "value", status)
    return get_text(f"status.{value}", language)


def describe_error(exc: Exception, action: str, language: str | None = None) -> str:
    """Turn an exception raised during ``action`` into a message for the user.

    ``action`` is one of: load, save, delete, favorite, login, signup.
    401 and 403 get their own wording; network failures too.
    """
    if isinstance(exc, ValidationError):
        return get_text(exc.message_key, language, **exc.params)
    if isinstance(exc, AutoLoginError):
        return get_text("auth.autologin_failed", language)
    if isinstance(exc, HttpError) and exc.detail and action in ("login", "signup"):
        return exc.detail
    if isinstance(exc, NotAuthenticatedError):
        return get_text("errors.not_authenticated", language)
    if isinstance(exc, ForbiddenError):
        return get_text("errors.forbidden", language)
    if isinstance(exc, NotFoundError) and action == "delete":
        return get_text("errors.not_found", language)
    if isinstance(exc, NetworkError):
        return get_text(f"errors.{action}_network", language)
    if isinstance(exc, GameVaultError):
        return get_text(f"errors.{action}_failed", language)
    return get_text("errors.unexpected", language)
