"""Build the list query sent to GET /api/games."""

from enum import Enum
from typing import Any

from game_vault.models import ALL, FilterState, PageState

QUERY_FIELDS = ("status", "platform", "q", "page", "limit")


def _wire(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def build_query(
    filters: FilterState,
    pagination: PageState,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Derive request parameters from the current view state.

    Any key in ``overrides`` wins over the state, so a caller can force
    ``page=1`` without committing the state change first. Filters set to
    "all" and an empty search are left out entirely; ``page`` and ``limit``
    are always present.
    """
    overrides = overrides or {}
    unknown = set(overrides) - set(QUERY_FIELDS)
    if unknown:
        raise TypeError(f"Unknown query override(s): {', '.join(sorted(unknown))}")

    status = _wire(overrides.get("status", filters.status))
    platform = _wire(overrides.get("platform", filters.platform))
    search = overrides.get("q", filters.q)

    params: dict[str, Any] = {}
    if status and status != ALL:
        params["status"] = status
    if platform and platform != ALL:
        params["platform"] = platform
    if search:
        params["q"] = search
    params["page"] = int(overrides.get("page", pagination.page))
    params["limit"] = int(overrides.get("limit", pagination.limit))
    return params
