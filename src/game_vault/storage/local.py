"""Local file-based storage for the session credential."""

import json
import logging
from datetime import datetime
from pathlib import Path

from game_vault.config import DEFAULT_DATA_DIR

logger = logging.getLogger(__name__)


class Storage:
    """File-based storage so a login survives restarts."""

    def __init__(self, data_dir: Path | str | None = None):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.credential_path = self.data_dir / "credential.json"

    def load_token(self) -> str | None:
        """Load the saved bearer token, or None when logged out.

        A corrupted file reads as logged out; the user logs in again.
        """
        if not self.credential_path.exists():
            return None
        try:
            with open(self.credential_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self.credential_path, e)
            return None
        token = data.get("token") if isinstance(data, dict) else None
        return token if isinstance(token, str) and token else None

    def save_token(self, token: str) -> None:
        """Save the bearer token to disk."""
        payload = {"token": token, "saved_at": datetime.now().isoformat()}
        with open(self.credential_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    def clear_token(self) -> None:
        """Forget the saved token."""
        if self.credential_path.exists():
            self.credential_path.unlink()
