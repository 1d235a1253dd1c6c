"""
State management for user preferences.
"""

__all__ = ["StateManager"]

import json
import logging
from pathlib import Path
from typing import Any

from pipeboard.infra.paths import STATE_PATH

logger = logging.getLogger(__name__)


class StateManager:
    """Persists lightweight dashboard preferences.

    This class reads and writes a small JSON file holding the last
    selected pipeline location.
    """

    def __init__(self, path: Path = STATE_PATH) -> None:
        """Initialize the state manager.

        Args:
            path: Path to the JSON file used for storing state.
        """
        self._path = path
        self._data = self._load()

    def get_location(self, default: str) -> str:
        """Return the last selected location.

        Args:
            default: Value returned when no location was stored.
        """
        location = self._data.get("location")
        return location if isinstance(location, str) and location else default

    def set_location(self, location: str) -> None:
        """Set and persist the selected location."""
        self._data["location"] = location
        self._save()

    def _load(self) -> dict[str, Any]:
        """Load state data from disk.

        Returns:
            dict[str, Any]: Parsed state data. Returns an empty dict if the
            state file does not exist or contains invalid JSON.
        """
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        """Persist current state to disk.

        Ensures the parent directory exists, then writes the JSON file.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(self._data, ensure_ascii=False, indent=2)
        self._path.write_text(content, encoding="utf-8")
