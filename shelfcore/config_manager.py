from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from shelfcore.key_value_store import is_valid_key
from shelfcore.snippet_codec import CODEC_NAMES


logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "snippets"
DEFAULT_CODEC = "json"


class ConfigManager:
    """Manage user preferences and the storage directory for SnippetShelf."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        # Allow tests to override where preferences are stored.
        self._base = Path(base_dir) if base_dir is not None else Path.home() / ".snippetshelf"
        self._base.mkdir(parents=True, exist_ok=True)
        self._preferences_path = self._base / "preferences.json"
        self._preferences: Dict[str, Any] = self._load_preferences()

    def _load_preferences(self) -> Dict[str, Any]:
        if not self._preferences_path.exists():
            return {}
        try:
            data = json.loads(self._preferences_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences %s: %s", self._preferences_path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_preferences(self) -> None:
        try:
            self._preferences_path.write_text(json.dumps(self._preferences, indent=2), encoding="utf-8")
        except OSError as exc:
            # Best-effort persist; the in-memory value still applies.
            logger.error("Could not save preferences: %s", exc)

    def get_preferences(self) -> Dict[str, Any]:
        return dict(self._preferences)

    def set_preference(self, key: str, value: Any) -> None:
        self._preferences[key] = value
        self._save_preferences()

    def get_data_root(self) -> Path:
        override = self._preferences.get("storageRoot")
        if isinstance(override, str) and override:
            try:
                root = Path(override).expanduser()
                root.mkdir(parents=True, exist_ok=True)
                return root
            except OSError as exc:
                logger.warning("Storage root %s unavailable, using %s: %s", override, self._base, exc)
        self._base.mkdir(parents=True, exist_ok=True)
        return self._base

    def get_storage_key(self) -> str:
        """Slot name the snippet collection is stored under."""
        key = self._preferences.get("storageKey")
        if key is None:
            return DEFAULT_STORAGE_KEY
        if not isinstance(key, str) or not is_valid_key(key):
            logger.warning("Invalid storageKey %r, using '%s'", key, DEFAULT_STORAGE_KEY)
            return DEFAULT_STORAGE_KEY
        return key

    def get_codec_name(self) -> str:
        name = self._preferences.get("codec")
        if name is None:
            return DEFAULT_CODEC
        if not isinstance(name, str) or name.lower() not in CODEC_NAMES:
            logger.warning("Unknown codec %r, using '%s'", name, DEFAULT_CODEC)
            return DEFAULT_CODEC
        return name.lower()
