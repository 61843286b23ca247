"""
Key-value preferences stored in a JSON file.

Holds the dashboard's small pieces of editable, non-content state:
the sidebar collapsed flag, the hero profile block and the "about me" block.
Nothing is cached in memory: every read loads the file and every write
saves it, so several worker processes see the same values.
"""

import json
import os
import tempfile
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

from app.core.config import settings
from app.core.errors import error_boundary

logger = structlog.get_logger(__name__)

DEFAULT_PREFERENCES: Dict[str, Any] = {
    "sidebarCollapsed": False,
    "profile": {
        "name": "",
        "title": "",
        "subtitle": "",
        "ctaText": "",
        "ctaLink": "",
    },
    "aboutMe": {
        "title": "",
        "subtitle": "",
        "profileTitle": "",
        "profileParagraphs": [],
        "skillsTitle": "",
        "skills": [],
    },
}


class PreferencesStore:
    """JSON-file backed key-value store with explicit load/save."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.PREFERENCES_PATH)

    def _read(self) -> Dict[str, Any]:
        """Stored values, {} when there is no file. ValueError when it is not a JSON object."""
        if not self.path.exists():
            return {}
        stored = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(stored, dict):
            raise ValueError(f"expected a JSON object, got {type(stored).__name__}")
        return stored

    def load(self) -> Dict[str, Any]:
        """Return defaults overlaid with whatever the file holds."""
        merged = deepcopy(DEFAULT_PREFERENCES)
        with error_boundary("load_preferences", path=str(self.path)):
            merged.update(self._read())
        return merged

    def _set_aside(self, reason: str) -> None:
        corrupt = self.path.with_name(self.path.name + ".corrupt")
        os.replace(self.path, corrupt)
        logger.warning(
            "Unreadable preferences file moved aside", path=str(self.path), moved_to=str(corrupt), reason=reason
        )

    def save(self, values: Dict[str, Any]) -> None:
        """Write all values, replacing the file atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".preferences-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(values, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> Dict[str, Any]:
        values = deepcopy(DEFAULT_PREFERENCES)
        try:
            values.update(self._read())
        except ValueError as e:
            # Saved as <name>.corrupt, never overwritten in place
            self._set_aside(str(e))
        values[key] = value
        self.save(values)
        logger.info("Preference saved", key=key)
        return values


def get_preferences_store() -> PreferencesStore:
    return PreferencesStore()
