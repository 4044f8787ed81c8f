"""
Persisted user preferences (simulation rate).

The clock never touches storage directly: it receives a ClockSettings record
at construction and a persistence callback for rate changes.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from neorisk.config.settings import (
    DEFAULT_RATE,
    PREFERENCES_FILE,
    RATE_STORAGE_KEY,
    clamp_rate,
    output_path,
    rate_label,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockSettings:
    rate_multiplier: float = DEFAULT_RATE

    @property
    def label(self) -> Optional[str]:
        return rate_label(self.rate_multiplier)


class JsonPreferenceStore:
    """Flat key/value JSON file. Unreadable files are treated as empty."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or output_path(PREFERENCES_FILE))

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Preferences file %s unreadable, starting fresh.", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Preferences content not a dict; starting fresh.")
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to write preferences: %s", e)


def load_clock_settings(store: JsonPreferenceStore) -> ClockSettings:
    saved = store.get(RATE_STORAGE_KEY)
    rate = clamp_rate(saved)
    if saved is not None and rate_label(rate) is None:
        logger.info("Restored non-preset simulation rate %s", rate)
    return ClockSettings(rate_multiplier=rate)


def rate_persister(store: JsonPreferenceStore) -> Callable[[float], None]:
    def _persist(rate: float) -> None:
        store.set(RATE_STORAGE_KEY, str(float(rate)))
    return _persist
