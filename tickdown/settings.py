"""JSON-backed storage for timers and window settings.

Errors never leave this module: a failed load yields an empty result and a
failed save is logged and reported as False. The in-memory state stays
authoritative and the next successful save catches the file up.
"""
import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from . import config
from .models import CountdownTimer, WindowSettings

_LOGGER = logging.getLogger(__name__)


class SettingsStore:
    def __init__(self, folder: Optional[Path] = None):
        self.folder = Path(folder) if folder else config.data_dir()
        self.timers_path = self.folder / config.TIMERS_FILE
        self.window_path = self.folder / config.WINDOW_FILE

    # ----- timers -----

    def load_timers(self) -> List[CountdownTimer]:
        data = self._load(self.timers_path)
        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("timers", [])
        if not isinstance(data, list):
            _LOGGER.error("Ignoring %s: expected a list of timers", self.timers_path)
            return []

        timers = []
        for i, record in enumerate(data):
            try:
                timers.append(CountdownTimer.from_dict(record))
            except (KeyError, ValueError, TypeError, AttributeError, OverflowError) as e:
                _LOGGER.error("Skipping malformed timer record #%d: %s", i, e)
        _LOGGER.debug("Loaded %d timers from %s", len(timers), self.timers_path)
        return timers

    def save_timers(self, timers: Iterable[CountdownTimer]) -> bool:
        return self._save(self.timers_path, [t.to_dict() for t in timers])

    # ----- window -----

    def load_window_settings(self) -> Optional[WindowSettings]:
        data = self._load(self.window_path)
        if not isinstance(data, dict):
            return None
        try:
            return WindowSettings.from_dict(data)
        except (ValueError, TypeError, OverflowError) as e:
            _LOGGER.error("Ignoring malformed window settings: %s", e)
            return None

    def save_window_settings(self, settings: WindowSettings) -> bool:
        return self._save(self.window_path, settings.to_dict())

    # ----- file access -----

    def _load(self, path: Path):
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            _LOGGER.warning("Could not read %s: %s", path, e)
            return None

    def _save(self, path: Path, data) -> bool:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            self.folder.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            _LOGGER.warning("Could not write %s: %s", path, e)
            return False
        return True
