import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from .clock import TickSource
from .entry import PERSISTED_FIELDS, TimerEntry
from .models import CountdownTimer

_LOGGER = logging.getLogger(__name__)


class TimerCollection(QObject):
    """Owns every timer, wires each to the shared tick and keeps storage in sync."""
    timer_added = Signal(object)
    timer_removed = Signal(str)
    timer_changed = Signal(str, str)

    def __init__(self, ticks: TickSource, store, audio,
                 clock: Callable[[], datetime] = datetime.now, parent=None):
        super().__init__(parent)
        self.ticks = ticks
        self.store = store
        self.audio = audio
        self._clock = clock
        self.entries: List[TimerEntry] = []
        self._loading = False

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(list(self.entries))

    def get(self, timer_id: str) -> Optional[TimerEntry]:
        for entry in self.entries:
            if entry.id == timer_id:
                return entry
        return None

    def load_or_seed(self):
        self._loading = True
        try:
            timers = self.store.load_timers()
            if timers:
                for model in timers:
                    self.add(model)
            else:
                self.add()
        finally:
            self._loading = False
        _LOGGER.info("Timer collection ready with %d timers", len(self.entries))

    def add(self, model: Optional[CountdownTimer] = None) -> TimerEntry:
        entry = TimerEntry(self.audio, model, clock=self._clock, parent=self)
        if self.get(entry.id) is not None:
            # Duplicate ids in storage; identity must stay unique
            entry.model.id = CountdownTimer().id

        entry.changed.connect(self._on_entry_changed)
        entry.remove_requested.connect(self.remove)
        self.ticks.subscribe(entry.id, entry.on_tick)

        self.entries.append(entry)
        self.timer_added.emit(entry)
        self.save()
        return entry

    def remove(self, timer_id: str) -> bool:
        entry = self.get(timer_id)
        if entry is None:
            return False

        self.ticks.unsubscribe(timer_id)
        entry.changed.disconnect(self._on_entry_changed)
        entry.remove_requested.disconnect(self.remove)
        entry.alarm.dismiss()

        self.entries.remove(entry)
        self.timer_removed.emit(timer_id)
        entry.deleteLater()
        self.save()
        return True

    def close(self):
        for entry in self.entries:
            self.ticks.unsubscribe(entry.id)
            entry.alarm.dismiss()

    def snapshots(self) -> List[CountdownTimer]:
        return [entry.model for entry in self.entries]

    def save(self) -> bool:
        if self._loading:
            return False
        ok = self.store.save_timers(self.snapshots())
        if not ok:
            _LOGGER.debug("Timer save failed; keeping in-memory state")
        return bool(ok)

    def _on_entry_changed(self, timer_id: str, field: str):
        self.timer_changed.emit(timer_id, field)
        if field in PERSISTED_FIELDS:
            self.save()
