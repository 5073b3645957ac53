import logging
from typing import Callable, Dict, Hashable

from PySide6.QtCore import QObject, QTimer, Signal

from . import config

_LOGGER = logging.getLogger(__name__)


class TickSource(QObject):
    """Process-wide heartbeat shared by every timer.

    Listeners are kept in an explicit registry keyed by the caller's handle so
    they can be released deterministically instead of waiting on garbage
    collection. The QTimer lives on the GUI thread, so every tick is delivered
    there.
    """
    ticked = Signal()

    def __init__(self, interval_ms: int = config.TICK_INTERVAL_MS, parent=None):
        super().__init__(parent)
        self._listeners: Dict[Hashable, Callable[[], None]] = {}

        self.ticker = QTimer(self)
        self.ticker.setInterval(interval_ms)
        self.ticker.timeout.connect(self.ticked.emit)

    def start(self):
        self.ticker.start()

    def stop(self):
        self.ticker.stop()
        for key in list(self._listeners):
            self.unsubscribe(key)

    def is_active(self) -> bool:
        return self.ticker.isActive()

    def subscribe(self, key: Hashable, callback: Callable[[], None]):
        if key in self._listeners:
            self.unsubscribe(key)
        self._listeners[key] = callback
        self.ticked.connect(callback)

    def unsubscribe(self, key: Hashable) -> bool:
        callback = self._listeners.pop(key, None)
        if callback is None:
            return False
        try:
            self.ticked.disconnect(callback)
        except (RuntimeError, TypeError) as e:
            _LOGGER.warning("Tick listener %s was already disconnected: %s", key, e)
        return True

    def listener_count(self) -> int:
        return len(self._listeners)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._listeners
