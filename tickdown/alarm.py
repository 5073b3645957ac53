import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from . import config
from .models import CountdownTimer

_LOGGER = logging.getLogger(__name__)


class AlarmState(str, Enum):
    IDLE = "Idle"
    ACTIVE = "AlarmActive"


class AlarmController(QObject):
    """Plays a timer's alarm on completion and, optionally, repeats it.

    Each controller owns a private repeat clock, so repeating alarms on
    different timers start and stop independently. ``is_completed`` is asked
    on every repeat so the alarm falls silent as soon as the completed flag
    is cleared elsewhere.
    """
    state_changed = Signal(str)

    def __init__(self, model: CountdownTimer, audio, is_completed: Callable[[], bool],
                 clock: Callable[[], datetime] = datetime.now, parent=None):
        super().__init__(parent)
        self.model = model
        self.audio = audio
        self._is_completed = is_completed
        self._clock = clock
        self.state = AlarmState.IDLE
        self.expiration_time: Optional[datetime] = None

        self.repeat_timer = QTimer(self)
        self.repeat_timer.timeout.connect(self.on_repeat)

    @property
    def is_repeating(self) -> bool:
        return self.repeat_timer.isActive()

    def on_completed(self):
        if not self.model.enable_alarm:
            return
        self._play()
        self._set_state(AlarmState.ACTIVE)

        if self.model.enable_alarm_repeat:
            now = self._clock()
            self.expiration_time = now + timedelta(minutes=self.model.alarm_expiration_minutes)
            interval = max(config.MIN_ALARM_REPEAT_INTERVAL_SEC, self.model.alarm_repeat_interval_seconds)
            self.repeat_timer.setInterval(interval * 1000)
            self.repeat_timer.start()
            _LOGGER.debug("Alarm for '%s' repeats every %ss until %s",
                          self.model.name, interval, self.expiration_time)

    def on_repeat(self):
        if self.expiration_time is not None and self._clock() >= self.expiration_time:
            _LOGGER.debug("Alarm for '%s' expired", self.model.name)
            self.dismiss()
            return

        if self._is_completed() and self.model.enable_alarm:
            self._play()
        else:
            self.dismiss()

    def dismiss(self):
        self.repeat_timer.stop()
        self.expiration_time = None
        self._set_state(AlarmState.IDLE)

    def _play(self):
        try:
            self.audio.play(self.model.alarm_sound)
        except Exception as e:
            # A broken sound must never break the tick handler
            _LOGGER.error("Could not play alarm sound '%s': %s", self.model.alarm_sound, e)

    def _set_state(self, state: AlarmState):
        if self.state == state:
            return
        self.state = state
        self.state_changed.emit(state.value)
