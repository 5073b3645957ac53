import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from . import config, timefmt
from .alarm import AlarmController
from .models import CountdownTimer, TimerState

_LOGGER = logging.getLogger(__name__)

ALARM_OPTION_FIELDS = (
    "enable_completion_color",
    "completion_color",
    "enable_alarm",
    "alarm_sound",
    "enable_alarm_repeat",
    "alarm_repeat_interval_seconds",
    "alarm_expiration_minutes",
)

# Fields whose change means the persisted snapshot is out of date
PERSISTED_FIELDS = frozenset(("name", "duration", "state", "is_running", "is_paused") + ALARM_OPTION_FIELDS)


class TimerEntry(QObject):
    """One user-visible timer: the model, its alarm and derived display state.

    Every observable change is announced through ``changed(timer_id, field)``.
    """
    changed = Signal(str, str)
    remove_requested = Signal(str)

    def __init__(self, audio, model: Optional[CountdownTimer] = None,
                 clock: Callable[[], datetime] = datetime.now, parent=None):
        super().__init__(parent)
        self._clock = clock
        self.model = model or CountdownTimer(config.DEFAULT_DURATION, name=config.DEFAULT_TIMER_NAME)
        self.alarm = AlarmController(self.model, audio, lambda: self.is_completed, clock=clock, parent=self)

        if self.model.duration > timedelta(0):
            self.hours, self.minutes, self.seconds = timefmt.split_duration(self.model.duration)
        else:
            self.hours, self.minutes, self.seconds = timefmt.split_duration(config.DEFAULT_DURATION)

        self.is_running = False
        self.is_paused = False
        # Restored completed timers show their colour but do not ring again
        self.is_completed = self.model.state == TimerState.COMPLETED
        self.time_display = ""
        self.end_time_display = ""
        self.progress_percentage = self.model.progress_percentage

        self._update_state()
        self._update_time_display()

    @property
    def id(self) -> str:
        return self.model.id

    @property
    def name(self) -> str:
        return self.model.name

    @property
    def state(self) -> TimerState:
        return self.model.state

    @property
    def completion_background(self) -> Optional[str]:
        if self.is_completed and self.model.enable_completion_color:
            if timefmt.is_hex_color(self.model.completion_color):
                return self.model.completion_color
        return None

    @property
    def progress_color(self) -> str:
        return timefmt.blend(config.PROGRESS_START_COLOR, config.PROGRESS_END_COLOR,
                             self.progress_percentage / 100.0)

    # ========= COMMANDS =========

    def start(self):
        model = self.model
        if model.state == TimerState.STOPPED and (
                model.remaining == model.duration or model.remaining <= timedelta(0)):
            duration = timedelta(hours=self.hours, minutes=self.minutes, seconds=self.seconds)
            if duration <= timedelta(0):
                duration = config.DEFAULT_DURATION
                self.hours, self.minutes, self.seconds = timefmt.split_duration(duration)
            changed = duration != model.duration
            model.set_duration(duration)
            if changed:
                self._emit("duration")

        before = model.state
        model.start(self._clock())
        self._after_transition(before)

    def pause(self):
        before = self.model.state
        self.model.pause()
        self._after_transition(before)

    def stop(self):
        self.alarm.dismiss()
        before = self.model.state
        self.model.stop(self._clock())
        self._set_completed(False)
        self._after_transition(before)

    def reset(self):
        self.alarm.dismiss()
        before = self.model.state
        self.model.reset()
        self._set_completed(False)
        self._after_transition(before)

    def dismiss(self):
        self.alarm.dismiss()
        self._set_completed(False)

    def request_remove(self):
        self.alarm.dismiss()
        self.remove_requested.emit(self.id)

    # ========= EDITING =========

    def set_name(self, name: str):
        if name == self.model.name:
            return
        self.model.name = name
        self._emit("name")

    def set_duration_parts(self, hours: int, minutes: int, seconds: int):
        if self.model.state != TimerState.STOPPED:
            return
        parts = (max(0, int(hours)), max(0, int(minutes)), max(0, int(seconds)))
        if parts[0] * 3600 + parts[1] * 60 + parts[2] > config.MAX_DURATION.total_seconds():
            parts = timefmt.split_duration(config.MAX_DURATION)
        if parts == (self.hours, self.minutes, self.seconds):
            return
        self.hours, self.minutes, self.seconds = parts
        self._update_duration()

    def set_time_text(self, text: str) -> bool:
        """Apply typed duration text; unparseable text restores the display."""
        duration = timefmt.parse_duration(text)
        if duration is None or self.model.state != TimerState.STOPPED:
            self._update_time_display(force=True)
            return False
        self.set_duration_parts(*timefmt.split_duration(duration))
        self._update_time_display(force=True)
        return True

    def set_quick_time(self, text: str):
        if self.model.state != TimerState.STOPPED:
            return
        duration = timefmt.parse_duration(text)
        if duration is not None:
            self.set_duration_parts(*timefmt.split_duration(duration))

    def set_end_time(self, target: datetime):
        if self.model.state != TimerState.STOPPED:
            return
        duration = target - self._clock()
        if duration.total_seconds() <= 0:
            return
        self.set_duration_parts(*timefmt.split_duration(duration))

    def set_alarm_option(self, field: str, value):
        """Update one of the alarm/completion settings stored on the model."""
        if field not in ALARM_OPTION_FIELDS:
            raise AttributeError(f"Unknown alarm option: {field}")
        if getattr(self.model, field) == value:
            return
        setattr(self.model, field, value)
        if field in ("enable_alarm", "enable_alarm_repeat") and not value:
            self.alarm.dismiss()
        self._emit(field)
        if field in ("enable_completion_color", "completion_color"):
            self._emit("completion_background")

    # ========= TICK =========

    def on_tick(self):
        if self.model.state != TimerState.RUNNING:
            return
        before = self.model.state
        completed = self.model.tick(self._clock())
        self._update_time_display()
        self._set_progress(self.model.progress_percentage)

        if completed:
            _LOGGER.info("Timer '%s' completed", self.model.name or self.id)
            self._set_completed(True)
            self.alarm.on_completed()
            self._after_transition(before)

    # ========= INTERNALS =========

    def _update_duration(self):
        if self.model.state != TimerState.STOPPED:
            return
        duration = timedelta(hours=self.hours, minutes=self.minutes, seconds=self.seconds)
        self.model.set_duration(duration)
        self._set_progress(self.model.progress_percentage)
        self._update_time_display()
        self._emit("duration")

    def _after_transition(self, before: TimerState):
        if self.model.state != before:
            self._emit("state")
        self._update_state()
        self._set_progress(self.model.progress_percentage)
        self._update_time_display()

    def _update_state(self):
        running = self.model.state == TimerState.RUNNING
        paused = self.model.state == TimerState.PAUSED
        if running != self.is_running:
            self.is_running = running
            self._emit("is_running")
        if paused != self.is_paused:
            self.is_paused = paused
            self._emit("is_paused")

    def _set_completed(self, value: bool):
        if value == self.is_completed:
            return
        self.is_completed = value
        self._emit("is_completed")
        self._emit("completion_background")

    def _set_progress(self, value: float):
        if value == self.progress_percentage:
            return
        self.progress_percentage = value
        self._emit("progress_percentage")

    def _update_time_display(self, force: bool = False):
        model = self.model
        shown = model.duration if (model.state == TimerState.STOPPED
                                   and model.remaining == model.duration) else model.remaining
        text = timefmt.format_duration(shown)
        if text != self.time_display or force:
            self.time_display = text
            self._emit("time_display")

        if model.state in (TimerState.RUNNING, TimerState.PAUSED):
            end_text = timefmt.format_end_time(self._clock() + model.remaining)
        else:
            end_text = ""
        if end_text != self.end_time_display:
            self.end_time_display = end_text
            self._emit("end_time_display")

    def _emit(self, field: str):
        self.changed.emit(self.id, field)

