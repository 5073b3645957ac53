import math
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from . import config

ZERO = timedelta(0)


class TimerState(str, Enum):
    STOPPED = "Stopped"
    RUNNING = "Running"
    PAUSED = "Paused"
    COMPLETED = "Completed"


def _new_id() -> str:
    return uuid.uuid4().hex


def _parse_ts(value) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return datetime.fromisoformat(value)


def _parse_seconds(value) -> timedelta:
    seconds = float(value)
    if not math.isfinite(seconds) or abs(seconds) > config.MAX_DURATION.total_seconds():
        raise ValueError(f"Duration out of range: {value!r}")
    return timedelta(seconds=seconds)


# ========= MODEL =========
@dataclass
class CountdownTimer:
    """A single countdown anchored to wall-clock time.

    ``remaining`` is recomputed from ``end_time`` on every tick rather than
    decremented, so missed or late ticks never cause drift.
    """
    duration: timedelta = config.DEFAULT_DURATION
    remaining: Optional[timedelta] = None
    name: str = config.DEFAULT_TIMER_NAME
    state: TimerState = TimerState.STOPPED
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    enable_completion_color: bool = False
    completion_color: str = config.DEFAULT_COMPLETION_COLOR
    enable_alarm: bool = False
    alarm_sound: str = config.DEFAULT_ALARM_SOUND
    enable_alarm_repeat: bool = False
    alarm_repeat_interval_seconds: int = config.DEFAULT_ALARM_REPEAT_INTERVAL_SEC
    alarm_expiration_minutes: int = config.DEFAULT_ALARM_EXPIRATION_MIN

    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        self.duration = min(max(ZERO, self.duration), config.MAX_DURATION)
        if self.remaining is None:
            self.remaining = self.duration
        self.clamp()

    def clamp(self):
        self.remaining = max(ZERO, self.remaining)

    @property
    def progress_percentage(self) -> float:
        total = self.duration.total_seconds()
        if total <= 0:
            return 0.0
        done = (total - self.remaining.total_seconds()) / total * 100
        return max(0.0, min(100.0, done))

    def is_finished(self) -> bool:
        return self.state == TimerState.COMPLETED

    # --- transitions ---

    def set_duration(self, duration: timedelta):
        if self.state != TimerState.STOPPED:
            return
        self.duration = min(max(ZERO, duration), config.MAX_DURATION)
        self.remaining = self.duration

    def start(self, now: Optional[datetime] = None):
        now = now or datetime.now()
        if self.state == TimerState.STOPPED:
            self.start_time = now
            self.end_time = now + self.remaining
        elif self.state == TimerState.PAUSED:
            # Paused time must not count as elapsed
            self.end_time = now + self.remaining
        else:
            return
        self.state = TimerState.RUNNING

    def pause(self):
        if self.state != TimerState.RUNNING:
            return
        # remaining stays at whatever the last tick computed
        self.state = TimerState.PAUSED

    def stop(self, now: Optional[datetime] = None, reset_remaining: Optional[bool] = None):
        if reset_remaining is None:
            reset_remaining = config.STOP_RESETS_REMAINING
        if self.state == TimerState.RUNNING and self.end_time is not None:
            self._recompute(now or datetime.now())
        if reset_remaining:
            self.remaining = self.duration
        self.state = TimerState.STOPPED
        self.start_time = None
        self.end_time = None

    def reset(self):
        self.remaining = self.duration
        self.state = TimerState.STOPPED
        self.start_time = None
        self.end_time = None

    def tick(self, now: Optional[datetime] = None) -> bool:
        """Recompute remaining time. Returns True when this tick completed the timer."""
        if self.state != TimerState.RUNNING or self.end_time is None:
            return False
        self._recompute(now or datetime.now())
        if self.remaining <= ZERO:
            self.remaining = ZERO
            self.state = TimerState.COMPLETED
            return True
        return False

    def _recompute(self, now: datetime):
        self.remaining = self.end_time - now
        self.clamp()

    # --- snapshot ---

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["duration"] = self.duration.total_seconds()
        data["remaining"] = self.remaining.total_seconds()
        data["state"] = self.state.name
        data["start_time"] = self.start_time.isoformat() if self.start_time else None
        data["end_time"] = self.end_time.isoformat() if self.end_time else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CountdownTimer":
        """Build a timer from a snapshot record. Raises on malformed records."""
        duration = _parse_seconds(data["duration"])
        remaining = data.get("remaining")
        timer = cls(
            duration=duration,
            remaining=duration if remaining is None else _parse_seconds(remaining),
            name=str(data.get("name") or ""),
            state=TimerState[data.get("state", TimerState.STOPPED.name)],
            start_time=_parse_ts(data.get("start_time")),
            end_time=_parse_ts(data.get("end_time")),
            enable_completion_color=bool(data.get("enable_completion_color", False)),
            completion_color=data.get("completion_color") or config.DEFAULT_COMPLETION_COLOR,
            enable_alarm=bool(data.get("enable_alarm", False)),
            alarm_sound=data.get("alarm_sound") or config.DEFAULT_ALARM_SOUND,
            enable_alarm_repeat=bool(data.get("enable_alarm_repeat", False)),
            alarm_repeat_interval_seconds=int(
                data.get("alarm_repeat_interval_seconds", config.DEFAULT_ALARM_REPEAT_INTERVAL_SEC)),
            alarm_expiration_minutes=int(
                data.get("alarm_expiration_minutes", config.DEFAULT_ALARM_EXPIRATION_MIN)),
        )
        if data.get("id"):
            timer.id = str(data["id"])
        # A running timer without an anchor cannot be ticked
        if timer.state == TimerState.RUNNING and timer.end_time is None:
            timer.state = TimerState.PAUSED
        return timer


@dataclass
class WindowSettings:
    x: int = 0
    y: int = 0
    width: int = config.DEFAULT_WINDOW_WIDTH
    height: int = config.DEFAULT_WINDOW_HEIGHT
    is_position_set: bool = False
    is_maximized: bool = False
    theme: str = config.THEME_SYSTEM

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WindowSettings":
        theme = data.get("theme", config.THEME_SYSTEM)
        if theme not in config.THEME_CHOICES:
            theme = config.THEME_SYSTEM
        return cls(
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
            width=int(data.get("width", config.DEFAULT_WINDOW_WIDTH)),
            height=int(data.get("height", config.DEFAULT_WINDOW_HEIGHT)),
            is_position_set=bool(data.get("is_position_set", False)),
            is_maximized=bool(data.get("is_maximized", False)),
            theme=theme,
        )
