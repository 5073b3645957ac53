"""Parsing and formatting helpers for durations, end times and colours."""
import math
import re
from datetime import datetime, timedelta
from typing import Optional, Tuple

from . import config

TIME_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(h|hours?|m|min|mins|minutes?|s|sec|secs|seconds?)?$", re.IGNORECASE)
CLOCK_PATTERN = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{1,2})$")


def parse_duration(text: str) -> Optional[timedelta]:
    """Parse user input such as ``"5"``, ``"90s"``, ``"1.5h"`` or ``"01:30:00"``.

    A bare number is minutes. Returns None for anything unparseable or
    longer than ``config.MAX_DURATION``.
    """
    value = (text or "").strip()
    if not value:
        return None

    match = TIME_PATTERN.match(value)
    if match:
        num = float(match.group(1))
        unit = (match.group(2) or "m").lower()
        if unit.startswith("h"):
            return _bounded(num * 3600)
        if unit.startswith("s"):
            return _bounded(num)
        return _bounded(num * 60)

    match = CLOCK_PATTERN.match(value)
    if match:
        hours = int(match.group(1) or 0)
        minutes, seconds = int(match.group(2)), int(match.group(3))
        if seconds > 59 or (match.group(1) is not None and minutes > 59):
            return None
        return _bounded(hours * 3600 + minutes * 60 + seconds)
    return None


def _bounded(seconds: float) -> Optional[timedelta]:
    if not math.isfinite(seconds) or seconds > config.MAX_DURATION.total_seconds():
        return None
    return timedelta(seconds=seconds)


def split_duration(duration: timedelta) -> Tuple[int, int, int]:
    """(hours, minutes, seconds); hours may exceed 23."""
    total = max(0, int(duration.total_seconds()))
    h, rest = divmod(total, 3600)
    m, s = divmod(rest, 60)
    return h, m, s


def format_duration(duration: timedelta) -> str:
    h, m, s = split_duration(duration)
    return f"{h:02d}:{m:02d}:{s:02d}"


def day_suffix(day: int) -> str:
    if day in (1, 21, 31): return "st"
    if day in (2, 22): return "nd"
    if day in (3, 23): return "rd"
    return "th"


def format_end_time(end: datetime) -> str:
    """e.g. ``Monday, October 19th 2026, 3:05 PM CEST``."""
    local = end.astimezone()
    hour = local.hour % 12 or 12
    ampm = "AM" if local.hour < 12 else "PM"
    zone = local.tzname() or ""
    text = f"{local:%A, %B} {local.day}{day_suffix(local.day)} {local.year}, {hour}:{local.minute:02d} {ampm}"
    return f"{text} {zone}".rstrip()


# ========= COLOURS =========
def hex_to_rgb(hex_str: str):
    hex_str = hex_str.lstrip("#")
    if len(hex_str) != 6:
        raise ValueError(f"Expected #RRGGBB, got {hex_str!r}")
    return tuple(int(hex_str[i:i+2], 16) for i in (0, 2, 4))


def is_hex_color(value: str) -> bool:
    try:
        hex_to_rgb(value or "")
    except ValueError:
        return False
    return True


def rgba_string(hex_str: str, alpha: float = 1.0) -> str:
    """Returns a CSS rgba() string with a specified alpha."""
    r, g, b = hex_to_rgb(hex_str)
    a = max(0.0, min(1.0, alpha))
    return f"rgba({r}, {g}, {b}, {int(a * 255)})"


def blend(start_hex: str, end_hex: str, fraction: float) -> str:
    """Linear interpolation between two #RRGGBB colours."""
    fraction = max(0.0, min(1.0, fraction))
    start, end = hex_to_rgb(start_hex), hex_to_rgb(end_hex)
    r, g, b = (int(a + (b - a) * fraction) for a, b in zip(start, end))
    return f"#{r:02X}{g:02X}{b:02X}"
