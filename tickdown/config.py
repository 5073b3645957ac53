import os
from datetime import timedelta
from pathlib import Path

# ========= GLOBALS / CONFIG =========
APP_NAME = "TickDown"
ORG_NAME = "TickDown"

# Shared heartbeat driving every timer
TICK_INTERVAL_MS = 100

# Duration used for fresh timers and as the fallback for a zero duration
DEFAULT_DURATION = timedelta(minutes=5)
DEFAULT_TIMER_NAME = ""

# Longest countdown accepted from typed text, edits or a stored snapshot
MAX_DURATION = timedelta(hours=9999)

# Stop() keeps the last computed remaining time unless this is set
STOP_RESETS_REMAINING = False

# ========= ALARM / COMPLETION DEFAULTS =========
DEFAULT_COMPLETION_COLOR = "#4CAF50"
DEFAULT_ALARM_SOUND = "Alarm 01"
DEFAULT_ALARM_REPEAT_INTERVAL_SEC = 30
DEFAULT_ALARM_EXPIRATION_MIN = 5
MIN_ALARM_REPEAT_INTERVAL_SEC = 1

PREDEFINED_COLORS = [
    "#4CAF50",  # Green
    "#F44336",  # Red
    "#2196F3",  # Blue
    "#FFEB3B",  # Yellow
    "#FF9800",  # Orange
    "#9C27B0",  # Purple
]

QUICK_TIMES = ["1m", "5m", "10m", "25m", "1h"]

# Progress bar runs from red (nothing elapsed) to green (done)
PROGRESS_START_COLOR = "#F44336"
PROGRESS_END_COLOR = "#4CAF50"

# ========= PERSISTENCE =========
TIMERS_FILE = "timers.json"
WINDOW_FILE = "window.json"

DEFAULT_WINDOW_WIDTH = 400
DEFAULT_WINDOW_HEIGHT = 300
FALLBACK_WINDOW_RECT = (100, 100, 800, 600)

# ========= UI SIZING =========
ROW_HEIGHT = 150
BASE_FONT_PT = 11
TITLE_FONT_PT = 13
TIME_FONT_PT = 22
ZOOM_STEP = 0.1
ZOOM_MIN = 0.5
ZOOM_MAX = 3.0

# ========= THEME / PALETTE =========
THEME_LIGHT = "Light"
THEME_DARK = "Dark"
THEME_SYSTEM = "System"
THEME_CHOICES = [THEME_LIGHT, THEME_DARK, THEME_SYSTEM]
THEME_POLL_MS = 1000

THEMES = {
    'light': {
        "accent": "#27AE60",
        "muted": "#BDC3C7",

        "text": "#2C3E50",
        "text_on_color_bg": "#FFFFFF",

        "window_bg": "#ECF0F1",
        "widget_bg": "#FFFFFF",
        "finished_bg": "#F7F9F9",
        "progress_border": "#E0E0E0",
    },
    'dark': {
        "accent": "#2ECC71",
        "muted": "#7F8C8D",

        "text": "#ECF0F1",
        "text_on_color_bg": "#1C2833",

        "window_bg": "#2C3E50",
        "widget_bg": "#34495E",
        "finished_bg": "#283747",
        "progress_border": "#4A6572",
    }
}


def data_dir() -> Path:
    """Folder holding timers.json and window.json.

    ``TICKDOWN_DATA_DIR`` wins; otherwise Qt's per-user app data location.
    """
    override = os.environ.get("TICKDOWN_DATA_DIR")
    if override:
        return Path(override)

    from PySide6.QtCore import QStandardPaths
    location = QStandardPaths.writableLocation(QStandardPaths.AppLocalDataLocation)
    if not location:
        return Path.home() / f".{APP_NAME.lower()}"
    return Path(location)


def log_level() -> str:
    return os.environ.get("TICKDOWN_LOG_LEVEL", "INFO").upper()
