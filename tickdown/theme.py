import logging
from typing import Dict

from PySide6.QtCore import QObject, QTimer, Signal

from . import config
from .models import WindowSettings

# darkdetect resolves the "System" theme. Without it we stay light.
try:
    import darkdetect
except ImportError:
    darkdetect = None

_LOGGER = logging.getLogger(__name__)

if darkdetect is None:
    _LOGGER.warning("darkdetect not found. Defaulting to light theme. `pip install darkdetect` for auto-detection.")


def system_theme() -> str:
    if darkdetect is None:
        return 'light'
    try:
        return 'dark' if darkdetect.isDark() else 'light'
    except Exception as e:
        _LOGGER.debug("System theme detection failed: %s", e)
        return 'light'


class ThemeManager(QObject):
    """Tracks the Light / Dark / System choice and the palette it resolves to.

    While following the system, the OS setting is polled so a live switch is
    picked up. Choosing a theme saves it into the window settings record.
    """
    theme_changed = Signal(str)

    def __init__(self, store, parent=None):
        super().__init__(parent)
        self.store = store
        self.current_theme = config.THEME_SYSTEM
        self.current_palette_name = 'light'

        self.theme_timer = QTimer(self)
        self.theme_timer.setInterval(config.THEME_POLL_MS)
        self.theme_timer.timeout.connect(self.check_system_theme)

    @property
    def palette(self) -> Dict[str, str]:
        return config.THEMES[self.current_palette_name]

    def initialize(self):
        settings = self.store.load_window_settings()
        self.current_theme = settings.theme if settings else config.THEME_SYSTEM
        self._apply()

    def set_theme(self, theme: str):
        if theme not in config.THEME_CHOICES:
            _LOGGER.warning("Unknown theme '%s'", theme)
            return
        if theme == self.current_theme:
            return
        self.current_theme = theme
        self._apply()
        self._save()

    def check_system_theme(self):
        if self.current_theme != config.THEME_SYSTEM:
            return
        if system_theme() != self.current_palette_name:
            self._apply()

    def _resolve(self) -> str:
        if self.current_theme == config.THEME_LIGHT:
            return 'light'
        if self.current_theme == config.THEME_DARK:
            return 'dark'
        return system_theme()

    def _apply(self):
        self.current_palette_name = self._resolve()
        if self.current_theme == config.THEME_SYSTEM:
            self.theme_timer.start()
        else:
            self.theme_timer.stop()
        self.theme_changed.emit(self.current_palette_name)

    def _save(self):
        settings = self.store.load_window_settings() or WindowSettings()
        settings.theme = self.current_theme
        self.store.save_window_settings(settings)
