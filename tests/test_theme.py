import pytest

from tickdown import config, theme
from tickdown.models import WindowSettings
from tickdown.theme import ThemeManager


class FakeDarkdetect:
    def __init__(self, dark):
        self.dark = dark

    def isDark(self):
        return self.dark


@pytest.fixture
def system_dark(monkeypatch):
    fake = FakeDarkdetect(dark=True)
    monkeypatch.setattr(theme, "darkdetect", fake)
    return fake


def test_system_theme_follows_os(store, system_dark):
    manager = ThemeManager(store)
    manager.initialize()

    assert manager.current_theme == config.THEME_SYSTEM
    assert manager.current_palette_name == 'dark'
    assert manager.theme_timer.isActive()

    system_dark.dark = False
    names = []
    manager.theme_changed.connect(names.append)
    manager.check_system_theme()

    assert names == ['light']


def test_saved_theme_is_applied(store, system_dark):
    store.window = WindowSettings(theme=config.THEME_LIGHT)
    manager = ThemeManager(store)
    manager.initialize()

    assert manager.current_palette_name == 'light'
    assert not manager.theme_timer.isActive()
    assert manager.palette is config.THEMES['light']


def test_set_theme_persists_choice(store, system_dark):
    store.window = WindowSettings(x=40, width=900)
    manager = ThemeManager(store)
    manager.initialize()

    manager.set_theme(config.THEME_DARK)

    assert store.window.theme == config.THEME_DARK
    assert store.window.x == 40 and store.window.width == 900

    manager.set_theme("Purple")
    assert manager.current_theme == config.THEME_DARK


def test_missing_darkdetect_means_light(monkeypatch):
    monkeypatch.setattr(theme, "darkdetect", None)
    assert theme.system_theme() == 'light'
