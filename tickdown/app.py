import logging
import os
import sys

from PySide6.QtCore import QCoreApplication
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication

from . import __version__, config
from .audio import SoundPlayer
from .clock import TickSource
from .collection import TimerCollection
from .settings import SettingsStore
from .theme import ThemeManager
from .ui import MainWindow

_LOGGER = logging.getLogger(__name__)


def resource_path(relative_path):
    try: base_path = sys._MEIPASS
    except AttributeError: base_path = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(base_path, relative_path)


# ========= ENTRY POINT =========
def main():
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    QCoreApplication.setOrganizationName(config.ORG_NAME)
    QCoreApplication.setApplicationName(config.APP_NAME)
    QCoreApplication.setApplicationVersion(__version__)

    icon_path = resource_path("app.ico")
    if os.path.exists(icon_path):
        app.setWindowIcon(QIcon(icon_path))

    store = SettingsStore()
    _LOGGER.info("%s %s using data folder %s", config.APP_NAME, __version__, store.folder)

    ticks = TickSource()
    audio = SoundPlayer()
    theme = ThemeManager(store)
    theme.initialize()

    collection = TimerCollection(ticks, store, audio)
    collection.load_or_seed()

    w = MainWindow(collection, theme, store, audio.available_sounds())
    w.restore_placement()
    w.show()

    ticks.start()
    exit_code = app.exec()
    ticks.stop()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
