from PySide6.QtCore import Qt, QSize, QEvent
from PySide6.QtGui import QPalette, QColor, QFont, QPainter, QWheelEvent, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QApplication, QWidget, QMainWindow, QLineEdit, QPushButton, QHBoxLayout, QAbstractItemView,
    QVBoxLayout, QListWidget, QListWidgetItem, QLabel, QToolButton, QComboBox, QSpinBox,
    QCheckBox, QStyle, QMessageBox, QStyleOption, QProgressBar
)

from . import config
from .entry import TimerEntry
from .models import TimerState, WindowSettings
from .timefmt import rgba_string

PROGRESS_STEPS = 1000


# ========= TIMER CARD =========
class TimerWidget(QWidget):
    """Card for one TimerEntry. All state lives on the entry; the card only mirrors it."""

    def __init__(self, entry: TimerEntry, sounds, palette, on_remove=None, parent=None):
        super().__init__(parent)
        self.entry = entry
        self.on_remove = on_remove or (lambda timer_id: entry.request_remove())
        self.sounds = list(sounds)
        self.palette_colors = palette
        self._build_ui()
        self._load_options()
        self.update_view()
        self.entry.changed.connect(self._on_entry_changed)

    def paintEvent(self, event):
        """
        Ensure the widget is drawn using the stylesheet, which is necessary for
        properties like 'border' and 'border-radius' on a plain QWidget.
        """
        opt = QStyleOption()
        opt.initFrom(self)
        p = QPainter(self)
        self.style().drawPrimitive(QStyle.PE_Widget, opt, p, self)

    def eventFilter(self, watched, event):
        # Wheel over a combo/spin box scrolls the list instead of changing the value
        if isinstance(watched, (QComboBox, QSpinBox)) and event.type() == QEvent.Wheel:
            new_event = QWheelEvent(
                event.position(),
                event.globalPosition(),
                event.pixelDelta(),
                event.angleDelta(),
                event.buttons(),
                event.modifiers(),
                event.phase(),
                event.inverted(),
                event.source()
            )
            list_widget = self.parent().parent() if self.parent() else None  # self -> viewport -> QListWidget
            if isinstance(list_widget, QListWidget):
                QApplication.postEvent(list_widget.viewport(), new_event)
                return True

        return super().eventFilter(watched, event)

    def _build_ui(self):
        self.name_edit = QLineEdit(self.entry.name)
        self.name_edit.setPlaceholderText("Timer name…")
        font_name = self.font()
        font_name.setPointSize(config.TITLE_FONT_PT)
        font_name.setWeight(QFont.Weight.Bold)
        self.name_edit.setFont(font_name)

        self.time_edit = QLineEdit()
        self.time_edit.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self.time_edit.setToolTip("Duration, e.g. 5m, 90s, 1.5h or 01:30:00")
        font_time = self.font()
        font_time.setFamily("Consolas, 'Cascadia Mono', 'Courier New', monospace")
        font_time.setPointSize(config.TIME_FONT_PT)
        self.time_edit.setFont(font_time)

        self.end_lbl = QLabel()
        self.end_lbl.setAlignment(Qt.AlignRight | Qt.AlignVCenter)

        self.progress = QProgressBar()
        self.progress.setRange(0, PROGRESS_STEPS)
        self.progress.setTextVisible(False)
        self.progress.setFixedHeight(6)

        self.start_btn = self._tool_button("Start / Pause", self._toggle_start)
        self.stop_btn = self._tool_button("Stop", self.entry.stop, QStyle.SP_MediaStop)
        self.reset_btn = self._tool_button("Reset", self.entry.reset, QStyle.SP_BrowserReload)
        self.remove_btn = self._tool_button("Remove timer", lambda: self.on_remove(self.entry.id), QStyle.SP_TrashIcon)
        self.dismiss_btn = QPushButton("Dismiss")
        self.dismiss_btn.clicked.connect(self.entry.dismiss)

        # --- Top Row: Name and Time ---
        top_row = QHBoxLayout()
        top_row.addWidget(self.name_edit, 1)
        top_row.addWidget(self.time_edit)

        # --- Quick presets and controls ---
        controls_row = QHBoxLayout()
        controls_row.setContentsMargins(0, 2, 0, 0)
        self.quick_btns = []
        for label in config.QUICK_TIMES:
            b = QPushButton(label)
            b.setFlat(True)
            b.clicked.connect(lambda _=False, t=label: self.entry.set_quick_time(t))
            controls_row.addWidget(b)
            self.quick_btns.append(b)
        controls_row.addStretch(1)
        controls_row.addWidget(self.dismiss_btn)
        controls_row.addWidget(self.start_btn)
        controls_row.addWidget(self.stop_btn)
        controls_row.addWidget(self.reset_btn)
        controls_row.addWidget(self.remove_btn)

        # --- Alarm / completion options ---
        self.color_chk = QCheckBox("Completion color")
        self.color_combo = QComboBox()
        self.color_combo.addItems(config.PREDEFINED_COLORS)
        self.color_combo.setEditable(True)

        self.alarm_chk = QCheckBox("Alarm")
        self.sound_combo = QComboBox()
        self.sound_combo.addItems(self.sounds)

        self.repeat_chk = QCheckBox("Repeat every")
        self.repeat_spin = QSpinBox()
        self.repeat_spin.setRange(config.MIN_ALARM_REPEAT_INTERVAL_SEC, 3600)
        self.repeat_spin.setSuffix(" s")
        self.expire_spin = QSpinBox()
        self.expire_spin.setRange(1, 24 * 60)
        self.expire_spin.setPrefix("for ")
        self.expire_spin.setSuffix(" min")

        for w in (self.color_combo, self.sound_combo, self.repeat_spin, self.expire_spin):
            w.installEventFilter(self)

        options_row = QHBoxLayout()
        options_row.addWidget(self.color_chk)
        options_row.addWidget(self.color_combo)
        options_row.addSpacing(12)
        options_row.addWidget(self.alarm_chk)
        options_row.addWidget(self.sound_combo)
        options_row.addSpacing(12)
        options_row.addWidget(self.repeat_chk)
        options_row.addWidget(self.repeat_spin)
        options_row.addWidget(self.expire_spin)
        options_row.addStretch(1)

        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(15, 8, 10, 8)
        root_layout.setSpacing(4)
        root_layout.addLayout(top_row)
        root_layout.addWidget(self.end_lbl)
        root_layout.addWidget(self.progress)
        root_layout.addLayout(controls_row)
        root_layout.addLayout(options_row)

        self.setMinimumHeight(config.ROW_HEIGHT)

        self.name_edit.editingFinished.connect(self._on_name_changed)
        self.time_edit.editingFinished.connect(self._on_time_edited)

    def _tool_button(self, tip, slot, icon=None):
        btn = QToolButton()
        btn.setToolTip(tip)
        btn.setIconSize(QSize(20, 20))
        if icon is not None:
            btn.setIcon(self.style().standardIcon(icon))
        btn.clicked.connect(slot)
        return btn

    def _load_options(self):
        m = self.entry.model
        # Block signals so seeding the widgets does not write back to the entry
        for w in (self.color_chk, self.color_combo, self.alarm_chk, self.sound_combo,
                  self.repeat_chk, self.repeat_spin, self.expire_spin):
            w.blockSignals(True)
        self.color_chk.setChecked(m.enable_completion_color)
        self.color_combo.setCurrentText(m.completion_color)
        self.alarm_chk.setChecked(m.enable_alarm)
        self.sound_combo.setCurrentText(m.alarm_sound)
        self.repeat_chk.setChecked(m.enable_alarm_repeat)
        self.repeat_spin.setValue(m.alarm_repeat_interval_seconds)
        self.expire_spin.setValue(m.alarm_expiration_minutes)
        for w in (self.color_chk, self.color_combo, self.alarm_chk, self.sound_combo,
                  self.repeat_chk, self.repeat_spin, self.expire_spin):
            w.blockSignals(False)

        opt = self.entry.set_alarm_option
        self.color_chk.toggled.connect(lambda v: opt("enable_completion_color", v))
        self.color_combo.currentTextChanged.connect(lambda v: opt("completion_color", v))
        self.alarm_chk.toggled.connect(lambda v: opt("enable_alarm", v))
        self.sound_combo.currentTextChanged.connect(lambda v: opt("alarm_sound", v))
        self.repeat_chk.toggled.connect(lambda v: opt("enable_alarm_repeat", v))
        self.repeat_spin.valueChanged.connect(lambda v: opt("alarm_repeat_interval_seconds", v))
        self.expire_spin.valueChanged.connect(lambda v: opt("alarm_expiration_minutes", v))

    def _toggle_start(self):
        if self.entry.is_running:
            self.entry.pause()
        else:
            self.entry.start()

    def _on_name_changed(self):
        self.entry.set_name(self.name_edit.text())

    def _on_time_edited(self):
        if self.time_edit.text() != self.entry.time_display:
            self.entry.set_time_text(self.time_edit.text())

    def _on_entry_changed(self, _timer_id: str, field: str):
        if field == "progress_percentage":
            self._update_progress()
        elif field in ("time_display", "end_time_display"):
            self._update_texts()
        else:
            self.update_view()

    def set_palette_colors(self, palette):
        self.palette_colors = palette
        self.update_view()

    def _update_texts(self):
        if not self.time_edit.hasFocus():
            self.time_edit.setText(self.entry.time_display)
        self.end_lbl.setText(self.entry.end_time_display)
        self.end_lbl.setVisible(bool(self.entry.end_time_display))

    def _update_progress(self):
        self.progress.setValue(int(self.entry.progress_percentage / 100 * PROGRESS_STEPS))
        self.progress.setStyleSheet(
            f"QProgressBar {{ border: none; background: {self.palette_colors['progress_border']}; border-radius: 3px; }}"
            f"QProgressBar::chunk {{ background: {self.entry.progress_color}; border-radius: 3px; }}")

    def update_view(self):
        """Updates texts, button states and colours from the entry."""
        entry = self.entry
        theme = self.palette_colors
        stopped = entry.state == TimerState.STOPPED

        if not self.name_edit.hasFocus():
            self.name_edit.setText(entry.name)
        self._update_texts()
        self._update_progress()

        self.time_edit.setReadOnly(not stopped)
        for b in self.quick_btns:
            b.setEnabled(stopped)

        icon = QStyle.SP_MediaPause if entry.is_running else QStyle.SP_MediaPlay
        self.start_btn.setIcon(self.style().standardIcon(icon))
        self.start_btn.setEnabled(entry.state != TimerState.COMPLETED)
        self.dismiss_btn.setVisible(entry.is_completed)
        self.repeat_spin.setEnabled(self.repeat_chk.isChecked())
        self.expire_spin.setEnabled(self.repeat_chk.isChecked())

        bg_color_hex = entry.completion_background or theme['widget_bg']
        border_hex = theme['accent'] if entry.is_running else theme['muted']
        text_color_rgba_str = rgba_string(theme['text'])
        if entry.is_paused:
            text_color_rgba_str = rgba_string(theme['text'], alpha=0.6)
        elif entry.is_completed and not entry.completion_background:
            bg_color_hex = theme['finished_bg']

        self.setStyleSheet(f"""
            TimerWidget {{
                background-color: {bg_color_hex};
                border-radius: 8px;
                border: 3px solid {border_hex};
            }}
            QLabel, QCheckBox {{
                color: {text_color_rgba_str};
                background-color: transparent;
                border: none;
            }}
            QLineEdit {{
                color: {text_color_rgba_str};
                background-color: transparent;
                padding: 2px;
                border: none;
            }}
            QComboBox, QSpinBox {{
                padding: 2px 4px; border: 1px solid {theme['progress_border']};
                border-radius: 4px; background-color: {theme['widget_bg']};
            }}
            QToolButton, QPushButton {{
                background-color: transparent;
                border: none;
                border-radius: 4px;
                padding: 5px;
            }}
            QToolButton:hover, QPushButton:hover {{
                background-color: {rgba_string(theme['text'], alpha=0.1)};
            }}
        """)


# ========= MAIN WINDOW =========
class MainWindow(QMainWindow):
    def __init__(self, collection, theme, store, sounds):
        super().__init__()
        self.setWindowTitle(config.APP_NAME)
        self.collection = collection
        self.theme = theme
        self.store = store
        self.sounds = list(sounds)
        self.zoom = 1.0
        self.widgets = {}

        self._build_ui()
        self._connect_signals()
        self._apply_global_stylesheet()
        self._rebuild_list()

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        self.add_btn = QPushButton("Add Timer")
        self.add_btn.setDefault(True)

        self.theme_combo = QComboBox()
        self.theme_combo.addItems(config.THEME_CHOICES)
        self.theme_combo.setCurrentText(self.theme.current_theme)

        toolbar_layout = QHBoxLayout()
        toolbar_layout.addWidget(self.add_btn)
        toolbar_layout.addStretch(1)
        toolbar_layout.addWidget(QLabel("Theme:"))
        toolbar_layout.addWidget(self.theme_combo)

        self.list_widget = QListWidget()
        self.list_widget.setVerticalScrollMode(QAbstractItemView.ScrollPerPixel)
        self.list_widget.verticalScrollBar().setSingleStep(config.ROW_HEIGHT // 6)
        self.list_widget.setSpacing(10)
        self.list_widget.setSelectionMode(QListWidget.NoSelection)

        layout = QVBoxLayout(central)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.addLayout(toolbar_layout)
        layout.addWidget(self.list_widget, 1)

        for seq, delta in ((QKeySequence(QKeySequence.ZoomIn), config.ZOOM_STEP),
                           (QKeySequence("Ctrl+="), config.ZOOM_STEP),
                           (QKeySequence(QKeySequence.ZoomOut), -config.ZOOM_STEP)):
            QShortcut(seq, self, activated=lambda d=delta: self._zoom_by(d))
        QShortcut(QKeySequence("Ctrl+0"), self, activated=self._reset_zoom)

    def _connect_signals(self):
        self.add_btn.clicked.connect(lambda: self.collection.add())
        self.theme_combo.currentTextChanged.connect(self.theme.set_theme)
        self.theme.theme_changed.connect(self._on_theme_changed)
        self.collection.timer_added.connect(self._add_list_item)
        self.collection.timer_removed.connect(self._remove_list_item)

    # ----- window placement -----

    def restore_placement(self):
        settings = self.store.load_window_settings()
        if settings is None:
            x, y, w, h = config.FALLBACK_WINDOW_RECT
            self.setGeometry(x, y, w, h)
            return
        if settings.is_position_set:
            self.setGeometry(settings.x, settings.y, settings.width, settings.height)
        else:
            self.resize(settings.width, settings.height)
        if settings.is_maximized:
            self.setWindowState(self.windowState() | Qt.WindowMaximized)

    def save_placement(self):
        existing = self.store.load_window_settings()
        maximized = self.isMaximized()
        if maximized and existing is not None:
            # Keep the last normal geometry so un-maximizing restores it
            x, y, w, h = existing.x, existing.y, existing.width, existing.height
        elif maximized:
            x, y, w, h = config.FALLBACK_WINDOW_RECT
        else:
            geo = self.geometry()
            x, y, w, h = geo.x(), geo.y(), geo.width(), geo.height()
        self.store.save_window_settings(WindowSettings(
            x=x, y=y, width=w, height=h,
            is_position_set=True,
            is_maximized=maximized,
            theme=self.theme.current_theme,
        ))

    def closeEvent(self, e):
        self.save_placement()
        self.collection.close()
        self.collection.save()
        return super().closeEvent(e)

    # ----- zoom -----

    def _zoom_by(self, delta: float):
        self.zoom = max(config.ZOOM_MIN, min(config.ZOOM_MAX, self.zoom + delta))
        self._apply_global_stylesheet()

    def _reset_zoom(self):
        self.zoom = 1.0
        self._apply_global_stylesheet()

    # ----- theme -----

    def _on_theme_changed(self, _name: str):
        self._apply_global_stylesheet()
        for w in self.widgets.values():
            w.set_palette_colors(self.theme.palette)

    def _apply_global_stylesheet(self):
        theme = self.theme.palette
        palette = QPalette()
        palette.setColor(QPalette.Window, QColor(theme["window_bg"]))
        palette.setColor(QPalette.WindowText, QColor(theme["text"]))
        self.setPalette(palette)

        font_pt = max(6, round(config.BASE_FONT_PT * self.zoom))
        self.setStyleSheet(f"""
            QMainWindow {{ background-color: {theme['window_bg']}; }}
            QWidget {{ font-size: {font_pt}pt; color: {theme['text']}; }}
            QListWidget {{ border: none; background-color: {theme['window_bg']}; }}
            QPushButton {{
                padding: 8px 12px; border-radius: 8px;
                border: 1px solid {theme['progress_border']};
                background-color: {theme['widget_bg']};
            }}
            QPushButton:hover {{ background-color: {rgba_string(theme['accent'], alpha=0.2)}; }}
            QPushButton:default {{ border: 2px solid {theme['accent']}; }}
            QMessageBox {{ background-color: {theme['window_bg']}; }}
        """)
        for i in range(self.list_widget.count()):
            item = self.list_widget.item(i)
            w = self.list_widget.itemWidget(item)
            if w is not None:
                item.setSizeHint(w.sizeHint())

    # ----- list -----

    def _add_list_item(self, entry: TimerEntry):
        item = QListWidgetItem(self.list_widget)
        widget = TimerWidget(entry, self.sounds, self.theme.palette, on_remove=self._on_remove_requested)
        item.setSizeHint(widget.sizeHint())
        self.list_widget.setItemWidget(item, widget)
        self.widgets[entry.id] = widget

    def _remove_list_item(self, timer_id: str):
        widget = self.widgets.pop(timer_id, None)
        if widget is None:
            return
        for i in range(self.list_widget.count()):
            item = self.list_widget.item(i)
            if self.list_widget.itemWidget(item) is widget:
                self.list_widget.takeItem(i)
                break
        widget.deleteLater()

    def _rebuild_list(self):
        self.list_widget.clear()
        self.widgets.clear()
        for entry in self.collection:
            self._add_list_item(entry)

    def _on_remove_requested(self, timer_id: str):
        entry = self.collection.get(timer_id)
        if entry is not None and entry.is_running:
            resp = QMessageBox.question(
                self, "Remove Running Timer?",
                f"Timer \"{entry.name or 'Untitled'}\" is still running ({entry.time_display}).\n\n"
                "Are you sure you want to delete it?",
                QMessageBox.Yes | QMessageBox.No, QMessageBox.No
            )
            if resp != QMessageBox.Yes:
                return
        entry.request_remove()
