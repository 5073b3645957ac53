import json
from datetime import datetime, timedelta

from tickdown.models import CountdownTimer, WindowSettings
from tickdown.settings import SettingsStore


def test_missing_files_load_empty(tmp_path):
    store = SettingsStore(tmp_path / "nowhere")
    assert store.load_timers() == []
    assert store.load_window_settings() is None


def test_timers_round_trip_through_json(tmp_path):
    store = SettingsStore(tmp_path)
    running = CountdownTimer(timedelta(minutes=10), name="Pasta", enable_alarm=True,
                             alarm_sound="Chimes", enable_alarm_repeat=True)
    running.start(datetime(2026, 3, 1, 12, 0))
    timers = [running, CountdownTimer(timedelta(seconds=45), name="Plank")]

    assert store.save_timers(timers) is True
    loaded = store.load_timers()

    assert loaded == timers
    on_disk = json.loads(store.timers_path.read_text(encoding="utf-8"))
    assert on_disk[0]["state"] == "RUNNING"
    assert on_disk[0]["end_time"] == "2026-03-01T12:10:00"


def test_malformed_file_loads_empty(tmp_path):
    store = SettingsStore(tmp_path)
    store.timers_path.write_text("{not json", encoding="utf-8")
    store.window_path.write_text("[1, 2]", encoding="utf-8")

    assert store.load_timers() == []
    assert store.load_window_settings() is None


def test_bad_records_are_skipped(tmp_path):
    store = SettingsStore(tmp_path)
    good = CountdownTimer(timedelta(minutes=2), name="ok").to_dict()
    store.timers_path.write_text(json.dumps([
        {"name": "no duration"},
        {"duration": 60, "state": "Sideways"},
        {"duration": float("inf")},
        {"duration": 1e300},
        {"duration": 60, "alarm_expiration_minutes": float("inf")},
        "not even a dict",
        good,
    ]), encoding="utf-8")

    loaded = store.load_timers()

    assert [t.name for t in loaded] == ["ok"]


def test_save_failure_reports_false(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = SettingsStore(blocker / "sub")

    assert store.save_timers([CountdownTimer()]) is False
    assert store.save_window_settings(WindowSettings()) is False


def test_window_settings_round_trip(tmp_path):
    store = SettingsStore(tmp_path)
    settings = WindowSettings(x=5, y=6, width=700, height=500,
                              is_position_set=True, is_maximized=False, theme="Light")

    assert store.save_window_settings(settings) is True
    assert store.load_window_settings() == settings
    assert not (tmp_path / "window.json.tmp").exists()
