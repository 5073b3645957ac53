from datetime import datetime, timedelta

import pytest

from tickdown import config
from tickdown.models import CountdownTimer, TimerState, WindowSettings

T0 = datetime(2026, 1, 5, 9, 0, 0)


def at(**kwargs) -> datetime:
    return T0 + timedelta(**kwargs)


def test_new_timer_is_stopped_with_full_remaining():
    timer = CountdownTimer(timedelta(minutes=5), name="Tea")

    assert timer.state == TimerState.STOPPED
    assert timer.remaining == timedelta(minutes=5)
    assert timer.start_time is None and timer.end_time is None
    assert timer.progress_percentage == 0


def test_start_anchors_end_time():
    timer = CountdownTimer(timedelta(minutes=5))
    timer.start(T0)

    assert timer.state == TimerState.RUNNING
    assert timer.start_time == T0
    assert timer.end_time == at(minutes=5)


def test_scenario_a_completes_after_duration():
    timer = CountdownTimer(timedelta(minutes=5))
    timer.start(T0)

    completed = timer.tick(at(minutes=5))

    assert completed is True
    assert timer.state == TimerState.COMPLETED
    assert timer.remaining == timedelta(0)
    assert timer.progress_percentage == 100


def test_scenario_b_resume_does_not_count_paused_time():
    timer = CountdownTimer(timedelta(minutes=5))
    timer.start(T0)
    timer.tick(at(minutes=2))
    timer.pause()
    assert timer.state == TimerState.PAUSED

    # Sit paused for ten minutes, then resume
    timer.start(at(minutes=12))
    timer.tick(at(minutes=13))

    assert timer.state == TimerState.RUNNING
    assert timer.remaining == timedelta(minutes=2)


def test_pause_keeps_last_ticked_remaining_and_is_idempotent():
    timer = CountdownTimer(timedelta(minutes=5))
    timer.start(T0)
    timer.tick(at(seconds=30))

    timer.pause()
    once = (timer.state, timer.remaining, timer.end_time)
    timer.pause()

    assert (timer.state, timer.remaining, timer.end_time) == once
    assert timer.remaining == timedelta(minutes=4, seconds=30)


def test_ticks_decrease_monotonically_and_stay_completed():
    timer = CountdownTimer(timedelta(seconds=3))
    timer.start(T0)

    seen = []
    for ms in range(100, 3000, 250):
        timer.tick(at(milliseconds=ms))
        seen.append(timer.remaining)
    assert all(a > b for a, b in zip(seen, seen[1:]))

    timer.tick(at(seconds=3))
    assert timer.state == TimerState.COMPLETED
    for s in (4, 10, 100):
        assert timer.tick(at(seconds=s)) is False
        assert timer.state == TimerState.COMPLETED
        assert timer.remaining == timedelta(0)


def test_missed_ticks_do_not_drift():
    timer = CountdownTimer(timedelta(minutes=10))
    timer.start(T0)

    # One late tick equals many regular ones
    timer.tick(at(minutes=7, seconds=15))

    assert timer.remaining == timedelta(minutes=2, seconds=45)


def test_tick_when_not_running_is_noop():
    timer = CountdownTimer(timedelta(minutes=1))
    assert timer.tick(at(minutes=5)) is False
    assert timer.remaining == timedelta(minutes=1)
    assert timer.state == TimerState.STOPPED


def test_start_is_noop_when_running_or_completed():
    timer = CountdownTimer(timedelta(minutes=1))
    timer.start(T0)
    timer.start(at(seconds=30))
    assert timer.end_time == at(minutes=1)

    timer.tick(at(minutes=2))
    timer.start(at(minutes=3))
    assert timer.state == TimerState.COMPLETED
    assert timer.end_time == at(minutes=1)


def test_stop_preserves_remaining_and_clears_anchors():
    timer = CountdownTimer(timedelta(minutes=5))
    timer.start(T0)

    timer.stop(at(minutes=1))

    assert timer.state == TimerState.STOPPED
    assert timer.remaining == timedelta(minutes=4)
    assert timer.start_time is None and timer.end_time is None


def test_stop_can_reset_remaining_for_legacy_behaviour():
    timer = CountdownTimer(timedelta(minutes=5))
    timer.start(T0)

    timer.stop(at(minutes=1), reset_remaining=True)

    assert timer.remaining == timedelta(minutes=5)


def test_stop_clamps_overdue_timer_to_zero():
    timer = CountdownTimer(timedelta(minutes=1))
    timer.start(T0)
    timer.stop(at(minutes=3))
    assert timer.remaining == timedelta(0)


def test_stop_on_stopped_timer_is_noop():
    timer = CountdownTimer(timedelta(minutes=5), remaining=timedelta(minutes=3))
    timer.stop(T0)
    assert timer.state == TimerState.STOPPED
    assert timer.remaining == timedelta(minutes=3)


@pytest.mark.parametrize("minutes", [0, 1, 5, 90])
def test_reset_restores_duration_from_any_state(minutes):
    d = timedelta(minutes=minutes)
    for drive in (lambda t: None,
                  lambda t: t.start(T0),
                  lambda t: (t.start(T0), t.pause()),
                  lambda t: (t.start(T0), t.tick(at(days=1)))):
        timer = CountdownTimer(d)
        drive(timer)
        timer.reset()
        assert timer.remaining == d
        assert timer.state == TimerState.STOPPED
        assert timer.start_time is None and timer.end_time is None


def test_set_duration_only_while_stopped():
    timer = CountdownTimer(timedelta(minutes=5))
    timer.set_duration(timedelta(minutes=10))
    assert timer.duration == timer.remaining == timedelta(minutes=10)

    timer.start(T0)
    timer.set_duration(timedelta(minutes=1))
    assert timer.duration == timedelta(minutes=10)


def test_progress_is_bounded():
    assert CountdownTimer(timedelta(0)).progress_percentage == 0

    timer = CountdownTimer(timedelta(minutes=4))
    timer.start(T0)
    timer.tick(at(minutes=1))
    assert timer.progress_percentage == pytest.approx(25.0)

    odd = CountdownTimer(timedelta(minutes=1), remaining=timedelta(minutes=3))
    assert 0 <= odd.progress_percentage <= 100


def test_snapshot_round_trip():
    timer = CountdownTimer(
        timedelta(minutes=25), name="Pomodoro",
        enable_completion_color=True, completion_color="#2196F3",
        enable_alarm=True, alarm_sound="Ding",
        enable_alarm_repeat=True, alarm_repeat_interval_seconds=15,
        alarm_expiration_minutes=2,
    )
    timer.start(T0)
    timer.tick(at(minutes=10))

    restored = CountdownTimer.from_dict(timer.to_dict())

    assert restored == timer


def test_from_dict_rejects_bad_state():
    with pytest.raises(KeyError):
        CountdownTimer.from_dict({"duration": 60, "state": "Exploded"})


@pytest.mark.parametrize("seconds", [float("inf"), float("nan"), 1e300, -1e300])
def test_from_dict_rejects_out_of_range_durations(seconds):
    with pytest.raises(ValueError):
        CountdownTimer.from_dict({"duration": seconds})
    with pytest.raises(ValueError):
        CountdownTimer.from_dict({"duration": 60, "remaining": seconds})


def test_durations_are_capped():
    timer = CountdownTimer(timedelta(days=100000))
    assert timer.duration == config.MAX_DURATION

    timer = CountdownTimer()
    timer.set_duration(timedelta(days=100000))
    timer.start(T0)
    assert timer.end_time == T0 + config.MAX_DURATION


def test_running_snapshot_without_anchor_loads_paused():
    restored = CountdownTimer.from_dict({"duration": 60, "remaining": 30, "state": "RUNNING"})
    assert restored.state == TimerState.PAUSED
    assert restored.remaining == timedelta(seconds=30)


def test_window_settings_round_trip_and_unknown_theme():
    settings = WindowSettings(x=10, y=20, width=640, height=480,
                              is_position_set=True, is_maximized=True, theme="Dark")
    assert WindowSettings.from_dict(settings.to_dict()) == settings
    assert WindowSettings.from_dict({"theme": "Neon"}).theme == "System"
