from tickdown.clock import TickSource


def test_tick_reaches_every_subscriber(ticks):
    calls = []
    ticks.subscribe("a", lambda: calls.append("a"))
    ticks.subscribe("b", lambda: calls.append("b"))

    ticks.ticked.emit()

    assert sorted(calls) == ["a", "b"]
    assert ticks.listener_count() == 2


def test_unsubscribe_releases_listener(ticks):
    calls = []
    ticks.subscribe("a", lambda: calls.append("a"))

    assert ticks.unsubscribe("a") is True
    ticks.ticked.emit()

    assert calls == []
    assert "a" not in ticks
    assert ticks.unsubscribe("a") is False


def test_resubscribe_replaces_previous_callback(ticks):
    calls = []
    ticks.subscribe("a", lambda: calls.append(1))
    ticks.subscribe("a", lambda: calls.append(2))

    ticks.ticked.emit()

    assert calls == [2]


def test_stop_drops_all_listeners():
    source = TickSource(interval_ms=50)
    source.subscribe("a", lambda: None)
    source.start()
    assert source.is_active()
    assert source.ticker.interval() == 50

    source.stop()

    assert not source.is_active()
    assert source.listener_count() == 0
