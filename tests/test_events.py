import logging

import pytest

from calcinput.events import EventObserver, ObserverDestroyedError


def test_trigger_calls_subscribers_in_order() -> None:
    observer = EventObserver("test")
    calls: list[tuple[str, object]] = []
    observer.on(lambda payload: calls.append(("first", payload)))
    observer.on(lambda payload: calls.append(("second", payload)))

    observer.trigger(42)

    assert calls == [("first", 42), ("second", 42)]


def test_off_removes_every_registration_of_callback() -> None:
    observer = EventObserver()
    calls: list[object] = []

    def callback(payload: object) -> None:
        calls.append(payload)

    observer.on(callback)
    observer.on(callback)
    assert observer.count() == 2

    observer.off(callback)
    observer.trigger("ignored")

    assert observer.count() == 0
    assert calls == []


def test_unsubscribe_during_trigger_uses_snapshot() -> None:
    observer = EventObserver()
    calls: list[str] = []

    def first(_payload: object) -> None:
        calls.append("first")
        observer.off(second)

    def second(_payload: object) -> None:
        calls.append("second")

    observer.on(first)
    observer.on(second)

    observer.trigger(None)
    assert calls == ["first", "second"]

    observer.trigger(None)
    assert calls == ["first", "second", "first"]


def test_failing_subscriber_is_logged_and_dispatch_continues(caplog: pytest.LogCaptureFixture) -> None:
    observer = EventObserver("noisy")
    calls: list[object] = []

    def broken(_payload: object) -> None:
        raise RuntimeError("boom")

    observer.on(broken)
    observer.on(calls.append)

    with caplog.at_level(logging.ERROR, logger="calcinput.events"):
        observer.trigger("payload")

    assert calls == ["payload"]
    assert "noisy: subscriber" in caplog.text


def test_on_rejects_non_callable() -> None:
    with pytest.raises(TypeError):
        EventObserver().on("not callable")  # type: ignore[arg-type]


def test_destroy_makes_observer_unusable() -> None:
    observer = EventObserver()
    observer.on(lambda _payload: None)

    observer.destroy()

    assert observer.destroyed
    with pytest.raises(ObserverDestroyedError):
        observer.trigger(1)
    with pytest.raises(ObserverDestroyedError):
        observer.on(lambda _payload: None)
    with pytest.raises(ObserverDestroyedError):
        observer.count()


def test_aliases_match_primary_names() -> None:
    assert EventObserver.subscribe is EventObserver.on
    assert EventObserver.unsubscribe is EventObserver.off
    assert EventObserver.fire is EventObserver.trigger
