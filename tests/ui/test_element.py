from __future__ import annotations

import numpy as np

from engine.ui.element import ElementEvent, ReactiveElement


class Recorder(ReactiveElement):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, dict]] = []
        self.declare_property("size")
        self.declare_property("lineWidth")
        self.declare_property("internal", attribute=False)

    def update(self, changed):
        self.calls.append(("update", dict(changed)))

    def first_updated(self, changed):
        self.calls.append(("first_updated", dict(changed)))

    def updated(self, changed):
        self.calls.append(("updated", dict(changed)))


def test_attribute_reflects_to_property_as_text() -> None:
    el = Recorder()
    el.set_attribute("size", 3)
    assert el.get_property("size") == "3"
    assert el.get_attribute("SIZE") == "3"
    el.set_attribute("LineWidth", "2")
    assert el.get_property("lineWidth") == "2"
    el.set_attribute("internal", "x")
    assert el.get_property("internal") is None


def test_batch_keeps_first_old_value_and_change_order() -> None:
    el = Recorder()
    el.set_property("size", 1)
    el.set_property("lineWidth", 5)
    el.set_property("size", 2)
    assert el.update_pending
    assert el.perform_update() is True
    assert el.calls[0] == ("update", {"size": None, "lineWidth": None})
    assert list(el.calls[0][1]) == ["size", "lineWidth"]
    assert [c[0] for c in el.calls] == ["update", "first_updated", "updated"]
    assert not el.update_pending
    assert el.has_updated


def test_first_updated_only_once_and_unchanged_values_skip() -> None:
    el = Recorder()
    el.set_property("size", 1)
    el.flush()
    el.calls.clear()
    el.set_property("size", 1)
    assert el.perform_update() is False
    el.set_property("size", 2)
    el.flush()
    assert [c[0] for c in el.calls] == ["update", "updated"]
    assert el.calls[0][1] == {"size": 1}


def test_array_values_compare_without_error() -> None:
    el = Recorder()
    el.set_property("size", np.array([1, 2]))
    el.flush()
    el.set_property("size", np.array([1, 2]))
    assert el.update_pending


def test_remove_attribute_clears_property() -> None:
    el = Recorder()
    el.set_attribute("size", "4")
    el.remove_attribute("size")
    assert not el.has_attribute("size")
    assert el.get_property("size") is None
    el.remove_attribute("missing")


def test_events_and_listener_failures_are_isolated(caplog) -> None:
    el = Recorder()
    seen: list[ElementEvent] = []

    def boom(event):
        raise RuntimeError("listener failure")

    el.add_event_listener("ping", boom)
    el.add_event_listener("ping", seen.append)
    event = el.dispatch_event("ping", detail=42)
    assert seen == [event]
    assert event.target is el and event.detail == 42
    assert "event listener failed" in caplog.text

    el.remove_event_listener("ping", seen.append)
    el.remove_event_listener("ping", seen.append)
    el.dispatch_event(ElementEvent(type="ping"))
    assert len(seen) == 1


def test_subscribers_receive_changed_names() -> None:
    el = Recorder()
    got: list[list[str]] = []
    el.subscribe(got.append)
    el.set_property("size", 1)
    el.set_property("lineWidth", 2)
    el.flush()
    assert got == [["size", "lineWidth"]]
    el.unsubscribe(got.append)
    el.set_property("size", 9)
    el.flush()
    assert len(got) == 1


def test_connection_lifecycle() -> None:
    el = Recorder()
    assert not el.is_connected
    el.connected_callback()
    assert el.is_connected
    el.disconnected_callback()
    assert not el.is_connected


def test_update_complete_delivers_pending_changes() -> None:
    el = Recorder()
    el.set_property("size", 1)
    assert el.update_complete is True
    assert [c[0] for c in el.calls] == ["update", "first_updated", "updated"]
    assert el.update_complete is True
    assert len(el.calls) == 3


class Restless(ReactiveElement):
    def __init__(self) -> None:
        super().__init__()
        self.declare_property("tick")

    def update(self, changed):
        # 毎回新しい変更を出すため収束しない
        self.set_property("tick", (self.get_property("tick") or 0) + 1)


def test_update_complete_reports_unsettled_element() -> None:
    el = Restless()
    el.set_property("tick", 0)
    assert el.update_complete is False
    assert el.update_pending
