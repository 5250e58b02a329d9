"""Unit tests for the synchronous in-memory event bus."""

import logging

from keel.domain.sea_service.event import SeaServiceNotice
from keel.domain.shared.event import Event
from keel.infrastructure.event.memory_bus import InMemoryEventBus


class OtherEvent(Event):
    value: int = 0


def _notice(ok: bool = True) -> SeaServiceNotice:
    return SeaServiceNotice(operation="start_new_draft", ok=ok, message="done")


class TestInMemoryEventBus:
    def test_handlers_receive_matching_events_in_order(self):
        bus = InMemoryEventBus()
        seen: list[str] = []
        bus.subscribe(SeaServiceNotice, lambda e: seen.append("first"))
        bus.subscribe(SeaServiceNotice, lambda e: seen.append("second"))
        bus.subscribe(OtherEvent, lambda e: seen.append("other"))

        bus.publish(_notice())

        assert seen == ["first", "second"]

    def test_base_class_subscription_sees_subclasses(self):
        bus = InMemoryEventBus()
        seen: list[Event] = []
        bus.subscribe(Event, seen.append)

        bus.publish(_notice())
        bus.publish(OtherEvent(value=1))

        assert [type(e) for e in seen] == [SeaServiceNotice, OtherEvent]

    def test_unsubscribe(self):
        bus = InMemoryEventBus()
        seen: list[Event] = []
        bus.subscribe(SeaServiceNotice, seen.append)
        bus.unsubscribe(SeaServiceNotice, seen.append)
        bus.unsubscribe(OtherEvent, seen.append)

        bus.publish(_notice())

        assert seen == []

    def test_failing_handler_is_logged_and_others_still_run(self, caplog):
        bus = InMemoryEventBus()
        seen: list[Event] = []

        def broken(event: Event) -> None:
            raise RuntimeError("boom")

        bus.subscribe(SeaServiceNotice, broken)
        bus.subscribe(SeaServiceNotice, seen.append)

        with caplog.at_level(logging.ERROR):
            bus.publish(_notice())

        assert len(seen) == 1
        assert "boom" in caplog.text

    def test_events_are_registered_and_stamped(self):
        notice = _notice()
        assert Event._registry["SeaServiceNotice"] is SeaServiceNotice
        assert notice.created_at.tzinfo is not None
        assert notice.id != _notice().id
