"""Tests for EventBus and EventStore."""

from __future__ import annotations

import logging

import pytest

from devops_demo.domain.enums import Environment
from devops_demo.domain.events import (
    BuildFinished,
    BuildStarted,
    DeploymentFinished,
    DomainEvent,
)
from devops_demo.infrastructure.event_bus import EventBus, EventStore


class TestEventBus:
    """Test synchronous EventBus subscribe, publish, unsubscribe."""

    def test_subscribe_and_publish(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []
        bus.subscribe(BuildFinished, received.append)

        event = BuildFinished(source_id="test", build_id="ab12cd34", success=True)
        bus.publish(event)
        assert received == [event]

    def test_typed_subscription_filters_events(self) -> None:
        bus = EventBus()
        builds: list[DomainEvent] = []
        bus.subscribe(BuildFinished, builds.append)

        bus.publish(BuildFinished(source_id="test", build_id="b1"))
        bus.publish(DeploymentFinished(source_id="test", environment=Environment.STAGING))

        assert len(builds) == 1

    def test_subscribe_all(self) -> None:
        bus = EventBus()
        everything: list[DomainEvent] = []
        bus.subscribe_all(everything.append)

        bus.publish(BuildStarted(source_length=3))
        bus.publish(BuildFinished(build_id="b1"))
        assert [type(e) for e in everything] == [BuildStarted, BuildFinished]

    def test_global_handlers_run_first(self) -> None:
        bus = EventBus()
        order: list[str] = []
        bus.subscribe(BuildFinished, lambda e: order.append("typed"))
        bus.subscribe_all(lambda e: order.append("global"))

        bus.publish(BuildFinished())
        assert order == ["global", "typed"]

    def test_unsubscribe(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []
        bus.subscribe(BuildFinished, received.append)
        assert bus.unsubscribe(BuildFinished, received.append) is True
        assert bus.unsubscribe(BuildFinished, received.append) is False

        bus.publish(BuildFinished())
        assert received == []

    def test_failing_handler_does_not_break_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []

        def broken(event: DomainEvent) -> None:
            raise RuntimeError("handler blew up")

        bus.subscribe(BuildFinished, broken)
        bus.subscribe(BuildFinished, received.append)

        with caplog.at_level(logging.ERROR):
            bus.publish(BuildFinished())

        assert len(received) == 1
        assert "Error in handler" in caplog.text


class TestEventStore:

    def test_append_and_query(self) -> None:
        store = EventStore()
        store.append(BuildStarted())
        store.append(BuildFinished(build_id="b1"))
        store.append(BuildFinished(build_id="b2"))

        assert len(store) == 3
        finished = store.query(BuildFinished)
        assert [e.build_id for e in finished] == ["b1", "b2"]

    def test_query_limit_returns_most_recent(self) -> None:
        store = EventStore()
        for i in range(5):
            store.append(BuildFinished(build_id=f"b{i}"))
        assert [e.build_id for e in store.query(limit=2)] == ["b3", "b4"]

    def test_max_size_drops_oldest(self) -> None:
        store = EventStore(max_size=2)
        for i in range(4):
            store.append(BuildFinished(build_id=f"b{i}"))
        assert len(store) == 2
        assert store.query()[0].build_id == "b2"

    def test_wired_to_bus(self) -> None:
        bus = EventBus()
        store = EventStore()
        bus.subscribe_all(store.append)
        bus.publish(BuildFinished())
        assert len(store) == 1
