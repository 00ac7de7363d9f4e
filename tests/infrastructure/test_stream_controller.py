"""Tests for the per-connection notification stream controller."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone

from notistream.infrastructure.notifications import (
    NotificationStreamController,
    StreamRegistry,
)
from tests.infrastructure.fakes import FakeStore, StaleStore


def _decode(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):].strip())


def _controller(store, registry, **overrides) -> NotificationStreamController:
    options = {"poll_interval": 0.01, "backlog_window": 60, "batch_limit": 10}
    options.update(overrides)
    return NotificationStreamController("staff-1", store=store, registry=registry, **options)


def test_stream_sends_connected_then_heartbeat_with_unread_count():
    store = FakeStore()
    store.add(seconds_ago=600)
    store.add(seconds_ago=600)
    registry = StreamRegistry()

    async def scenario():
        stream = _controller(store, registry).stream()
        connected = _decode(await stream.__anext__())
        heartbeat = _decode(await stream.__anext__())
        await stream.aclose()
        return connected, heartbeat

    connected, heartbeat = asyncio.run(scenario())

    assert connected["type"] == "connected"
    assert "timestamp" in connected
    assert heartbeat["type"] == "heartbeat"
    assert heartbeat["unreadCount"] == 2
    assert "notifications" not in heartbeat


def test_recent_backlog_is_delivered_on_open():
    store = FakeStore()
    for _ in range(3):
        store.add(seconds_ago=10)
    registry = StreamRegistry()

    async def scenario():
        stream = _controller(store, registry).stream()
        await stream.__anext__()
        frame = _decode(await stream.__anext__())
        await stream.aclose()
        return frame

    frame = asyncio.run(scenario())

    assert frame["type"] == "notification"
    assert len(frame["notifications"]) == 3
    assert frame["unreadCount"] == 3


def test_row_inserted_between_ticks_is_delivered_once_and_advances_cursor():
    store = FakeStore()
    registry = StreamRegistry()

    async def scenario():
        controller = _controller(store, registry)
        stream = controller.stream()
        await stream.__anext__()
        first = _decode(await stream.__anext__())
        inserted = store.add()
        second = _decode(await stream.__anext__())
        third = _decode(await stream.__anext__())
        cursor = controller.session.cursor
        await stream.aclose()
        return first, second, third, inserted, cursor

    first, second, third, inserted, cursor = asyncio.run(scenario())

    assert first["type"] == "heartbeat"
    assert second["type"] == "notification"
    assert [n["id"] for n in second["notifications"]] == [inserted.id]
    assert second["notifications"][0]["recipientId"] == "staff-1"
    assert second["notifications"][0]["type"] == "INVOICE_SUBMITTED"
    assert cursor == inserted.created_at
    assert third["type"] == "heartbeat"


def test_rows_are_never_delivered_twice_on_one_connection():
    store = StaleStore()
    row = store.add(seconds_ago=5)
    registry = StreamRegistry()

    async def scenario():
        controller = _controller(store, registry)
        session = registry.open("staff-1", backlog_window=timedelta(seconds=60))
        frames = [await controller.tick(session) for _ in range(3)]
        return [_decode(frame) for frame in frames]

    frames = asyncio.run(scenario())

    delivered = [n["id"] for frame in frames for n in frame.get("notifications", [])]
    assert delivered == [row.id]
    assert [frame["type"] for frame in frames] == ["notification", "heartbeat", "heartbeat"]


def test_cursor_never_moves_backwards():
    store = StaleStore()
    store.add(seconds_ago=30)
    registry = StreamRegistry()
    start = datetime.now(timezone.utc) - timedelta(seconds=5)

    async def scenario():
        controller = _controller(store, registry)
        session = registry.open("staff-1", backlog_window=timedelta(seconds=60))
        session.cursor = start
        await controller.tick(session)
        return session.cursor

    assert asyncio.run(scenario()) == start


def test_store_outage_is_swallowed_and_polling_continues():
    store = FakeStore()
    store.failures_remaining = 2
    store.add(seconds_ago=1)
    registry = StreamRegistry()

    async def scenario():
        stream = _controller(store, registry).stream()
        await stream.__anext__()
        frame = _decode(await asyncio.wait_for(stream.__anext__(), timeout=5))
        await stream.aclose()
        return frame

    frame = asyncio.run(scenario())

    assert store.fetch_calls == 3
    assert frame["type"] == "notification"
    assert frame["unreadCount"] == 1


def test_unexpected_tick_errors_do_not_escape():
    class ExplodingStore(FakeStore):
        def count_unread(self, recipient_id: str) -> int:
            raise RuntimeError("boom")

    registry = StreamRegistry()

    async def scenario():
        controller = _controller(ExplodingStore(), registry)
        session = registry.open("staff-1", backlog_window=timedelta(seconds=60))
        return await controller.tick(session)

    assert asyncio.run(scenario()) is None


def test_closing_the_stream_unregisters_the_session():
    store = FakeStore()
    inserted = store.add(seconds_ago=1)
    registry = StreamRegistry()

    async def scenario():
        stream = _controller(store, registry).stream()
        await stream.__anext__()
        await stream.__anext__()
        during = registry.active_count("staff-1")
        await stream.aclose()
        return during

    during = asyncio.run(scenario())

    assert during == 1
    assert registry.active_count("staff-1") == 0
    assert registry.cursor_for("staff-1") == inserted.created_at


def test_wake_runs_the_next_tick_without_waiting_for_the_interval():
    store = FakeStore()
    registry = StreamRegistry()

    async def scenario():
        stream = _controller(store, registry, poll_interval=30).stream()
        await stream.__anext__()
        await stream.__anext__()
        inserted = store.add()
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        registry.wake("staff-1")
        frame = _decode(await asyncio.wait_for(pending, timeout=2))
        await stream.aclose()
        return frame, inserted

    frame, inserted = asyncio.run(scenario())

    assert frame["type"] == "notification"
    assert frame["notifications"][0]["id"] == inserted.id


def test_registry_shutdown_ends_the_stream():
    store = FakeStore()
    registry = StreamRegistry()

    async def scenario():
        stream = _controller(store, registry, poll_interval=30).stream()
        await stream.__anext__()
        await stream.__anext__()
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        registry.close_all()
        try:
            await asyncio.wait_for(pending, timeout=2)
        except StopAsyncIteration:
            return True
        return False

    assert asyncio.run(scenario()) is True
    assert registry.active_count() == 0


def test_burst_larger_than_batch_limit_is_drained_without_waiting():
    store = FakeStore()
    registry = StreamRegistry()

    async def scenario():
        stream = _controller(store, registry, poll_interval=30).stream()
        await stream.__anext__()
        await stream.__anext__()
        inserted = [store.add(seconds_ago=20 - offset) for offset in range(12)]
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        registry.wake("staff-1")
        first = _decode(await asyncio.wait_for(pending, timeout=2))
        second = _decode(await asyncio.wait_for(stream.__anext__(), timeout=2))
        await stream.aclose()
        return inserted, first, second

    inserted, first, second = asyncio.run(scenario())

    assert len(first["notifications"]) == 10
    assert [n["id"] for n in second["notifications"]] == [inserted[11].id, inserted[10].id]
    delivered = {n["id"] for frame in (first, second) for n in frame["notifications"]}
    assert delivered == {row.id for row in inserted}


def test_delivered_ids_below_the_cursor_are_pruned():
    store = FakeStore()
    registry = StreamRegistry()

    async def scenario():
        controller = _controller(store, registry)
        session = registry.open("staff-1", backlog_window=timedelta(seconds=60))
        for offset in range(5):
            store.add(seconds_ago=50 - offset * 10)
            await controller.tick(session)
        return controller

    controller = asyncio.run(scenario())

    assert len(controller._delivered) == 1
