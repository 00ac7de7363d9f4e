"""Reconnect behaviour of the stream consumer against a mocked server."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from notistream.client import (
    CONNECTION_LOST_MESSAGE,
    ConsumerState,
    NotificationApiClient,
    ReconnectingStreamConsumer,
    ReconnectPolicy,
)
from notistream.domain.errors import ChannelError, ReconnectExhausted

from .helpers import notification_payload, snapshot_body, sse_body


class FakeServer:
    """Serves a fixed snapshot and a scripted sequence of stream responses."""

    def __init__(self, stream_responses, snapshot=None):
        self.stream_responses = list(stream_responses)
        self.snapshot = snapshot or snapshot_body([], 0)
        self.stream_requests = 0
        self.snapshot_requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/notifications/stream":
            self.stream_requests += 1
            status, body = self.stream_responses.pop(0) if self.stream_responses else (503, "")
            headers = {"Content-Type": "text/event-stream"}
            if isinstance(body, httpx.AsyncByteStream):
                return httpx.Response(status, stream=body, headers=headers)
            return httpx.Response(status, text=body, headers=headers)
        self.snapshot_requests += 1
        return httpx.Response(200, json=self.snapshot)


def _api(server: FakeServer, **options) -> NotificationApiClient:
    http = httpx.AsyncClient(base_url="http://notify.test", transport=httpx.MockTransport(server))
    return NotificationApiClient("http://notify.test", token="token", http_client=http, **options)


def test_backoff_grows_and_resets_after_the_connected_frame():
    server = FakeServer([(503, ""), (503, ""), (200, sse_body({"type": "connected"}))])
    delays: list[float] = []

    async def scenario():
        consumer = None

        async def fake_sleep(delay):
            delays.append(delay)
            if len(delays) == 3:
                await consumer.close()

        consumer = ReconnectingStreamConsumer(_api(server), sleep=fake_sleep)
        await consumer.run()
        return consumer

    consumer = asyncio.run(scenario())

    assert delays == [1, 2, 1]
    assert consumer.state is ConsumerState.CLOSED
    assert server.stream_requests == 3
    assert server.snapshot_requests == 1


def test_consumer_gives_up_after_max_attempts():
    server = FakeServer([])
    states: list[ConsumerState] = []
    delays: list[float] = []

    async def fake_sleep(delay):
        delays.append(delay)

    async def scenario():
        consumer = ReconnectingStreamConsumer(
            _api(server),
            policy=ReconnectPolicy(max_attempts=2),
            on_state_change=states.append,
            sleep=fake_sleep,
        )
        await consumer.run()
        return consumer

    consumer = asyncio.run(scenario())

    assert delays == [1, 2]
    assert server.stream_requests == 3
    assert consumer.state is ConsumerState.TERMINATED
    assert consumer.error == CONNECTION_LOST_MESSAGE
    assert isinstance(consumer.last_exception, ReconnectExhausted)
    assert states[-2:] == [ConsumerState.ERROR, ConsumerState.TERMINATED]


def test_stream_frames_merge_into_snapshot_without_duplicates():
    snapshot = snapshot_body(
        [notification_payload("n-1", seconds_ago=30), notification_payload("n-2", seconds_ago=40)],
        2,
    )
    frame = {
        "type": "notification",
        "notifications": [notification_payload("n-3"), notification_payload("n-1", seconds_ago=30)],
        "unreadCount": 3,
    }
    server = FakeServer([(200, sse_body({"type": "connected"}, frame))], snapshot=snapshot)
    received = []

    async def scenario():
        consumer = None

        async def fake_sleep(delay):
            await consumer.close()

        consumer = ReconnectingStreamConsumer(
            _api(server), on_notification=received.append, sleep=fake_sleep
        )
        await consumer.run()
        return consumer

    consumer = asyncio.run(scenario())

    assert [n.id for n in received] == ["n-3"]
    assert [n.id for n in consumer.cache.items] == ["n-3", "n-1", "n-2"]
    assert consumer.cache.unread_count == 3


def test_heartbeat_count_is_authoritative():
    snapshot = snapshot_body([notification_payload("n-1")], 1)
    server = FakeServer(
        [(200, sse_body({"type": "heartbeat", "unreadCount": 0}))], snapshot=snapshot
    )

    async def scenario():
        consumer = None

        async def fake_sleep(delay):
            await consumer.close()

        consumer = ReconnectingStreamConsumer(_api(server), sleep=fake_sleep)
        await consumer.run()
        return consumer

    consumer = asyncio.run(scenario())

    assert consumer.cache.unread_count == 0
    assert len(consumer.cache) == 1


def test_close_cancels_a_pending_reconnect():
    server = FakeServer([])

    async def scenario():
        reconnecting = asyncio.Event()

        def on_state_change(state):
            if state is ConsumerState.RECONNECTING:
                reconnecting.set()

        consumer = ReconnectingStreamConsumer(
            _api(server),
            policy=ReconnectPolicy(base_delay=10, max_delay=30),
            on_state_change=on_state_change,
        )
        task = consumer.start()
        await asyncio.wait_for(reconnecting.wait(), timeout=2)
        await consumer.close()
        return consumer, task

    consumer, task = asyncio.run(scenario())

    assert task.cancelled()
    assert consumer.state is ConsumerState.CLOSED
    assert server.stream_requests == 1


class StalledStream(httpx.AsyncByteStream):
    """Sends the connected frame, then goes silent without closing."""

    async def __aiter__(self):
        yield sse_body({"type": "connected"}).encode()
        await asyncio.sleep(3600)


def test_silent_channel_is_treated_as_lost_and_reconnected():
    server = FakeServer([(200, StalledStream())])
    states: list[ConsumerState] = []
    delays: list[float] = []

    async def scenario():
        consumer = None

        async def fake_sleep(delay):
            delays.append(delay)
            await consumer.close()

        consumer = ReconnectingStreamConsumer(
            _api(server, heartbeat_timeout=0.05),
            on_state_change=states.append,
            sleep=fake_sleep,
        )
        await asyncio.wait_for(consumer.run(), timeout=5)
        return consumer

    consumer = asyncio.run(scenario())

    assert isinstance(consumer.last_exception, ChannelError)
    assert states[:3] == [ConsumerState.CONNECTING, ConsumerState.CONNECTED, ConsumerState.ERROR]
    assert ConsumerState.RECONNECTING in states
    assert delays == [1]


def test_backoff_keeps_growing_until_the_connected_frame_arrives():
    server = FakeServer([(503, ""), (200, ""), (503, "")])
    delays: list[float] = []

    async def scenario():
        consumer = None

        async def fake_sleep(delay):
            delays.append(delay)
            if len(delays) == 3:
                await consumer.close()

        consumer = ReconnectingStreamConsumer(_api(server), sleep=fake_sleep)
        await consumer.run()
        return consumer

    consumer = asyncio.run(scenario())

    assert delays == [1, 2, 4]
    assert consumer.attempts == 3


def test_heartbeat_timeout_must_be_positive():
    with pytest.raises(ValueError):
        NotificationApiClient("http://notify.test", heartbeat_timeout=0)
