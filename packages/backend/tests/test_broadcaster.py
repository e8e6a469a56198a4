"""Broadcaster unit tests — registry and fan-out with fake connections.

Learn: The broadcaster only needs send_text() plus the two starlette
state flags, so these tests never open a socket.
"""

import asyncio
import json
from datetime import datetime, timezone

import pytest
from starlette.websockets import WebSocketState

from agora.realtime.broadcaster import Broadcaster
from agora.realtime.events import (
    LiveEventAdapter,
    NewQuestionEvent,
    WELCOME_MESSAGE,
)
from agora.schemas.forum import QuestionRead


def _question_event(question_id: int = 1) -> NewQuestionEvent:
    return NewQuestionEvent(payload=QuestionRead(
        id=question_id,
        title="Title",
        description="Description",
        tags="a,b",
        created_at=datetime.now(timezone.utc),
    ))


# ═══════════════════════════════════════════════════════════
# register / unregister
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_sends_acknowledgment_to_that_connection_only(make_subscriber):
    b = Broadcaster()
    first, second = make_subscriber(), make_subscriber()
    await b.register(first)
    await b.register(second)

    assert first.sent == [
        {"type": "CONNECTED", "payload": {"message": WELCOME_MESSAGE}}
    ]
    assert len(second.sent) == 1
    assert b.subscriber_count == 2


@pytest.mark.asyncio
async def test_register_never_raises(make_subscriber):
    b = Broadcaster()
    broken = make_subscriber(fail=True)
    await b.register(broken)
    assert b.is_registered(broken)


@pytest.mark.asyncio
async def test_unregister_is_idempotent(make_subscriber):
    b = Broadcaster()
    sub = make_subscriber()
    await b.register(sub)

    b.unregister(sub)
    b.unregister(sub)
    b.unregister(make_subscriber())  # never registered

    assert b.subscriber_count == 0
    assert not b.is_registered(sub)


# ═══════════════════════════════════════════════════════════
# broadcast
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_broadcast_with_no_subscribers():
    b = Broadcaster()
    assert await b.broadcast(_question_event()) == 0


@pytest.mark.asyncio
async def test_broadcast_reaches_remaining_after_unregister(make_subscriber):
    """Three registered, one unregistered → exactly two deliveries."""
    b = Broadcaster()
    subs = [make_subscriber() for _ in range(3)]
    for s in subs:
        await b.register(s)
    b.unregister(subs[1])

    delivered = await b.broadcast(_question_event(7))

    assert delivered == 2
    assert [e["payload"]["id"] for e in subs[0].events] == [7]
    assert subs[1].events == []
    assert [e["payload"]["id"] for e in subs[2].events] == [7]


@pytest.mark.asyncio
async def test_broadcast_isolates_failing_subscriber(make_subscriber):
    b = Broadcaster()
    healthy_a, broken, healthy_b = (
        make_subscriber(), make_subscriber(fail=True), make_subscriber()
    )
    for s in (healthy_a, broken, healthy_b):
        await b.register(s)

    delivered = await b.broadcast(_question_event())

    assert delivered == 2
    assert len(healthy_a.events) == 1
    assert len(healthy_b.events) == 1
    # A failed write doesn't unregister
    assert b.is_registered(broken)


@pytest.mark.asyncio
async def test_broadcast_skips_non_writable_without_unregistering(make_subscriber):
    b = Broadcaster()
    open_sub, closing = make_subscriber(), make_subscriber()
    await b.register(open_sub)
    await b.register(closing)
    closing.client_state = WebSocketState.DISCONNECTED

    delivered = await b.broadcast(_question_event())

    assert delivered == 1
    assert closing.events == []
    assert b.is_registered(closing)


@pytest.mark.asyncio
async def test_broadcast_serialization_failure_delivers_nothing(make_subscriber):
    b = Broadcaster()
    sub = make_subscriber()
    await b.register(sub)

    delivered = await b.broadcast({"type": "NEW_QUESTION", "payload": object()})

    assert delivered == 0
    assert sub.events == []


@pytest.mark.asyncio
async def test_broadcast_accepts_plain_dicts(make_subscriber):
    b = Broadcaster()
    sub = make_subscriber()
    await b.register(sub)

    await b.broadcast({"type": "LIKE_ANSWER", "payload": {"id": 3, "likes": 9}})
    assert sub.events == [{"type": "LIKE_ANSWER", "payload": {"id": 3, "likes": 9}}]


@pytest.mark.asyncio
async def test_plain_dict_datetimes_encode_like_models(make_subscriber):
    b = Broadcaster()
    sub = make_subscriber()
    await b.register(sub)
    event = _question_event(4)

    await b.broadcast(event.model_dump())

    assert sub.events == [json.loads(event.model_dump_json())]


@pytest.mark.asyncio
async def test_broadcast_returns_without_waiting_for_stalled_subscriber(make_subscriber):
    """A peer that stops reading is left sending in the background."""
    b = Broadcaster(delivery_wait=0.05, send_timeout=30)
    healthy, stalled = make_subscriber(), make_subscriber()
    await b.register(healthy)
    await b.register(stalled)
    stalled.stalled = True

    delivered = await asyncio.wait_for(b.broadcast(_question_event()), timeout=2)

    assert delivered == 1
    assert len(healthy.events) == 1
    assert b.pending_deliveries == 1

    await b.close()
    assert b.pending_deliveries == 0
    assert stalled.events == []


@pytest.mark.asyncio
async def test_stalled_send_times_out_as_failed_delivery(make_subscriber):
    b = Broadcaster(delivery_wait=2, send_timeout=0.05)
    healthy, stalled = make_subscriber(), make_subscriber()
    await b.register(healthy)
    await b.register(stalled)
    stalled.stalled = True

    delivered = await b.broadcast(_question_event())

    assert delivered == 1
    assert b.pending_deliveries == 0
    # Timed out, but still registered until the endpoint sees the close
    assert b.is_registered(stalled)


@pytest.mark.asyncio
async def test_close_without_pending_sends_is_a_no_op():
    b = Broadcaster()
    await b.close()
    assert b.pending_deliveries == 0


@pytest.mark.asyncio
async def test_broadcasters_are_independent(make_subscriber):
    """Two app instances never share subscribers."""
    one, two = Broadcaster(), Broadcaster()
    sub = make_subscriber()
    await one.register(sub)

    assert await two.broadcast(_question_event()) == 0
    assert sub.events == []


def test_events_round_trip_through_discriminated_union():
    event = _question_event(11)
    parsed = LiveEventAdapter.validate_json(event.model_dump_json())
    assert isinstance(parsed, NewQuestionEvent)
    assert parsed.payload.id == 11
