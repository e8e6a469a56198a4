"""Subscriber registry and event fan-out.

Learn: The Broadcaster is an explicitly owned object — create_app() builds
one per application instance and hangs it on app.state. Nothing imports a
global client list, so tests can run several independent apps side by side.

The subscriber set is only touched from the event loop (register,
unregister, and the snapshot taken by broadcast), so it needs no lock.
It would need one if this ever ran across threads.

Each connection is either active (in the set) or closed (removed). Only
the /ws endpoint removes connections, on disconnect or protocol error.
A connection whose transport is no longer writable is skipped by
broadcast but stays registered until the endpoint notices the close.

broadcast() waits at most `delivery_wait` seconds for sends to finish.
Sends still in flight after that keep running in the background (tracked
in _pending) and are cancelled once they pass `send_timeout`, so a
subscriber that stops reading never holds up the HTTP request that
triggered the event.
"""

import asyncio
from typing import Optional, Protocol, Union

import structlog
from pydantic import BaseModel, TypeAdapter
from starlette.requests import Request
from starlette.websockets import WebSocketState

from agora.config import settings
from agora.realtime.events import ConnectedEvent

logger = structlog.get_logger()

_dict_adapter = TypeAdapter(dict)


class Subscriber(Protocol):
    """The slice of starlette's WebSocket the broadcaster relies on."""

    client_state: WebSocketState
    application_state: WebSocketState

    async def send_text(self, data: str) -> None: ...


def _is_writable(connection: Subscriber) -> bool:
    return (
        connection.client_state == WebSocketState.CONNECTED
        and connection.application_state == WebSocketState.CONNECTED
    )


def _event_type(event: Union[BaseModel, dict]):
    if isinstance(event, dict):
        return event.get("type")
    return getattr(event, "type", None)


class Broadcaster:
    """Best-effort fan-out of live events to every connected subscriber."""

    def __init__(
        self,
        delivery_wait: Optional[float] = None,
        send_timeout: Optional[float] = None,
    ):
        self._subscribers: set[Subscriber] = set()
        self._pending: set[asyncio.Task] = set()
        self.delivery_wait = (
            settings.live_delivery_wait_seconds
            if delivery_wait is None
            else delivery_wait
        )
        self.send_timeout = (
            settings.live_send_timeout_seconds
            if send_timeout is None
            else send_timeout
        )

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def pending_deliveries(self) -> int:
        """Sends that outlived their broadcast() call and are still running."""
        return len(self._pending)

    def is_registered(self, connection: Subscriber) -> bool:
        return connection in self._subscribers

    async def register(self, connection: Subscriber) -> None:
        """Add a connection and acknowledge it. Never raises."""
        self._subscribers.add(connection)
        logger.info("live.connected", subscribers=len(self._subscribers))
        await self._deliver(connection, ConnectedEvent().model_dump_json())

    def unregister(self, connection: Subscriber) -> None:
        """Remove a connection. Unknown connections are ignored."""
        if connection in self._subscribers:
            self._subscribers.discard(connection)
            logger.info("live.disconnected", subscribers=len(self._subscribers))

    async def broadcast(self, event: Union[BaseModel, dict]) -> int:
        """Send an event to every writable subscriber.

        Returns the number of deliveries that completed within
        `delivery_wait`. Never raises: a serialization failure delivers
        nothing, a failed or slow send only affects that one subscriber.
        """
        try:
            message = self._serialize(event)
        except Exception as e:
            logger.error("live.serialize_failed", error=str(e))
            return 0

        # Snapshot: the set may change while sends are suspended
        targets = [c for c in self._subscribers if _is_writable(c)]
        if not targets:
            return 0

        tasks = [asyncio.create_task(self._deliver(c, message)) for c in targets]
        done, still_sending = await asyncio.wait(tasks, timeout=self.delivery_wait)
        for task in still_sending:
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        delivered = sum(task.result() for task in done)
        logger.info(
            "live.broadcast",
            event_type=_event_type(event),
            delivered=delivered,
            targets=len(targets),
            still_sending=len(still_sending),
        )
        return delivered

    async def close(self) -> None:
        """Cancel sends still in flight. Called on application shutdown."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info("live.closed", cancelled=len(pending))

    @staticmethod
    def _serialize(event: Union[BaseModel, dict]) -> str:
        if isinstance(event, BaseModel):
            return event.model_dump_json()
        # Plain dicts go through pydantic too so datetimes encode the same way
        return _dict_adapter.dump_json(event).decode()

    async def _deliver(self, connection: Subscriber, message: str) -> bool:
        try:
            await asyncio.wait_for(connection.send_text(message), self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("live.delivery_failed", error="send timed out")
            return False
        except Exception as e:
            logger.warning("live.delivery_failed", error=str(e))
            return False


def get_broadcaster(request: Request) -> Broadcaster:
    """FastAPI dependency — the app instance's broadcaster."""
    return request.app.state.broadcaster
