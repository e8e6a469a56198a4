"""Real-time infrastructure — in-process WebSocket fan-out.

Learn: Events flow in one direction:
1. ForumService persists a mutation, then calls Broadcaster.broadcast()
2. Broadcaster serializes the event once and sends it to every open /ws client

Delivery is fire-and-forget. If a client isn't connected when the event
goes out, it never sees it — the frontend can always query the REST API
to catch up. There is no event log, no replay, and no ordering guarantee.
"""

from agora.realtime.broadcaster import Broadcaster
from agora.realtime.events import (
    LikeAnswerEvent,
    LiveEvent,
    NewAnswerEvent,
    NewQuestionEvent,
)

__all__ = [
    "Broadcaster",
    "LikeAnswerEvent",
    "LiveEvent",
    "NewAnswerEvent",
    "NewQuestionEvent",
]
