"""WebSocket endpoint — live-update delivery to frontend clients.

Learn: Each client connects to /ws. The handler:
1. Accepts the connection and registers it with the app's Broadcaster
   (which immediately sends a CONNECTED acknowledgment)
2. Reads client frames until the client goes away — frames are logged
   and otherwise ignored; all traffic that matters flows server → client
3. Unregisters on disconnect or any protocol error

This is a long-lived connection — one per browser tab.
"""

import structlog
from fastapi import APIRouter, WebSocket

from agora.realtime.broadcaster import Broadcaster

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/ws")
async def live_updates(websocket: WebSocket):
    """Subscribe to NEW_QUESTION / NEW_ANSWER / LIKE_ANSWER events."""
    broadcaster: Broadcaster = websocket.app.state.broadcaster

    await websocket.accept()
    await broadcaster.register(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            data = message.get("text")
            if data is None:
                data = f"<{len(message.get('bytes') or b'')} bytes>"
            logger.info("live.client_message", message=data[:500])
    finally:
        broadcaster.unregister(websocket)
