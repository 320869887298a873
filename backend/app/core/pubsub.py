# backend/app/core/pubsub.py
"""
PubSub (Publish-Subscribe) module for WebSocket message broadcasting.
Provides the global chat channel: every connected client receives every event.
"""
import logging
from typing import Set
from starlette.websockets import WebSocket

logger = logging.getLogger("uvicorn.error")

UPDATE_MESSAGES = "updateMessages"  # Event pushed to clients when a chat message arrives


class Channel:
    """
    Single global fan-out channel for WebSocket clients.

    Architecture:
    - Router is responsible for ws.accept(); this module only handles message routing
    - There is no topic filtering: a published event goes to every subscriber
    - Delivery is fire-and-forget; a client whose send fails is dropped and
      simply misses later events (no replay)

    Frames are JSON objects: {"event": <name>, "data": <payload>}
    """
    def __init__(self):
        self._subscribers: Set[WebSocket] = set()

    def __len__(self) -> int:
        return len(self._subscribers)

    # -------- subscribe / unsubscribe (no accept, only register) --------
    async def subscribe(self, ws: WebSocket):
        """Register an accepted WebSocket connection."""
        self._subscribers.add(ws)

    def unsubscribe(self, ws: WebSocket):
        """Remove a WebSocket connection. Unknown connections are ignored."""
        self._subscribers.discard(ws)

    # -------- publish --------
    async def publish(self, event: str, data: dict) -> int:
        """
        Send an event to every subscriber.

        The subscriber set is snapshotted first, so concurrent publishers and
        (un)subscriptions during the send loop are safe.

        Returns:
            Number of clients the event was delivered to
        """
        conns = list(self._subscribers)
        frame = {"event": event, "data": data}
        delivered = 0
        for s in conns:
            try:
                await s.send_json(frame)
                delivered += 1
            except Exception as e:
                # Connection is gone; drop it so later publishes skip it
                logger.debug("[pubsub] dropping subscriber after send failure: %r", e)
                self.unsubscribe(s)
        logger.info("[pubsub] %s delivered to %d/%d clients", event, delivered, len(conns))
        return delivered

# Global channel instance (singleton pattern)
# Routes reach it through the get_channel dependency
channel = Channel()
