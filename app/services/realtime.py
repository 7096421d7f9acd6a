"""Push table change notifications to connected WebSocket clients."""
import logging
from typing import Iterable

from fastapi import WebSocket

logger = logging.getLogger(__name__)

EVENTS = ("INSERT", "UPDATE", "DELETE")


class ChangeBroadcaster:
    def __init__(self):
        self.clients: set[WebSocket] = set()

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.clients.add(ws)
        logger.debug("Change subscriber connected (%d total)", len(self.clients))

    def disconnect(self, ws: WebSocket) -> None:
        self.clients.discard(ws)

    async def publish(self, table: str, event: str, ids: Iterable[str] = ()) -> int:
        """Send ``{"table", "event", "ids"}`` to every client.

        Clients whose send fails are dropped. Returns the number of clients
        that received the message.
        """
        if event not in EVENTS:
            raise ValueError(f"Unknown change event: {event}")
        payload = {"table": table, "event": event, "ids": list(ids)}
        delivered = 0
        for ws in list(self.clients):
            try:
                await ws.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.info("Dropping change subscriber: %s", e)
                self.disconnect(ws)
        return delivered


broadcaster = ChangeBroadcaster()
