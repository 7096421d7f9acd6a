import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.realtime import broadcaster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/changes")
async def subscribe_changes(ws: WebSocket):
    await broadcaster.connect(ws)
    try:
        while True:
            # clients only listen; incoming text is ignored
            await ws.receive_text()
    except WebSocketDisconnect:
        logger.debug("Change subscriber disconnected")
    finally:
        broadcaster.disconnect(ws)
