"""
WebSocket command channel.

Each inbound frame is parsed and dispatched on its own, and the result is
broadcast to every connected session. New sessions receive a welcome
message carrying the current relay snapshot.
"""
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.controller import RelayService
from app.utils.websocket_utils import websocket_connection, safe_send_text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Relay WebSocket API"])


@router.websocket("/ws")
async def relay_websocket(websocket: WebSocket):
    service: RelayService = websocket.app.state.relays
    device_name = websocket.app.state.settings.DEVICE_NAME
    connection_id = f"client_{id(websocket)}"

    async def on_connect(ws: WebSocket) -> bool:
        host = ws.client.host if ws.client else "unknown"
        logger.info(f"WebSocket client {connection_id} connected from {host}")
        # Already registered: the snapshot is taken now and queued ahead of any later broadcast.
        welcome = service.formatter.to_json(service.formatter.welcome(device_name))
        return await safe_send_text(ws, welcome)

    async with websocket_connection(
        websocket,
        service.ws_manager,
        connection_id,
        on_connect=on_connect,
    ) as connected:
        if not connected:
            return

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                data = message.get("text")
                if data is None:
                    data = message.get("bytes") or b""
                await service.handle_frame(data)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.exception(f"Error in WebSocket session {connection_id}: {e}")
        finally:
            logger.info(f"WebSocket client {connection_id} disconnected")
