"""
Shared WebSocket utilities for tracking sessions and delivering messages.

Delivery is best-effort: a send that fails or times out drops that session
and never affects delivery to the others.
"""
import asyncio
import logging
from typing import Dict, Optional, Callable, Awaitable
from fastapi import WebSocket, status
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class WebSocketManager:
    """
    Central WebSocket session manager that handles:
    - Session registration and tracking
    - Unicast and broadcast delivery with per-send timeouts
    - Graceful shutdown of every session
    """
    def __init__(self, send_timeout: float = 2.0):
        self.active_connections: Dict[str, WebSocket] = {}
        self.send_timeout = send_timeout

    def __len__(self) -> int:
        return len(self.active_connections)

    def register_connection(self, key: str, websocket: WebSocket) -> None:
        """Register an active WebSocket session under a specific key"""
        self.active_connections[key] = websocket
        logger.debug(f"Registered connection {key}, total: {len(self.active_connections)}")

    def unregister_connection(self, key: str) -> None:
        """Remove a WebSocket session from tracking"""
        if self.active_connections.pop(key, None) is not None:
            logger.debug(f"Unregistered connection {key}, remaining: {len(self.active_connections)}")

    async def send_to(self, key: str, text: str) -> bool:
        """Send text to one session, dropping it if the send fails"""
        websocket = self.active_connections.get(key)
        if websocket is None:
            return False
        if not await self._send(websocket, text):
            self.unregister_connection(key)
            return False
        return True

    async def broadcast(self, text: str) -> int:
        """
        Send text to every registered session. Returns the number of
        sessions that received it.
        """
        targets = list(self.active_connections.items())
        if not targets:
            return 0
        results = await asyncio.gather(
            *[self._send(websocket, text) for _, websocket in targets],
            return_exceptions=True,
        )
        delivered = 0
        for (key, _), result in zip(targets, results):
            if result is True:
                delivered += 1
            else:
                logger.warning(f"Dropping WebSocket session {key} after failed send")
                self.unregister_connection(key)
        return delivered

    async def _send(self, websocket: WebSocket, text: str) -> bool:
        try:
            return await asyncio.wait_for(safe_send_text(websocket, text), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Timed out sending to WebSocket after {self.send_timeout}s")
            return False

    async def close_all(self) -> None:
        """Close and forget every session"""
        for key, websocket in list(self.active_connections.items()):
            await safe_close(websocket, code=status.WS_1001_GOING_AWAY)
            self.unregister_connection(key)


async def safe_send_text(websocket: WebSocket, text: str) -> bool:
    """Safely send text with proper error handling for closed connections"""
    try:
        await websocket.send_text(text)
        return True
    except RuntimeError as e:
        if "close message has been sent" in str(e) or "not connected" in str(e).lower():
            # Connection is already closed, no need for further action
            return False
        logger.error(f"Error sending text message: {e}")
        return False
    except Exception as e:
        logger.error(f"Error sending text message: {e}")
        return False


async def safe_close(websocket: WebSocket, code: int = status.WS_1000_NORMAL_CLOSURE) -> bool:
    """Safely close a WebSocket connection with error handling"""
    try:
        await websocket.close(code=code)
        return True
    except Exception as e:
        logger.debug(f"Error closing WebSocket (likely already closed): {e}")
        return False


@asynccontextmanager
async def websocket_connection(
    websocket: WebSocket,
    manager: WebSocketManager,
    connection_id: str,
    on_connect: Optional[Callable[[WebSocket], Awaitable[bool]]] = None,
    on_disconnect: Optional[Callable[[WebSocket], Awaitable[None]]] = None
):
    """
    Context manager for WebSocket sessions that handles:
    - Connection acceptance
    - Registration with the session manager
    - Custom initialization via on_connect callback, run once registered
      so no broadcast issued after the handshake is missed
    - Automatic unregistration on exit

    Usage:
        async with websocket_connection(websocket, manager, "connection_id") as connected:
            if not connected:
                return  # Connection failed

            # Normal WebSocket communication
    """
    is_connected = False
    connected = False
    try:
        await websocket.accept()
        is_connected = True

        manager.register_connection(connection_id, websocket)
        if on_connect is None or await on_connect(websocket):
            connected = True
        else:
            manager.unregister_connection(connection_id)
            await safe_close(websocket)
    except Exception as e:
        logger.exception(f"Error establishing WebSocket connection: {e}")
        if is_connected:
            await safe_close(websocket)

    try:
        yield connected
    finally:
        if is_connected and on_disconnect:
            await on_disconnect(websocket)
        manager.unregister_connection(connection_id)
        logger.debug(f"WebSocket connection context for {connection_id} exited")
