"""
Tests for WebSocketManager delivery semantics.
"""
import asyncio

import pytest

from app.utils.websocket_utils import WebSocketManager, safe_send_text, websocket_connection


class FakeWebSocket:
    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.sent = []
        self.fail = fail
        self.delay = delay
        self.closed_with = None

    async def send_text(self, text):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError('Cannot call "send" once a close message has been sent.')
        self.sent.append(text)

    async def accept(self):
        pass

    async def close(self, code=1000):
        self.closed_with = code


class TestWebSocketManager:

    @pytest.mark.asyncio
    async def test_broadcast_reaches_all_sessions(self):
        manager = WebSocketManager()
        a, b = FakeWebSocket(), FakeWebSocket()
        manager.register_connection("a", a)
        manager.register_connection("b", b)

        delivered = await manager.broadcast("hello")

        assert delivered == 2
        assert a.sent == ["hello"]
        assert b.sent == ["hello"]

    @pytest.mark.asyncio
    async def test_failed_session_does_not_block_others(self):
        manager = WebSocketManager()
        good, bad = FakeWebSocket(), FakeWebSocket(fail=True)
        manager.register_connection("good", good)
        manager.register_connection("bad", bad)

        delivered = await manager.broadcast("update")

        assert delivered == 1
        assert good.sent == ["update"]
        assert "bad" not in manager.active_connections
        assert len(manager) == 1

    @pytest.mark.asyncio
    async def test_slow_session_times_out(self):
        manager = WebSocketManager(send_timeout=0.05)
        fast, slow = FakeWebSocket(), FakeWebSocket(delay=1.0)
        manager.register_connection("fast", fast)
        manager.register_connection("slow", slow)

        delivered = await manager.broadcast("tick")

        assert delivered == 1
        assert fast.sent == ["tick"]
        assert "slow" not in manager.active_connections

    @pytest.mark.asyncio
    async def test_broadcast_without_sessions(self):
        assert await WebSocketManager().broadcast("nobody") == 0

    @pytest.mark.asyncio
    async def test_send_to_single_session(self):
        manager = WebSocketManager()
        a, b = FakeWebSocket(), FakeWebSocket()
        manager.register_connection("a", a)
        manager.register_connection("b", b)

        assert await manager.send_to("a", "only a") is True
        assert await manager.send_to("missing", "x") is False
        assert a.sent == ["only a"]
        assert b.sent == []

    @pytest.mark.asyncio
    async def test_close_all(self):
        manager = WebSocketManager()
        a = FakeWebSocket()
        manager.register_connection("a", a)

        await manager.close_all()

        assert a.closed_with == 1001
        assert len(manager) == 0

    def test_unregister_unknown_key_is_noop(self):
        manager = WebSocketManager()
        manager.unregister_connection("ghost")
        assert len(manager) == 0


class TestWebSocketConnection:

    @pytest.mark.asyncio
    async def test_broadcast_during_welcome_reaches_new_session(self):
        manager = WebSocketManager()
        websocket = FakeWebSocket(delay=0.05)
        welcome_started = asyncio.Event()

        async def on_connect(ws):
            welcome_started.set()
            return await safe_send_text(ws, "welcome")

        async def session():
            async with websocket_connection(websocket, manager, "new", on_connect=on_connect) as connected:
                assert connected is True
                await asyncio.sleep(0.2)

        task = asyncio.create_task(session())
        await welcome_started.wait()
        delivered = await manager.broadcast("relay1 on")
        await task

        assert delivered == 1
        assert websocket.sent == ["welcome", "relay1 on"]
        assert len(manager) == 0

    @pytest.mark.asyncio
    async def test_rejected_session_is_not_registered(self):
        manager = WebSocketManager()
        websocket = FakeWebSocket()

        async def on_connect(ws):
            return False

        async with websocket_connection(websocket, manager, "rejected", on_connect=on_connect) as connected:
            assert connected is False
            assert len(manager) == 0
        assert websocket.closed_with == 1000
