"""
Tests for RelayService frame handling and the periodic status log.
"""
import asyncio
import logging

import pytest

from app.main import status_log_loop
from app.services.controller import RelayService


@pytest.fixture
def service(table, output) -> RelayService:
    return RelayService(table, output)


class TestHandleFrame:

    @pytest.mark.asyncio
    async def test_returns_rendered_outcome(self, service):
        message = await service.handle_frame('{"relay_id":1,"action":"on"}')
        assert message == '{"status":"success","relay_id":1,"action":"on","state":true}'
        assert service.registry.get(1).state is True

    @pytest.mark.asyncio
    async def test_logs_byte_length_of_frame(self, service, caplog):
        caplog.set_level(logging.INFO, logger="app.services.controller")
        # Three characters, five bytes in UTF-8
        await service.handle_frame("oné\n")
        assert "raw length: 5" in caplog.text
        assert "'on'" in caplog.text

    @pytest.mark.asyncio
    async def test_bytes_frames_report_their_length(self, service, caplog):
        caplog.set_level(logging.INFO, logger="app.services.controller")
        await service.handle_frame(b'{"action":"status"}')
        assert "raw length: 19" in caplog.text

    @pytest.mark.asyncio
    async def test_http_reads_are_not_broadcast(self, service):
        sent = []

        async def record(text):
            sent.append(text)
            return 1

        service.ws_manager.broadcast = record
        await service.execute(service.parser.status_command("1"))
        await service.execute(service.parser.control_command("1", "on"))
        assert sent == ['{"status":"success","relay_id":1,"action":"on","state":true}']


class TestStatusLog:

    @pytest.mark.asyncio
    async def test_logs_clients_and_relay_states(self, service, caplog):
        caplog.set_level(logging.INFO, logger="app.main")
        task = asyncio.create_task(status_log_loop(service, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert "Status - Connected clients: 0, Relays: R1:OFF, R2:OFF" in caplog.text

    @pytest.mark.asyncio
    async def test_reflects_state_changes(self, service, caplog):
        caplog.set_level(logging.INFO, logger="app.main")
        service.registry.set_state(2, True)
        task = asyncio.create_task(status_log_loop(service, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert "Relays: R1:OFF, R2:ON" in caplog.text
