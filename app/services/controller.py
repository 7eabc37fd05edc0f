"""
Glue between transports and the command core.

Inbound bytes go through CommandParser -> CommandDispatcher ->
ResponseFormatter, and the rendered result is handed to the WebSocket
manager for delivery to every session.
"""
import logging
from typing import Optional, Union

from app.core.config.models import RelayTable
from app.models.command import Action, Command, Outcome
from app.services.command_dispatcher import CommandDispatcher
from app.services.command_parser import CommandParser
from app.services.digital_output import DigitalOutput
from app.services.relay_registry import RelayRegistry
from app.services.response_formatter import ResponseFormatter
from app.utils.websocket_utils import WebSocketManager

logger = logging.getLogger(__name__)

# Actions that change relay state
MUTATING_ACTIONS = (Action.TURN_ON, Action.TURN_OFF, Action.TOGGLE, Action.ALL_ON, Action.ALL_OFF)


class RelayService:
    """
    One instance per application, stored on ``app.state.relays``.
    """

    def __init__(
        self,
        table: RelayTable,
        output: DigitalOutput,
        ws_manager: Optional[WebSocketManager] = None,
    ) -> None:
        self.output = output
        self.registry = RelayRegistry(table, output)
        self.parser = CommandParser()
        self.dispatcher = CommandDispatcher(self.registry)
        self.formatter = ResponseFormatter(self.registry)
        self.ws_manager = ws_manager or WebSocketManager()

    async def handle_frame(self, raw: Union[bytes, str]) -> str:
        """
        Handle one inbound WebSocket frame. The result, success or error,
        is broadcast to every session, including pure status reads.
        """
        data = raw.encode("utf-8") if isinstance(raw, str) else bytes(raw)
        command = self.parser.parse(data)
        logger.info(f"WebSocket message received (raw length: {len(data)}): '{self.parser.clean(data)}'")
        if command.action is Action.UNKNOWN and not command.structured:
            logger.debug(f"  Hex dump: {data.hex(' ').upper()}")
        outcome = self.dispatcher.dispatch(command)
        message = self.formatter.to_json(self.formatter.outcome(outcome))
        await self.ws_manager.broadcast(message)
        return message

    async def execute(self, command: Command) -> Outcome:
        """
        Dispatch a command from the HTTP API. State changes are also
        broadcast to WebSocket observers.
        """
        outcome = self.dispatcher.dispatch(command)
        if outcome.ok and outcome.action in MUTATING_ACTIONS:
            await self.ws_manager.broadcast(self.formatter.to_json(self.formatter.outcome(outcome)))
        return outcome

    def close(self) -> None:
        self.output.close()
