import logging
from typing import Callable, Dict

from app.core.exceptions import InvalidAction, RelayError, UnknownCommand
from app.models.command import Action, Command, Outcome
from app.services.relay_registry import RelayRegistry

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class CommandDispatcher:
    """
    Executes Commands against a RelayRegistry.

    ``dispatch`` never raises for command errors: every RelayError is
    turned into an error Outcome carrying a message.
    """

    def __init__(self, registry: RelayRegistry) -> None:
        self.registry = registry
        self._handlers: Dict[Action, Callable[[Command], Outcome]] = {
            Action.TURN_ON: self._set_state,
            Action.TURN_OFF: self._set_state,
            Action.TOGGLE: self._toggle,
            Action.GET_STATUS: self._get_status,
            Action.GET_ALL_STATUS: self._get_all_status,
            Action.ALL_ON: self._set_all,
            Action.ALL_OFF: self._set_all,
            Action.UNKNOWN: self._unknown,
        }

    def dispatch(self, command: Command) -> Outcome:
        handler = self._handlers[command.action]
        try:
            return handler(command)
        except RelayError as e:
            logger.warning(f"Command {command.action.value} failed: {e.message}")
            return Outcome(
                ok=False,
                action=command.action,
                message=e.message,
                error=e.kind,
                command=e.command,
                targeted=command.is_targeted,
            )

    def _snapshot(self, command: Command) -> Outcome:
        affected = [(relay.id, relay.state) for relay in self.registry.get_all()]
        return Outcome(ok=True, action=command.action, affected=affected)

    def _set_state(self, command: Command) -> Outcome:
        relay = self.registry.set_state(command.target, command.action is Action.TURN_ON)
        return Outcome(ok=True, action=command.action, affected=[(relay.id, relay.state)], targeted=True)

    def _toggle(self, command: Command) -> Outcome:
        relay = self.registry.toggle(command.target)
        return Outcome(ok=True, action=command.action, affected=[(relay.id, relay.state)], targeted=True)

    def _get_status(self, command: Command) -> Outcome:
        relay = self.registry.get(command.target)
        return Outcome(ok=True, action=command.action, affected=[(relay.id, relay.state)], targeted=True)

    def _get_all_status(self, command: Command) -> Outcome:
        return self._snapshot(command)

    def _set_all(self, command: Command) -> Outcome:
        value = command.action is Action.ALL_ON
        # Ascending id order, one relay at a time, under one lock hold.
        with self.registry.lock:
            for relay_id in self.registry.ids:
                self.registry.set_state(relay_id, value)
            logger.info(f"All relays turned {'ON' if value else 'OFF'}")
            return self._snapshot(command)

    def _unknown(self, command: Command) -> Outcome:
        if not command.structured:
            logger.info(f"Unknown command: '{command.text}'")
            raise UnknownCommand("Unknown command", command=command.text)
        if command.is_targeted:
            # Range check first so a bad id is reported before a bad action.
            self.registry.get(command.target)
            raise InvalidAction("Invalid action for relay", command=command.text)
        raise InvalidAction("Invalid action", command=command.text)
