"""
Error kinds raised while resolving and executing relay commands.

Every error is recoverable: the dispatcher turns them into error outcomes
and the HTTP layer renders them as 400 responses.
"""
from typing import Optional


class RelayError(Exception):
    """Base class for all relay command errors."""
    kind = "relay_error"

    def __init__(self, message: str, command: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.command = command


class InvalidRelayId(RelayError):
    """Relay id outside the configured 1..N range."""
    kind = "invalid_relay_id"

    def __init__(self, relay_id, count: int, message: Optional[str] = None) -> None:
        self.relay_id = relay_id
        self.count = count
        super().__init__(message or f"Invalid relay_id. Must be between 1 and {count}")


class InvalidAction(RelayError):
    """Recognized command shape but unsupported action."""
    kind = "invalid_action"


class MissingParameter(RelayError):
    """HTTP request lacking a required query parameter."""
    kind = "missing_parameter"


class UnknownCommand(RelayError):
    """Input that could not be decoded into a command."""
    kind = "unknown_command"
