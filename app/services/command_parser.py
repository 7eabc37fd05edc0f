"""
Command parsing.

Inbound text is normalized once (whitespace, control characters, case) and
then decoded as a JSON object. Anything that does not decode is still
representable as an UNKNOWN command so it can be echoed back to the caller.
"""
import json
import logging
import math
import re
from typing import Any, Dict, Optional, Union

from app.core.exceptions import MissingParameter
from app.models.command import Action, Command

logger = logging.getLogger(__name__)

# Accepted spellings for commands addressed to one relay
RELAY_ACTION_ALIASES: Dict[str, Action] = {
    "on": Action.TURN_ON,
    "turn_on": Action.TURN_ON,
    "off": Action.TURN_OFF,
    "turn_off": Action.TURN_OFF,
    "toggle": Action.TOGGLE,
    "status": Action.GET_STATUS,
    "get_status": Action.GET_STATUS,
}

# Accepted spellings for commands without a relay_id
GLOBAL_ACTION_ALIASES: Dict[str, Action] = {
    "get_all_status": Action.GET_ALL_STATUS,
    "status": Action.GET_ALL_STATUS,
    "all_on": Action.ALL_ON,
    "turn_all_on": Action.ALL_ON,
    "all_off": Action.ALL_OFF,
    "turn_all_off": Action.ALL_OFF,
}

# HTTP query spellings
HTTP_CONTROL_ALIASES: Dict[str, Action] = {
    "on": Action.TURN_ON,
    "1": Action.TURN_ON,
    "true": Action.TURN_ON,
    "off": Action.TURN_OFF,
    "0": Action.TURN_OFF,
    "false": Action.TURN_OFF,
    "toggle": Action.TOGGLE,
}
HTTP_BATCH_ALIASES: Dict[str, Action] = {
    "on": Action.ALL_ON,
    "off": Action.ALL_OFF,
}

RELAY_ACTIONS = ["on", "off", "toggle", "status"]
ALL_ACTIONS = RELAY_ACTIONS + ["all_on", "all_off"]


# Leading integer of a query value, e.g. "2.0" -> 2, "1abc" -> 1
LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _relay_id(value: Any) -> int:
    # Numbers truncate toward zero; anything else resolves to 0, which is
    # never a valid relay id.
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


class CommandParser:
    """Turns raw WebSocket frames and HTTP query values into Commands."""

    @staticmethod
    def clean(raw: Union[bytes, bytearray, str]) -> str:
        """
        Normalize inbound text: strip whitespace, drop CR/LF and anything
        outside printable ASCII (32-126), then lower-case.
        """
        if isinstance(raw, (bytes, bytearray)):
            text = bytes(raw).decode("utf-8", errors="replace")
        else:
            text = raw
        text = text.strip().replace("\r", "").replace("\n", "")
        text = "".join(c for c in text if 32 <= ord(c) <= 126)
        return text.strip().lower()

    def parse(self, raw: Union[bytes, bytearray, str]) -> Command:
        text = self.clean(raw)
        try:
            doc = json.loads(text)
        except (ValueError, RecursionError):
            doc = None
        if not isinstance(doc, dict):
            logger.debug(f"Not a JSON object: '{text}'")
            return Command(action=Action.UNKNOWN, text=text, structured=False)

        action = doc.get("action")
        if not isinstance(action, str):
            action = ""

        if "relay_id" in doc:
            target = _relay_id(doc["relay_id"])
            resolved = RELAY_ACTION_ALIASES.get(action, Action.UNKNOWN)
            return Command(
                action=resolved,
                target=target,
                text=action if resolved is Action.UNKNOWN else None,
            )

        resolved = GLOBAL_ACTION_ALIASES.get(action, Action.UNKNOWN)
        return Command(action=resolved, text=action if resolved is Action.UNKNOWN else None)

    def control_command(self, relay_id: Optional[str], action: Optional[str]) -> Command:
        """Command for ``POST /api/relay/control?id=N&action=...``."""
        if relay_id is None or action is None:
            raise MissingParameter("Missing required parameters: id and action")
        action = action.strip().lower()
        resolved = HTTP_CONTROL_ALIASES.get(action, Action.UNKNOWN)
        return Command(
            action=resolved,
            target=self.query_relay_id(relay_id),
            text=action if resolved is Action.UNKNOWN else None,
        )

    def status_command(self, relay_id: Optional[str]) -> Command:
        """Command for ``GET /api/relay?id=N``."""
        if relay_id is None:
            raise MissingParameter("Missing relay ID parameter")
        return Command(action=Action.GET_STATUS, target=self.query_relay_id(relay_id))

    def batch_command(self, action: Optional[str]) -> Command:
        """Command for ``POST /api/relays/all?action=on|off``."""
        if action is None:
            raise MissingParameter("Missing action parameter")
        action = action.strip().lower()
        resolved = HTTP_BATCH_ALIASES.get(action, Action.UNKNOWN)
        return Command(action=resolved, text=action if resolved is Action.UNKNOWN else None)

    @staticmethod
    def query_relay_id(value: str) -> int:
        match = LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
