"""
Canonical JSON rendering of outcomes and registry snapshots.

Key order is part of the wire format existing clients depend on, so every
payload is built as an ordered dict literal and serialized compactly.
"""
import json
from typing import Any, Dict, Iterable, List

from app.models.command import Action, Outcome
from app.models.relay import Relay
from app.services.command_parser import ALL_ACTIONS, RELAY_ACTIONS
from app.services.relay_registry import RelayRegistry

HELP = {
    "json_format": {
        "relay_control": '{"relay_id":1,"action":"on"}',
        "all_control": '{"action":"all_on"}',
        "status": '{"action":"status"}',
    }
}


class ResponseFormatter:
    def __init__(self, registry: RelayRegistry) -> None:
        self.registry = registry

    @staticmethod
    def to_json(payload: Dict[str, Any]) -> str:
        return json.dumps(payload, separators=(",", ":"))

    @staticmethod
    def relay(relay: Relay) -> Dict[str, Any]:
        return {
            "id": relay.id,
            "name": relay.name,
            "description": relay.description,
            "pin": relay.pin,
            "state": relay.state,
        }

    def relays(self, relays: Iterable[Relay]) -> List[Dict[str, Any]]:
        return [self.relay(r) for r in sorted(relays, key=lambda r: r.id)]

    def snapshot(self) -> Dict[str, Any]:
        return {"relays": self.relays(self.registry.get_all())}

    def _affected(self, outcome: Outcome) -> List[Relay]:
        relays = []
        for relay_id, state in outcome.affected:
            relay = self.registry.get(relay_id)
            relay.state = state
            relays.append(relay)
        return relays

    def outcome(self, outcome: Outcome) -> Dict[str, Any]:
        """WebSocket representation of an Outcome."""
        if not outcome.ok:
            return self.error(outcome)

        action = outcome.action
        if action in (Action.TURN_ON, Action.TURN_OFF, Action.TOGGLE):
            relay_id, state = outcome.affected[0]
            return {"status": "success", "relay_id": relay_id, "action": action.value, "state": state}
        if action is Action.GET_STATUS:
            relay = self._affected(outcome)[0]
            return {
                "status": "success",
                "relay_id": relay.id,
                "name": relay.name,
                "description": relay.description,
                "pin": relay.pin,
                "state": relay.state,
            }
        if action in (Action.ALL_ON, Action.ALL_OFF):
            return {
                "status": "success",
                "action": action.value,
                "message": f"All relays turned {'ON' if action is Action.ALL_ON else 'OFF'}",
                "relays": self.relays(self._affected(outcome)),
            }
        return {"relays": self.relays(self._affected(outcome))}

    def error(self, outcome: Outcome) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": "error", "message": outcome.message}
        if outcome.command is not None:
            payload["command"] = outcome.command
        if outcome.error == "unknown_command":
            payload["valid_actions"] = list(ALL_ACTIONS)
            payload["help"] = HELP
        elif outcome.targeted or outcome.error == "invalid_relay_id":
            payload["valid_actions"] = list(RELAY_ACTIONS)
        else:
            payload["valid_actions"] = list(ALL_ACTIONS)
        return payload

    def welcome(self, device_name: str) -> Dict[str, Any]:
        return {"message": f"Connected to {device_name}", "relays": self.relays(self.registry.get_all())}

    def info(self, device_name: str, device_type: str, ip_address: str, mac_address: str) -> Dict[str, Any]:
        return {
            "device_name": device_name,
            "device_type": device_type,
            "ip_address": ip_address,
            "mac_address": mac_address,
            "num_relays": len(self.registry),
            "relays": self.relays(self.registry.get_all()),
        }

    # HTTP bodies

    def control_result(self, outcome: Outcome) -> Dict[str, Any]:
        relay_id, state = outcome.affected[0]
        return {"success": True, "relay": relay_id, "state": state}

    @staticmethod
    def batch_result(outcome: Outcome) -> Dict[str, Any]:
        return {
            "success": True,
            "message": f"All relays turned {'ON' if outcome.action is Action.ALL_ON else 'OFF'}",
        }
