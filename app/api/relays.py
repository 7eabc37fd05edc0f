import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query

from app.core.exceptions import InvalidAction, InvalidRelayId
from app.models.command import Outcome
from app.services.controller import RelayService
from app.utils.dependencies import get_relay_service

router = APIRouter(tags=["Relay API"])
logger = logging.getLogger(__name__)


def raise_for_outcome(outcome: Outcome, service: RelayService, invalid_action_message: str) -> None:
    """Translate an error outcome into the HTTP error raised to the client."""
    if outcome.ok:
        return
    if outcome.error == InvalidRelayId.kind:
        count = len(service.registry)
        raise InvalidRelayId(None, count, f"Invalid relay ID. Must be between 1 and {count}")
    raise InvalidAction(invalid_action_message, command=outcome.command)


@router.get("/relays")
async def get_all_relays(service: RelayService = Depends(get_relay_service)) -> Dict[str, Any]:
    """Snapshot of every relay, ordered by id."""
    return service.formatter.snapshot()


@router.get("/relay")
async def get_relay(
    id: Optional[str] = Query(None, description="Relay id, 1..N"),
    service: RelayService = Depends(get_relay_service),
) -> Dict[str, Any]:
    """Snapshot of a single relay."""
    command = service.parser.status_command(id)
    outcome = await service.execute(command)
    raise_for_outcome(outcome, service, "Invalid action")
    return service.formatter.relay(service.registry.get(command.target))


@router.post("/relay/control")
async def control_relay(
    id: Optional[str] = Query(None, description="Relay id, 1..N"),
    action: Optional[str] = Query(None, description="on, off or toggle"),
    service: RelayService = Depends(get_relay_service),
) -> Dict[str, Any]:
    """Turn one relay on or off, or toggle it."""
    command = service.parser.control_command(id, action)
    logger.info(f"Received request to {action} relay {id}")
    outcome = await service.execute(command)
    raise_for_outcome(outcome, service, "Invalid action. Use: on, off, or toggle")
    return service.formatter.control_result(outcome)


@router.post("/relays/all")
async def control_all_relays(
    action: Optional[str] = Query(None, description="on or off"),
    service: RelayService = Depends(get_relay_service),
) -> Dict[str, Any]:
    """Turn every relay on or off, in ascending id order."""
    command = service.parser.batch_command(action)
    logger.info(f"Received request to turn all relays {action}")
    outcome = await service.execute(command)
    raise_for_outcome(outcome, service, "Invalid action. Use: on or off")
    return service.formatter.batch_result(outcome)
