"""
Command and outcome models passed between the parser, dispatcher and formatter.
"""
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field


class Action(str, Enum):
    TURN_ON = "on"
    TURN_OFF = "off"
    TOGGLE = "toggle"
    GET_STATUS = "status"
    GET_ALL_STATUS = "get_all_status"
    ALL_ON = "all_on"
    ALL_OFF = "all_off"
    UNKNOWN = "unknown"



class Command(BaseModel):
    """
    A decoded request. ``text`` carries the offending input for UNKNOWN
    commands: the raw action when the input was JSON, otherwise the
    cleaned message itself.
    """
    action: Action
    target: Optional[int] = None
    text: Optional[str] = None
    structured: bool = Field(True, description="Whether the input decoded as a JSON object")

    @property
    def is_targeted(self) -> bool:
        return self.target is not None


class Outcome(BaseModel):
    """Result of dispatching a command."""
    ok: bool
    action: Action
    affected: List[Tuple[int, bool]] = Field(default_factory=list)
    message: Optional[str] = None
    error: Optional[str] = None
    command: Optional[str] = None
    targeted: bool = False
