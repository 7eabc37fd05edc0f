"""
Relay data models.

This module defines the Pydantic model used for relay snapshots.
"""
from typing import Union
from pydantic import BaseModel, Field


class Relay(BaseModel):
    """
    Snapshot of a single relay. Shape is fixed at construction, only
    ``state`` changes and only through the registry.
    """
    id: int = Field(..., ge=1, description="Position of the relay, 1..N")
    pin: Union[int, str] = Field(..., description="GPIO pin driving the relay")
    name: str = Field(..., description="Display name of the relay")
    description: str = Field("", description="Longer description of the relay")
    state: bool = Field(False, description="Current logical state, True means on")
