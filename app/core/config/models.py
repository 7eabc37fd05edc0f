from pydantic import BaseModel, Field, field_validator
from typing import List, Union


class RelayConfig(BaseModel):
    """Static configuration of one relay output."""
    pin: Union[int, str] = Field(..., description="GPIO pin driving the relay")
    name: str = Field(..., description="Display name")
    description: str = ""
    active_high: bool = Field(True, description="False for relays that switch on a low output")


class RelayTable(BaseModel):
    """
    Ordered relay table. Relay ids are assigned 1..N by position, so the id
    space never has gaps.
    """
    relays: List[RelayConfig] = Field(..., min_length=1)

    @field_validator("relays")
    @classmethod
    def pins_are_unique(cls, relays: List[RelayConfig]) -> List[RelayConfig]:
        seen = set()
        for relay in relays:
            if relay.pin in seen:
                raise ValueError(f"Duplicate relay pin: {relay.pin}")
            seen.add(relay.pin)
        return relays

    @property
    def pins(self) -> List[Union[int, str]]:
        return [relay.pin for relay in self.relays]
