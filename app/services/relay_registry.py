import logging
import threading
from typing import List

from app.core.config.models import RelayTable
from app.core.exceptions import InvalidRelayId
from app.models.relay import Relay
from app.services.digital_output import DigitalOutput

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class RelayRegistry:
    """
    Owns the ordered relays and their live state.

    Built once from the relay table; never resized. State only changes
    through ``set_state`` and ``toggle``, each of which issues exactly one
    physical write. All accessors return copies so callers cannot mutate
    registry state.
    """

    def __init__(self, table: RelayTable, output: DigitalOutput) -> None:
        self.output = output
        self._relays: List[Relay] = [
            Relay(id=index, pin=cfg.pin, name=cfg.name, description=cfg.description, state=False)
            for index, cfg in enumerate(table.relays, start=1)
        ]
        # Reentrant so batch actions can hold it across several set_state calls.
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._relays)

    @property
    def ids(self) -> range:
        return range(1, len(self._relays) + 1)

    def _entry(self, relay_id) -> Relay:
        if isinstance(relay_id, bool) or not isinstance(relay_id, int) or relay_id not in self.ids:
            raise InvalidRelayId(relay_id, len(self._relays))
        return self._relays[relay_id - 1]

    def get(self, relay_id: int) -> Relay:
        with self.lock:
            return self._entry(relay_id).model_copy()

    def get_all(self) -> List[Relay]:
        with self.lock:
            return [relay.model_copy() for relay in self._relays]

    def set_state(self, relay_id: int, value: bool) -> Relay:
        with self.lock:
            relay = self._entry(relay_id)
            self.output.write(relay.pin, value)
            relay.state = value
            logger.info(f"Relay {relay.id} ({relay.name}) turned {'ON' if value else 'OFF'}")
            return relay.model_copy()

    def toggle(self, relay_id: int) -> Relay:
        with self.lock:
            return self.set_state(relay_id, not self._entry(relay_id).state)

    def summary(self) -> str:
        """Compact state line, e.g. ``R1:ON, R2:OFF``."""
        with self.lock:
            return ", ".join(f"R{r.id}:{'ON' if r.state else 'OFF'}" for r in self._relays)
