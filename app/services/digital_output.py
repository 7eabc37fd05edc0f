import logging
from typing import Dict, Optional, Union
from gpiozero import Device, OutputDevice

from app.core.config.models import RelayTable

logger = logging.getLogger(__name__)

Pin = Union[int, str]


def configure_pin_factory(name: Optional[str]) -> None:
    """
    Select the gpiozero pin factory by name. ``None`` keeps gpiozero's own
    default detection.
    """
    if not name:
        return
    name = name.lower()
    if name == "mock":
        from gpiozero.pins.mock import MockFactory
        Device.pin_factory = MockFactory()
    elif name == "rpigpio":
        from gpiozero.pins.rpigpio import RPiGPIOFactory
        Device.pin_factory = RPiGPIOFactory()
    elif name == "lgpio":
        from gpiozero.pins.lgpio import LGPIOFactory
        Device.pin_factory = LGPIOFactory()
    elif name == "pigpio":
        from gpiozero.pins.pigpio import PiGPIOFactory
        Device.pin_factory = PiGPIOFactory()
    elif name == "native":
        from gpiozero.pins.native import NativeFactory
        Device.pin_factory = NativeFactory()
    else:
        raise ValueError(f"Unknown GPIO pin factory: {name}")
    logger.info(f"[GPIO] Using pin factory '{name}'")


class DigitalOutput:
    """
    Physical side of a relay state change. Writes are synchronous and
    treated as infallible by the registry.
    """

    def write(self, pin: Pin, value: bool) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class GpioOutput(DigitalOutput):
    """
    DigitalOutput backed by one gpiozero OutputDevice per relay pin.
    Every output starts off.
    """

    def __init__(self, table: RelayTable) -> None:
        self.devices: Dict[Pin, Optional[OutputDevice]] = {}
        for relay in table.relays:
            try:
                self.devices[relay.pin] = OutputDevice(
                    relay.pin, active_high=relay.active_high, initial_value=False
                )
                logger.info(f"[GPIO] Initialized output on pin {relay.pin} for '{relay.name}'")
            except Exception as e:
                logger.error(f"[GPIO] Error initializing output on pin {relay.pin}: {e}")
                # Keep going; writes to this pin will log an error.
                self.devices[relay.pin] = None

    def write(self, pin: Pin, value: bool) -> None:
        device = self.devices.get(pin)
        if device is None:
            logger.error(f"[GPIO] Pin {pin}: device not initialized")
            return
        try:
            if value:
                device.on()
            else:
                device.off()
            logger.debug(f"[GPIO] Pin {pin} set to {'HIGH' if device.value else 'LOW'}")
        except Exception as e:
            logger.error(f"[GPIO] Pin {pin}: failed to write {value}: {e}")

    def read(self, pin: Pin) -> Optional[bool]:
        """Logical value currently driven on ``pin``, or None if unavailable."""
        device = self.devices.get(pin)
        if device is None:
            return None
        return bool(device.value)

    def close(self) -> None:
        """Drive every output off and release the devices."""
        for pin, device in self.devices.items():
            if device is None:
                continue
            try:
                device.off()
                device.close()
            except Exception as e:
                logger.error(f"[GPIO] Pin {pin}: error during cleanup: {e}")
        self.devices.clear()
