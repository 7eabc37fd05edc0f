"""
Pytest fixtures for the relay controller.

Provides fixtures for:
- A recording DigitalOutput that stands in for GPIO
- A two-relay registry, parser and dispatcher
- An application client with the lifespan running
"""
import os

import pytest

# Set test environment before importing app modules
os.environ.setdefault("GPIO_PIN_FACTORY", "mock")
os.environ.setdefault("STATUS_LOG_INTERVAL", "0")
os.environ.setdefault("MDNS_ENABLED", "false")

from fastapi.testclient import TestClient

from app.core.config.models import RelayTable
from app.core.env_settings import EnvSettings
from app.main import create_app
from app.services.command_dispatcher import CommandDispatcher
from app.services.command_parser import CommandParser
from app.services.digital_output import DigitalOutput
from app.services.relay_registry import RelayRegistry
from app.services.response_formatter import ResponseFormatter


class RecordingOutput(DigitalOutput):
    """DigitalOutput that records every write instead of touching hardware."""

    def __init__(self):
        self.writes = []
        self.levels = {}
        self.closed = False

    def write(self, pin, value):
        self.writes.append((pin, value))
        self.levels[pin] = value

    def close(self):
        self.closed = True


RELAYS = [
    {"pin": 18, "name": "Living Light", "description": "Living room main lighting"},
    {"pin": 19, "name": "Bedroom Light", "description": "Master bedroom tube light"},
]


@pytest.fixture
def table() -> RelayTable:
    return RelayTable.model_validate({"relays": RELAYS})


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def registry(table, output) -> RelayRegistry:
    return RelayRegistry(table, output)


@pytest.fixture
def parser() -> CommandParser:
    return CommandParser()


@pytest.fixture
def dispatcher(registry) -> CommandDispatcher:
    return CommandDispatcher(registry)


@pytest.fixture
def formatter(registry) -> ResponseFormatter:
    return ResponseFormatter(registry)


@pytest.fixture
def settings() -> EnvSettings:
    return EnvSettings(
        DEVICE_NAME="test_controller",
        RELAYS=RELAYS,
        STATUS_LOG_INTERVAL=0,
        MDNS_ENABLED=False,
    )


@pytest.fixture
def client(settings, output):
    """TestClient with the lifespan running and GPIO replaced by RecordingOutput."""
    app = create_app(settings, output=output)
    with TestClient(app) as test_client:
        yield test_client
