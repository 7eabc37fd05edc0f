# app/core/env_settings.py
from pydantic_settings import BaseSettings
from pydantic import ValidationError
from pathlib import Path
from typing import Dict, List, Any, Optional

from app.core.config.models import RelayTable


def get_env_path() -> Path:
    try:
        BASE_DIR = Path(__file__).resolve().parents[2]
        ENV_PATH = BASE_DIR / 'secrets' / 'app.env'
        if not ENV_PATH.exists():
            # Fallback to common deployment paths
            ENV_PATH = Path('/app/secrets/app.env')
            if not ENV_PATH.exists():
                ENV_PATH = Path('/app/app.env')

    except (NameError, ValueError, ValidationError):
        BASE_DIR = Path('/app')
        ENV_PATH = BASE_DIR / 'app.env'
    return ENV_PATH


class EnvSettings(BaseSettings):
    APP_NAME: str = 'Relay Controller'
    DEVICE_NAME: str = 'relay_controller'
    DEVICE_TYPE: str = 'home_automation'

    # Server
    HOST: str = '0.0.0.0'
    PORT: int = 8000
    LOG_LEVEL: str = 'INFO'
    CORS_ORIGINS: List[str] = ["*"]

    # GPIO settings
    # None lets gpiozero pick its default pin factory; "mock" uses MockFactory.
    GPIO_PIN_FACTORY: Optional[str] = None
    RELAYS: List[Dict[str, Any]] = [
        {"pin": 18, "name": "Living Light", "description": "Living room main lighting"},
        {"pin": 19, "name": "Bedroom Light", "description": "Master bedroom tube light"},
    ]

    # Runtime
    STATUS_LOG_INTERVAL: float = 30.0
    WS_SEND_TIMEOUT: float = 2.0
    MDNS_ENABLED: bool = False

    @property
    def relay_table(self) -> RelayTable:
        """Validated relay table built from RELAYS."""
        return RelayTable.model_validate({"relays": self.RELAYS})

    class Config:
        env_file = str(get_env_path())
        env_file_encoding = 'utf-8'
        extra = 'ignore'

        # Allow environment variables to override values in the env file
        env_nested_delimiter = '__'

        validate_assignment = True


# Create a singleton instance
env = EnvSettings()
