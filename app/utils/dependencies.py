from fastapi import Request

from app.core.env_settings import EnvSettings
from app.services.controller import RelayService


async def get_relay_service(request: Request) -> RelayService:
    """
    Dependency returning the RelayService built by the application lifespan.
    """
    return request.app.state.relays


async def get_settings(request: Request) -> EnvSettings:
    """Dependency returning the settings the application was created with."""
    return request.app.state.settings
