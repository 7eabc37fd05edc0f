import html
import logging
from typing import Any, Dict
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from app.core.env_settings import EnvSettings
from app.services.announcer import get_local_ip, get_mac_address
from app.services.controller import RelayService
from app.utils.dependencies import get_relay_service, get_settings

router = APIRouter(tags=["Device API"])
logger = logging.getLogger(__name__)


@router.get("/", response_class=HTMLResponse)
async def status_page(
    service: RelayService = Depends(get_relay_service),
    settings: EnvSettings = Depends(get_settings),
) -> str:
    """
    Human-readable status page with the device address and relay states.
    """
    ip = get_local_ip()
    rows = "".join(
        f"<p>{html.escape(r.name)} (GPIO {html.escape(str(r.pin))}): {'ON' if r.state else 'OFF'}</p>"
        for r in service.registry.get_all()
    )
    return (
        f"<html><body><h1>{html.escape(settings.APP_NAME)}</h1>"
        f"<p>Device: {html.escape(settings.DEVICE_NAME)}</p>"
        f"<p>IP: {ip}</p>"
        f"<p>WebSocket: ws://{ip}:{settings.PORT}/ws</p>"
        f"<h2>Relay Status:</h2>{rows}</body></html>"
    )


@router.get("/info")
async def device_info(
    service: RelayService = Depends(get_relay_service),
    settings: EnvSettings = Depends(get_settings),
) -> Dict[str, Any]:
    """Device metadata plus the relay snapshot, used for discovery."""
    return service.formatter.info(
        settings.DEVICE_NAME,
        settings.DEVICE_TYPE,
        get_local_ip(),
        get_mac_address(),
    )
