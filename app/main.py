import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from app.api import api_router
from app.api.device import router as device_router
from app.api.websocket import router as websocket_router
from app.core.env_settings import EnvSettings, env
from app.core.exceptions import RelayError
from app.services.announcer import DeviceAnnouncer
from app.services.controller import RelayService
from app.services.digital_output import DigitalOutput, GpioOutput, configure_pin_factory
from app.utils.logging import setup_logging
from app.utils.websocket_utils import WebSocketManager

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

BANNER = """=== System Ready ===
WebSocket JSON Commands:
  Individual Relay Control:
    {"relay_id":1,"action":"on"}
    {"relay_id":1,"action":"off"}
    {"relay_id":1,"action":"toggle"}
    {"relay_id":1,"action":"status"}
  Global Control:
    {"action":"all_on"}
    {"action":"all_off"}
    {"action":"status"}
API Endpoints:
  - GET /api/relays - Get all relay status
  - GET /api/relay?id=N - Get specific relay status
  - POST /api/relay/control?id=N&action=on/off/toggle
  - POST /api/relays/all?action=on/off
  - GET /info - Device information"""


async def status_log_loop(service: RelayService, interval: float) -> None:
    """Log connected clients and relay states every ``interval`` seconds."""
    while True:
        await asyncio.sleep(interval)
        logger.info(
            f"Status - Connected clients: {len(service.ws_manager)}, Relays: {service.registry.summary()}"
        )


def create_app(settings: Optional[EnvSettings] = None, output: Optional[DigitalOutput] = None) -> FastAPI:
    """
    Build the application. ``output`` replaces the gpiozero outputs, mainly
    for tests.
    """
    settings = settings or env

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL)
        logger.info(f"Starting up {settings.DEVICE_NAME}...")

        table = settings.relay_table
        relay_output = output
        if relay_output is None:
            configure_pin_factory(settings.GPIO_PIN_FACTORY)
            relay_output = GpioOutput(table)
        for index, relay in enumerate(table.relays, start=1):
            logger.info(f"  Relay {index} ({relay.name}): GPIO {relay.pin}")

        service = RelayService(table, relay_output, WebSocketManager(send_timeout=settings.WS_SEND_TIMEOUT))
        app.state.settings = settings
        app.state.relays = service

        status_task = None
        if settings.STATUS_LOG_INTERVAL > 0:
            status_task = asyncio.create_task(status_log_loop(service, settings.STATUS_LOG_INTERVAL))

        announcer = None
        if settings.MDNS_ENABLED:
            announcer = DeviceAnnouncer(settings.DEVICE_NAME, settings.PORT, settings.DEVICE_TYPE)
            await announcer.start()

        logger.info(BANNER)
        try:
            yield
        finally:
            logger.info("Shutting down...")
            if status_task is not None:
                status_task.cancel()
                try:
                    await status_task
                except asyncio.CancelledError:
                    pass
            if announcer is not None:
                await announcer.stop()
            await service.ws_manager.close_all()
            service.close()

    app = FastAPI(title=settings.APP_NAME, description="Relay Control System", lifespan=lifespan)

    # Add middleware
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error"},
        )

    # Register routers
    app.include_router(api_router, prefix="/api")
    app.include_router(device_router)
    app.include_router(websocket_router)
    return app


app = create_app()

# If running as a script
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=env.HOST,
        port=env.PORT,
    )
