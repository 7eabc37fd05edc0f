"""
mDNS service announcer.

Registers the controller's HTTP and WebSocket endpoints on the local
network using Zeroconf/mDNS so clients can find it as ``<device>.local``.
"""
import logging
import socket
from typing import List, Optional

from zeroconf import IPVersion, ServiceInfo
from zeroconf.asyncio import AsyncZeroconf

logger = logging.getLogger(__name__)

SERVICE_TYPES = ("_http._tcp.local.", "_ws._tcp.local.")


def get_local_ip() -> str:
    """Get the local IP address."""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            # No packets are sent; this only selects the outbound interface
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
        finally:
            s.close()
    except OSError:
        return "127.0.0.1"


def get_mac_address() -> str:
    """MAC address of this host formatted as AA:BB:CC:DD:EE:FF."""
    import uuid
    node = uuid.getnode()
    return ":".join(f"{(node >> shift) & 0xFF:02X}" for shift in range(40, -1, -8))


class DeviceAnnouncer:
    """
    Announces the device via mDNS under each of SERVICE_TYPES.
    """

    def __init__(self, device_name: str, port: int, device_type: str = "home_automation"):
        self.device_name = device_name
        self.port = port
        self.device_type = device_type

        self._zeroconf: Optional[AsyncZeroconf] = None
        self._services: List[ServiceInfo] = []

    def _create_service_info(self, service_type: str) -> ServiceInfo:
        return ServiceInfo(
            type_=service_type,
            name=f"{self.device_name}.{service_type}",
            addresses=[socket.inet_aton(get_local_ip())],
            port=self.port,
            properties={"device_type": self.device_type, "path": "/ws" if service_type.startswith("_ws") else "/"},
            server=f"{self.device_name}.local.",
        )

    async def start(self) -> bool:
        """
        Start announcing the device.

        Returns:
            True if successfully started, False otherwise
        """
        if self.is_running:
            logger.warning("Announcer already running")
            return True

        try:
            self._zeroconf = AsyncZeroconf(ip_version=IPVersion.V4Only)
            for service_type in SERVICE_TYPES:
                info = self._create_service_info(service_type)
                await self._zeroconf.async_register_service(info)
                self._services.append(info)
            logger.info(f"mDNS responder started, device discoverable as {self.device_name}.local")
            return True
        except Exception as e:
            logger.error(f"mDNS setup failed: {e}")
            await self.stop()
            return False

    async def stop(self) -> None:
        """Unregister services and close the responder."""
        if self._zeroconf is None:
            return
        try:
            for info in self._services:
                await self._zeroconf.async_unregister_service(info)
            await self._zeroconf.async_close()
            logger.info(f"mDNS services unregistered for {self.device_name}")
        except Exception as e:
            logger.error(f"Error stopping mDNS announcer: {e}")
        finally:
            self._services.clear()
            self._zeroconf = None

    @property
    def is_running(self) -> bool:
        return self._zeroconf is not None and bool(self._services)
