"""
Inventory facades.

Bind settings and external collaborators (query clients, control socket) to
the resolvers so callers can ask for system info or chassis in one call.
"""
from __future__ import annotations

from typing import Callable, Iterable, List, Optional

import structlog

from .config import InventorySettings
from .ovn.chassis import get_chassis, map_port_to_chassis
from .ovn.models import Chassis, LogicalSwitchPort
from .ovsdb.appctl import discover_control_socket, query_version
from .ovsdb.client import QueryClient
from .system.identity import SystemInfoResolver
from .system.models import SystemInfo

logger = structlog.get_logger(__name__)

VSWITCHD = "ovs-vswitchd"


class OvsInventory:
    def __init__(
        self,
        client: Optional[QueryClient],
        settings: Optional[InventorySettings] = None,
        version_probe: Optional[Callable[[], str]] = None,
    ) -> None:
        """
        Args:
            client: Query client for the Open_vSwitch database (may be None,
                in which case only the system-id file is consulted)
            settings: Inventory settings (defaults to environment)
            version_probe: Returns the raw `version` reply of ovs-vswitchd;
                defaults to querying its control socket
        """
        self.client = client
        self.settings = settings or InventorySettings()
        self.version_probe = version_probe or self._query_vswitchd_version

    def control_socket(self) -> str:
        if self.settings.vswitchd_control_socket:
            return self.settings.vswitchd_control_socket
        return discover_control_socket(self.settings.run_dir, VSWITCHD, self.settings.vswitchd_pid_file)

    def _query_vswitchd_version(self) -> str:
        return query_version(self.control_socket(), float(self.settings.timeout))

    def _resolver(self) -> SystemInfoResolver:
        return SystemInfoResolver(
            self.client,
            self.settings.vswitch_db_name,
            system_id_file=self.settings.system_id_file,
            os_release_file=self.settings.os_release_file,
            expected_system_id=self.settings.expected_system_id,
            version_probe=self.version_probe,
        )

    def get_system_id(self) -> str:
        return self._resolver().get_system_id()

    def get_system_info(self) -> SystemInfo:
        return self._resolver().resolve()


class OvnInventory:
    def __init__(self, client: QueryClient, settings: Optional[InventorySettings] = None) -> None:
        self.client = client
        self.settings = settings or InventorySettings()

    def get_chassis(self) -> List[Chassis]:
        return get_chassis(
            self.client,
            self.settings.southbound_db_name,
            swallow_private_errors=self.settings.swallow_chassis_private_errors,
        )

    def map_port_to_chassis(self, chassis: Iterable[Chassis], ports: Iterable[LogicalSwitchPort]) -> None:
        chassis = list(chassis)
        ports = list(ports)
        map_port_to_chassis(chassis, ports)
        logger.debug("ports_mapped_to_chassis", chassis=len(chassis), ports=len(ports))
