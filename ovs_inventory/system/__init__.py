from .identity import SystemInfoResolver, get_system_id, parse_ovs_version
from .models import SoftwareVersions, SystemIdentity, SystemInfo

__all__ = [
    "SoftwareVersions",
    "SystemIdentity",
    "SystemInfo",
    "SystemInfoResolver",
    "get_system_id",
    "parse_ovs_version",
]
