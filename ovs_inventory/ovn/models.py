from __future__ import annotations

from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from typing import List, Optional, Union

IPAddress = Union[IPv4Address, IPv6Address]


@dataclass
class Chassis:
    """
    An OVN chassis as seen in the Southbound database.

    `ip_address` and `encap_proto` stay empty until an Encap row matches;
    `nb_cfg` / `nb_cfg_timestamp` stay 0 without a Chassis_Private entry.
    `ports` and `switches` are filled by `map_port_to_chassis` and never
    contain duplicates.
    """

    uuid: str
    name: str
    encap_uuid: str = ""
    encap_proto: str = ""
    ip_address: Optional[IPAddress] = None
    nb_cfg: int = 0
    nb_cfg_timestamp: int = 0
    ports: List[str] = field(default_factory=list)
    switches: List[str] = field(default_factory=list)


@dataclass
class LogicalSwitchPort:
    """
    A logical switch port owned by the caller.

    Port-to-chassis association only writes the fields listed in
    `PORT_WRITABLE_FIELDS`.
    """

    uuid: str
    name: str = ""
    chassis_uuid: str = ""
    logical_switch_uuid: str = ""
    encapsulation: str = ""
    chassis_ip_address: Optional[IPAddress] = None


PORT_WRITABLE_FIELDS = ("encapsulation", "chassis_ip_address")
