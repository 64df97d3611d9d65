"""
OVN chassis retrieval.

A chassis is assembled from three Southbound tables:

  - Chassis          base records (uuid, name, encap reference)   mandatory
  - Encap            tunnel endpoint (ip, type) per chassis        mandatory query
  - Chassis_Private  nb_cfg counters                               optional

Bad rows are skipped one at a time; only transport errors on the first two
queries (or an empty Chassis table) abort the call.
"""
from __future__ import annotations

from ipaddress import ip_address
from typing import Dict, Iterable, List, Optional, Set, Tuple

import structlog

from ..exceptions import DecodeError, QueryFailed
from ..ovsdb.client import QueryClient, require_rows, run_query
from ..ovsdb.result import Result, Row
from ..resolution import AlternateKeyIndex
from .models import PORT_WRITABLE_FIELDS, Chassis, IPAddress, LogicalSwitchPort

logger = structlog.get_logger(__name__)

CHASSIS_QUERY = "SELECT _uuid, name, encaps FROM Chassis"
ENCAP_QUERY = "SELECT _uuid, chassis_name, ip, type FROM Encap"
CHASSIS_PRIVATE_QUERY = "SELECT chassis, name, nb_cfg, nb_cfg_timestamp FROM Chassis_Private"


def _parse_ip(value: str) -> Optional[IPAddress]:
    try:
        return ip_address(value)
    except ValueError:
        logger.warning("encap_ip_invalid", ip=value)
        return None


def _strings(row: Row, result: Result, *columns: str) -> Optional[Tuple[str, ...]]:
    """Read several string columns, or None if any of them is missing or mistyped."""
    values = []
    for col in columns:
        try:
            values.append(row.get_string(col, result.columns))
        except DecodeError as e:
            logger.warning("row_skipped", column=col, error=str(e))
            return None
    return tuple(values)


def load_chassis(client: QueryClient, database: str) -> List[Chassis]:
    result = require_rows(client, database, CHASSIS_QUERY)
    chassis: List[Chassis] = []
    for row in result.rows:
        values = _strings(row, result, "_uuid", "name", "encaps")
        if values is None:
            continue
        uuid, name, encap_uuid = values
        chassis.append(Chassis(uuid=uuid, name=name, encap_uuid=encap_uuid))
    return chassis


def join_encaps(client: QueryClient, database: str, chassis: List[Chassis]) -> None:
    """Attach ip/proto to each chassis whose (encap uuid, name) matches an Encap row."""
    result = run_query(client, database, ENCAP_QUERY)

    by_key: Dict[Tuple[str, str], Chassis] = {}
    for c in chassis:
        by_key.setdefault((c.encap_uuid, c.name), c)

    for row in result.rows:
        values = _strings(row, result, "_uuid", "type", "chassis_name", "ip")
        if values is None:
            continue
        encap_uuid, encap_proto, chassis_name, ip = values
        c = by_key.get((encap_uuid, chassis_name))
        if c is None:
            continue
        c.ip_address = _parse_ip(ip)
        c.encap_proto = encap_proto


def _private_index(result: Result) -> AlternateKeyIndex[Tuple[int, int]]:
    index: AlternateKeyIndex[Tuple[int, int]] = AlternateKeyIndex()
    for row in result.rows:
        try:
            chassis_uuid = row.get_text("chassis", result.columns)
        except DecodeError:
            chassis_uuid = ""
        try:
            chassis_name = row.get_string("name", result.columns)
        except DecodeError:
            chassis_name = ""
        try:
            nb_cfg = row.get_int("nb_cfg", result.columns)
        except DecodeError:
            nb_cfg = 0
        try:
            nb_cfg_timestamp = row.get_int("nb_cfg_timestamp", result.columns)
        except DecodeError:
            nb_cfg_timestamp = 0
        # Depending on the schema version a record references its chassis by
        # uuid, by name, or both.
        index.add((nb_cfg, nb_cfg_timestamp), chassis_uuid, chassis_name)
    return index


def apply_private(
    client: QueryClient,
    database: str,
    chassis: List[Chassis],
    *,
    swallow_errors: bool = True,
) -> None:
    """Set nb_cfg counters from Chassis_Private; chassis without an entry keep 0."""
    try:
        result = run_query(client, database, CHASSIS_PRIVATE_QUERY)
    except QueryFailed as e:
        if not swallow_errors:
            raise
        logger.warning("chassis_private_unavailable", database=database, error=str(e.cause))
        return

    index = _private_index(result)
    for c in chassis:
        counters = index.resolve(c.uuid, c.name)
        if counters is None:
            continue
        c.nb_cfg, c.nb_cfg_timestamp = counters


def get_chassis(
    client: QueryClient,
    database: str,
    *,
    swallow_private_errors: bool = True,
) -> List[Chassis]:
    """Return the chassis of a Southbound database, joined with Encap and Chassis_Private."""
    chassis = load_chassis(client, database)
    join_encaps(client, database, chassis)
    apply_private(client, database, chassis, swallow_errors=swallow_private_errors)
    logger.debug("chassis_loaded", database=database, count=len(chassis))
    return chassis


def _annotate(port: LogicalSwitchPort, **values) -> None:
    for name, value in values.items():
        if name not in PORT_WRITABLE_FIELDS:
            raise AttributeError(f"'{name}' is not writable on {type(port).__name__}")
        setattr(port, name, value)


def map_port_to_chassis(chassis: Iterable[Chassis], ports: Iterable[LogicalSwitchPort]) -> None:
    """
    Cross-link logical switch ports with their chassis.

    Ports pointing at an unknown chassis are left alone. A logical switch is
    recorded once per call, on the first chassis that hosts one of its ports.
    """
    by_uuid: Dict[str, Chassis] = {c.uuid: c for c in chassis}
    seen_ports: Dict[str, Set[str]] = {}
    seen_switches: Set[str] = set()
    for port in ports:
        c = by_uuid.get(port.chassis_uuid)
        if c is None:
            continue
        _annotate(port, encapsulation=c.encap_proto, chassis_ip_address=c.ip_address)
        known = seen_ports.get(c.uuid)
        if known is None:
            known = seen_ports[c.uuid] = set(c.ports)
        if port.uuid not in known:
            known.add(port.uuid)
            c.ports.append(port.uuid)
        if port.logical_switch_uuid not in seen_switches:
            seen_switches.add(port.logical_switch_uuid)
            c.switches.append(port.logical_switch_uuid)
