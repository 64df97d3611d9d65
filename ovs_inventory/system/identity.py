"""
System identity and software version resolution.

The system-id is mandatory: it comes from the Open_vSwitch database and falls
back to the system-id file. Version metadata is best effort: each field falls
back through the control socket, the database schema and /etc/os-release and
ends up as "unknown" when nothing answers.
"""
from __future__ import annotations

import re
from functools import cached_property
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from ..exceptions import (
    ColumnNotFound,
    DecodeError,
    IdentityMismatch,
    IdentityTooLong,
    IdentityUnavailable,
    MalformedResult,
    MandatoryFieldMissing,
)
from ..ovsdb.client import QueryClient, require_rows
from ..ovsdb.result import Result
from ..resolution import Strategy, Unresolved, identity_unavailable, resolve_field
from .models import DEFAULT_RUN_DIR, SoftwareVersions, SystemIdentity, SystemInfo

logger = structlog.get_logger(__name__)

# system-ids are usually UUIDs (36 bytes) but some tools use FQDNs, which
# RFC1035 caps at 253 octets.
SYSTEM_ID_MAX_LEN = 253

VERSION_COLUMNS = ("ovs_version", "db_version", "system_type", "system_version")

_OVS_VERSION_RE = re.compile(r"\(Open vSwitch\)\s+([\d.]+)")


def check_system_id_length(system_id: str) -> str:
    length = len(system_id.encode("utf-8"))
    if length > SYSTEM_ID_MAX_LEN:
        raise IdentityTooLong(length, SYSTEM_ID_MAX_LEN)
    return system_id


def system_id_from_database(client: QueryClient, database: str, table: Optional[str] = None) -> str:
    """Read external_ids:system-id from the first row of the Open_vSwitch table."""
    query = f"SELECT external_ids FROM {table or database}"
    result = client.transact(database, query)
    if not result.rows:
        return ""
    external_ids = result.rows[0].get_string_map("external_ids", result.columns)
    return external_ids.get("system-id", "")


def system_id_from_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.readline().rstrip("\r\n")


def get_system_id(
    client: Optional[QueryClient],
    database: str,
    path: str,
    table: Optional[str] = None,
) -> str:
    """
    Resolve the system-id, database first, file second.

    Raises IdentityUnavailable (with both causes) when neither source answers,
    and IdentityTooLong when the resolved value exceeds 253 bytes.
    """
    strategies: List[Strategy] = []
    if client is not None and database:
        strategies.append(Strategy("database", lambda: system_id_from_database(client, database, table)))
    strategies.append(Strategy("file", lambda: system_id_from_file(path)))
    try:
        system_id = resolve_field("system-id", strategies, required=True)
    except Unresolved as e:
        raise identity_unavailable(e) from e
    return check_system_id_length(system_id)


def parse_ovs_version(version_str: str) -> str:
    """
    Extract the version from `ovs-vswitchd (Open vSwitch) 3.5.1`.

    Anything that does not match is returned trimmed, as is.
    """
    match = _OVS_VERSION_RE.search(version_str)
    if match:
        return match.group(1)
    return version_str.strip()


def read_os_release(path: str = "/etc/os-release") -> Tuple[str, str]:
    """Return (ID, VERSION_ID) from an os-release file; ("", "") if unreadable."""
    system_type = ""
    system_version = ""
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\r\n")
                if line.startswith("ID="):
                    system_type = line[len("ID="):].strip('"')
                elif line.startswith("VERSION_ID="):
                    system_version = line[len("VERSION_ID="):].strip('"')
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("os_release_unreadable", path=path, error=str(e))
        return "", ""
    return system_type, system_version


class _OsRelease:
    def __init__(self, path: str) -> None:
        self.path = path

    @cached_property
    def fields(self) -> Tuple[str, str]:
        return read_os_release(self.path)


def parse_system_info(expected_id: str, result: Result) -> Dict[str, str]:
    """
    Decode the first row of the Open_vSwitch system query.

    Returns external_ids merged with the version columns. Raises DecodeError
    for mistyped cells, IdentityUnavailable/IdentityMismatch for a missing or
    diverging system-id and MandatoryFieldMissing when hostname is absent.
    """
    info: Dict[str, str] = {}
    if result.rows:
        row = result.rows[0]
        info = row.get_string_map("external_ids", result.columns)
        for col in VERSION_COLUMNS:
            try:
                info[col] = row.get_text(col, result.columns)
            except ColumnNotFound:
                info[col] = ""

    db_system_id = info.get("system-id")
    if db_system_id is None:
        raise IdentityUnavailable("no 'system-id' found")
    if db_system_id != expected_id:
        raise IdentityMismatch(db_system_id, expected_id)
    check_system_id_length(db_system_id)

    info.setdefault("rundir", DEFAULT_RUN_DIR)
    # Only hostname is truly required.
    for key in ("hostname",):
        if key not in info:
            raise MandatoryFieldMissing(key)
    return info


def populate_versions(
    info: Dict[str, str],
    *,
    version_probe: Optional[Callable[[], str]] = None,
    schema_version: Optional[Callable[[], str]] = None,
    os_release_path: str = "/etc/os-release",
) -> SoftwareVersions:
    """Fill every version field, from the row first and fallbacks second."""
    os_release = _OsRelease(os_release_path)

    daemon = [Strategy("database", lambda: info.get("ovs_version"))]
    if version_probe is not None:
        daemon.append(Strategy("control-socket", lambda: parse_ovs_version(version_probe())))

    schema = [Strategy("database", lambda: info.get("db_version"))]
    if schema_version is not None:
        schema.append(Strategy("schema", schema_version))

    versions = SoftwareVersions(
        daemon_version=resolve_field("ovs_version", daemon),
        schema_version=resolve_field("db_version", schema),
        os_type=resolve_field(
            "system_type",
            [
                Strategy("database", lambda: info.get("system_type")),
                Strategy("os-release", lambda: os_release.fields[0]),
            ],
        ),
        os_version=resolve_field(
            "system_version",
            [
                Strategy("database", lambda: info.get("system_version")),
                Strategy("os-release", lambda: os_release.fields[1]),
            ],
        ),
    )
    info.update(
        ovs_version=versions.daemon_version,
        db_version=versions.schema_version,
        system_type=versions.os_type,
        system_version=versions.os_version,
    )
    return versions


class SystemInfoResolver:
    """Builds `SystemInfo` for one Open_vSwitch database."""

    def __init__(
        self,
        client: Optional[QueryClient],
        database: str,
        *,
        system_id_file: str,
        os_release_file: str = "/etc/os-release",
        expected_system_id: Optional[str] = None,
        version_probe: Optional[Callable[[], str]] = None,
        table: Optional[str] = None,
    ) -> None:
        self.client = client
        self.database = database
        self.table = table or database
        self.system_id_file = system_id_file
        self.os_release_file = os_release_file
        self.expected_system_id = expected_system_id
        self.version_probe = version_probe

    def get_system_id(self) -> str:
        return get_system_id(self.client, self.database, self.system_id_file, self.table)

    def resolve(self) -> SystemInfo:
        system_id = self.get_system_id()
        expected_id = self.expected_system_id or system_id

        query = (
            "SELECT ovs_version, db_version, system_type, system_version, external_ids "
            f"FROM {self.table}"
        )
        if self.client is None:
            raise IdentityUnavailable(f"no query client to run '{query}'")
        result = require_rows(self.client, self.database, query)
        try:
            info = parse_system_info(expected_id, result)
        except DecodeError as e:
            raise MalformedResult(query, e, database=self.database) from e

        versions = populate_versions(
            info,
            version_probe=self.version_probe,
            schema_version=self._schema_version,
            os_release_path=self.os_release_file,
        )
        identity = SystemIdentity(
            id=info["system-id"],
            run_dir=info["rundir"],
            hostname=info["hostname"],
            type=versions.os_type,
            version=versions.os_version,
        )
        logger.info(
            "system_info_resolved",
            system_id=identity.id,
            hostname=identity.hostname,
            ovs_version=versions.daemon_version,
            db_version=versions.schema_version,
        )
        return SystemInfo(identity=identity, versions=versions, attributes=info)

    def _schema_version(self) -> str:
        return self.client.get_schema(self.database).version
