from pydantic import BaseModel, Field
from typing import Dict

from ..resolution import UNKNOWN

DEFAULT_RUN_DIR = "/var/run/openvswitch"


class SystemIdentity(BaseModel):
    id: str = Field(..., description="system-id of the local Open vSwitch instance")
    run_dir: str = Field(DEFAULT_RUN_DIR, description="Runtime directory (external_ids:rundir)")
    hostname: str = Field(..., description="external_ids:hostname")
    type: str = Field(UNKNOWN, description="OS type, e.g. 'ubuntu'")
    version: str = Field(UNKNOWN, description="OS version, e.g. '22.04'")


class SoftwareVersions(BaseModel):
    daemon_version: str = UNKNOWN
    schema_version: str = UNKNOWN
    os_type: str = UNKNOWN
    os_version: str = UNKNOWN


class SystemInfo(BaseModel):
    identity: SystemIdentity
    versions: SoftwareVersions
    # external_ids merged with the resolved version columns.
    attributes: Dict[str, str] = Field(default_factory=dict)
