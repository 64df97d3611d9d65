"""
Inventory Configuration

Settings and environment variable management.
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class InventorySettings(BaseSettings):
    """Open vSwitch / OVN inventory settings."""

    # Databases
    vswitch_db_name: str = Field(
        default="Open_vSwitch",
        validation_alias="OVS_VSWITCH_DB_NAME",
        description="Name of the Open vSwitch database (and of its root table)"
    )

    southbound_db_name: str = Field(
        default="OVN_Southbound",
        validation_alias="OVN_SB_DB_NAME",
        description="Name of the OVN Southbound database"
    )

    # Identity
    system_id_file: str = Field(
        default="/etc/openvswitch/system-id.conf",
        validation_alias="OVS_SYSTEM_ID_FILE",
        description="File whose first line is the system-id"
    )

    expected_system_id: Optional[str] = Field(
        default=None,
        validation_alias="OVS_EXPECTED_SYSTEM_ID",
        description="system-id the database must report; mismatch is an error"
    )

    os_release_file: str = Field(
        default="/etc/os-release",
        validation_alias="OVS_OS_RELEASE_FILE",
        description="os-release file used for system type/version"
    )

    # ovs-vswitchd control socket
    run_dir: str = Field(
        default="/var/run/openvswitch",
        validation_alias="OVS_RUN_DIR",
        description="Runtime directory holding pid files and control sockets"
    )

    vswitchd_pid_file: str = Field(
        default="/var/run/openvswitch/ovs-vswitchd.pid",
        validation_alias="OVS_VSWITCHD_PID_FILE",
        description="ovs-vswitchd pid file, used to locate its control socket"
    )

    vswitchd_control_socket: Optional[str] = Field(
        default=None,
        validation_alias="OVS_VSWITCHD_CONTROL_SOCKET",
        description="Explicit control socket (e.g. unix:/var/run/openvswitch/ovs-vswitchd.1.ctl)"
    )

    timeout: int = Field(
        default=2,
        ge=1,
        le=300,
        validation_alias="OVS_QUERY_TIMEOUT",
        description="Control socket connect+query timeout (seconds)"
    )

    # OVN
    swallow_chassis_private_errors: bool = Field(
        default=True,
        validation_alias="OVN_SWALLOW_CHASSIS_PRIVATE_ERRORS",
        description="Return chassis without nb_cfg counters when Chassis_Private cannot be queried"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level"
    )

    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Render logs as JSON lines"
    )

    log_file: Optional[str] = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="Also write logs to this rotating file"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )
