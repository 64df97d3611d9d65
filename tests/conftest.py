"""
Pytest configuration and shared fixtures for all tests.
"""
import pytest
import sys
import os

# Add parent directory to path for proper imports
parent_path = os.path.join(os.path.dirname(__file__), "..")
if parent_path not in sys.path:
    sys.path.insert(0, parent_path)

from ovs_inventory.config import InventorySettings
from tests.fakes import SYSTEM_ID, rows


@pytest.fixture
def system_id_file(tmp_path):
    path = tmp_path / "system-id.conf"
    path.write_text(f"{SYSTEM_ID}\n")
    return str(path)


@pytest.fixture
def os_release_file(tmp_path):
    path = tmp_path / "os-release"
    path.write_text(
        'NAME="Ubuntu"\n'
        'VERSION="22.04.4 LTS (Jammy Jellyfish)"\n'
        "ID=ubuntu\n"
        'ID_LIKE="debian"\n'
        'VERSION_ID="22.04"\n'
    )
    return str(path)


@pytest.fixture
def settings(tmp_path, system_id_file, os_release_file):
    """Test settings pointing at temporary files."""
    return InventorySettings(
        vswitch_db_name="Open_vSwitch",
        southbound_db_name="OVN_Southbound",
        system_id_file=system_id_file,
        os_release_file=os_release_file,
        run_dir=str(tmp_path),
        vswitchd_pid_file=str(tmp_path / "ovs-vswitchd.pid"),
        timeout=1,
    )


@pytest.fixture
def sample_external_ids():
    return {
        "system-id": SYSTEM_ID,
        "hostname": "compute-01",
        "rundir": "/run/openvswitch",
    }


@pytest.fixture
def chassis_result():
    return rows(
        ["_uuid", "name", "encaps"],
        [["uuid", "c-1"], "compute-01", ["uuid", "e-1"]],
        [["uuid", "c-2"], "compute-02", ["uuid", "e-2"]],
        [["uuid", "c-3"], "compute-03", ["uuid", "e-3"]],
    )


@pytest.fixture
def encap_result():
    return rows(
        ["_uuid", "chassis_name", "ip", "type"],
        [["uuid", "e-1"], "compute-01", "10.0.0.1", "geneve"],
        [["uuid", "e-2"], "compute-02", "10.0.0.2", "vxlan"],
    )


@pytest.fixture
def chassis_private_result():
    return rows(
        ["chassis", "name", "nb_cfg", "nb_cfg_timestamp"],
        [["uuid", "c-1"], "compute-01", 42, 1700000000000],
        [["set", []], "compute-02", 41.0, 1699999999999.0],
    )
