"""
Open vSwitch / OVN inventory.

Decodes OVSDB query results and correlates them into system identity and
chassis objects.
"""

from .config import InventorySettings
from .exceptions import (
    ColumnNotFound,
    DecodeError,
    EmptyResultSet,
    IdentityMismatch,
    IdentityTooLong,
    IdentityUnavailable,
    InventoryError,
    QueryFailed,
    UnexpectedType,
)
from .inventory import OvnInventory, OvsInventory
from .utils.logger import setup_logging

__all__ = [
    "InventorySettings",
    "OvsInventory",
    "OvnInventory",
    "setup_logging",
    "InventoryError",
    "DecodeError",
    "ColumnNotFound",
    "UnexpectedType",
    "IdentityUnavailable",
    "IdentityTooLong",
    "IdentityMismatch",
    "EmptyResultSet",
    "QueryFailed",
]
