from .chassis import get_chassis, map_port_to_chassis
from .models import Chassis, LogicalSwitchPort

__all__ = ["Chassis", "LogicalSwitchPort", "get_chassis", "map_port_to_chassis"]
