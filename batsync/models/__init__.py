from .battery_level import UNKNOWN_LEVEL, MAX_LEVEL, MIN_LEVEL, BatteryLevel, describe_level, is_valid_level
from .connection_status import ConnectionState, ConnectionStatus
from .snapshot import SyncSnapshot

__all__ = [
    "BatteryLevel",
    "UNKNOWN_LEVEL",
    "MIN_LEVEL",
    "MAX_LEVEL",
    "describe_level",
    "is_valid_level",
    "ConnectionState",
    "ConnectionStatus",
    "SyncSnapshot",
]
