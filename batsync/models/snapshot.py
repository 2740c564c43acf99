from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from .battery_level import UNKNOWN_LEVEL, BatteryLevel
from .connection_status import ConnectionStatus


@dataclass(frozen=True, slots=True)
class SyncSnapshot:
    """Immutable view of everything the presentation layer may render.

    Levels are never ``None``; :data:`UNKNOWN_LEVEL` stands in until a
    reading arrives.
    """

    local_level: BatteryLevel = UNKNOWN_LEVEL
    remote_level: BatteryLevel = UNKNOWN_LEVEL
    status: ConnectionStatus = field(default_factory=ConnectionStatus.idle)
    peer: Optional[str] = None
    local_address: Optional[str] = None
    server_status: Optional[str] = None

    def evolve(self, **changes: Any) -> "SyncSnapshot":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "local_level": self.local_level,
            "remote_level": self.remote_level,
            "status": self.status.to_dict(),
            "peer": self.peer,
            "local_address": self.local_address,
            "server_status": self.server_status,
        }
