from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConnectionState(Enum):
    """Remote polling state."""
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    INVALID_RESPONSE = "invalid_response"


@dataclass(frozen=True, slots=True)
class ConnectionStatus:
    """One active connection state plus whatever detail it carries.

    ``status_code`` is only set for FAILED outcomes caused by a non-200 reply;
    ``reason`` holds the transport error text for generic failures.
    """

    state: ConnectionState
    status_code: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def idle(cls) -> "ConnectionStatus":
        return cls(ConnectionState.IDLE)

    @classmethod
    def connecting(cls) -> "ConnectionStatus":
        return cls(ConnectionState.CONNECTING)

    @classmethod
    def connected(cls) -> "ConnectionStatus":
        return cls(ConnectionState.CONNECTED)

    @classmethod
    def timed_out(cls) -> "ConnectionStatus":
        return cls(ConnectionState.TIMED_OUT)

    @classmethod
    def invalid_response(cls) -> "ConnectionStatus":
        return cls(ConnectionState.INVALID_RESPONSE)

    @classmethod
    def failed(cls, *, status_code: Optional[int] = None, reason: Optional[str] = None) -> "ConnectionStatus":
        return cls(ConnectionState.FAILED, status_code=status_code, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.state not in (ConnectionState.IDLE, ConnectionState.CONNECTING)

    @property
    def label(self) -> str:
        if self.state is ConnectionState.IDLE:
            return "Enter IP and start syncing"
        if self.state is ConnectionState.CONNECTING:
            return "Connecting..."
        if self.state is ConnectionState.CONNECTED:
            return "Connected"
        if self.state is ConnectionState.TIMED_OUT:
            return "Connection timed out"
        if self.state is ConnectionState.INVALID_RESPONSE:
            return "Invalid response"
        if self.status_code is not None:
            return f"Connection failed (Status: {self.status_code})"
        return "Connection error"

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "status_code": self.status_code,
            "reason": self.reason,
            "label": self.label,
        }
