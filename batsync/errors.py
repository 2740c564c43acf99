"""Exception hierarchy for battery sync failures.

None of these are fatal to the process: sensor and bind errors are contained
by the controller, and the fetch family is converted into a
:class:`~batsync.models.ConnectionStatus` at the fetch boundary.
"""
from __future__ import annotations

from typing import Optional


class BatterySyncError(Exception):
    """Base class for all battery sync errors."""


class SensorUnavailable(BatterySyncError):
    """The platform battery capability could not produce a reading."""


class ServerBindFailure(BatterySyncError):
    """The status server could not bind its listening socket."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        super().__init__(f"cannot bind {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class PeerValidationError(BatterySyncError, ValueError):
    """A sync was requested without a usable peer address."""


class FetchError(BatterySyncError):
    """Base class for failures while polling a peer."""


class FetchTimeout(FetchError):
    """The peer did not answer within the fetch timeout."""


class HttpStatusError(FetchError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"peer responded with HTTP {status_code}")
        self.status_code = status_code


class MalformedResponse(FetchError):
    def __init__(self, body: Optional[str]) -> None:
        super().__init__(f"peer body is not a battery level: {body!r}")
        self.body = body


class TransportError(FetchError):
    """Connection-level failure (DNS, refused, reset, ...)."""


__all__ = [
    "BatterySyncError",
    "SensorUnavailable",
    "ServerBindFailure",
    "PeerValidationError",
    "FetchError",
    "FetchTimeout",
    "HttpStatusError",
    "MalformedResponse",
    "TransportError",
]
