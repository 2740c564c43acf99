"""Peer-to-peer battery level exchange over the local network."""
from __future__ import annotations

from batsync.config import SyncConfig
from batsync.controller import SyncController
from batsync.models import UNKNOWN_LEVEL, ConnectionState, ConnectionStatus, SyncSnapshot

__version__ = "0.1.0"

__all__ = [
    "SyncConfig",
    "SyncController",
    "ConnectionState",
    "ConnectionStatus",
    "SyncSnapshot",
    "UNKNOWN_LEVEL",
]
