"""Default "read local address" capability."""
from __future__ import annotations

import logging
import socket
from typing import Optional

logger = logging.getLogger(__name__)

# Any routable address works; connecting a UDP socket sends no packets.
_PROBE_ADDRESS = ("192.0.2.1", 80)


def local_address() -> Optional[str]:
    """Best guess at this host's LAN address, or ``None`` when offline."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
            probe.connect(_PROBE_ADDRESS)
            address = probe.getsockname()[0]
    except OSError as exc:
        logger.debug("Local address lookup failed: %s", exc)
        return None
    if not address or address.startswith("0."):
        return None
    return address


__all__ = ["local_address"]
