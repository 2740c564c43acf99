"""Fixed network and timing parameters shared by server, client and controller."""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PORT = 8080
DEFAULT_PATH = "/battery"
DEFAULT_BIND_HOST = "0.0.0.0"
DEFAULT_SAMPLE_INTERVAL = 5.0
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_FETCH_TIMEOUT = 3.0


@dataclass(slots=True, frozen=True)
class SyncConfig:
    """Configuration bundle for :class:`batsync.controller.SyncController`."""

    port: int = DEFAULT_PORT
    path: str = DEFAULT_PATH
    bind_host: str = DEFAULT_BIND_HOST
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ValueError("port must be within 0..65535")
        if not self.path.startswith("/"):
            raise ValueError("path must start with '/'")
        for name in ("sample_interval", "poll_interval", "fetch_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    def peer_url(self, host: str) -> str:
        # IPv6 literals need brackets inside a URL authority.
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"http://{host}:{self.port}{self.path}"


__all__ = [
    "SyncConfig",
    "DEFAULT_PORT",
    "DEFAULT_PATH",
    "DEFAULT_BIND_HOST",
    "DEFAULT_SAMPLE_INTERVAL",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_FETCH_TIMEOUT",
]
