"""HTTP endpoint publishing the latest local battery sample."""
from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from typing import Callable, Iterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from batsync.config import SyncConfig
from batsync.errors import ServerBindFailure
from batsync.models import BatteryLevel

logger = logging.getLogger(__name__)

LevelGetter = Callable[[], BatteryLevel]


def create_app(level_getter: LevelGetter, *, path: str = "/battery") -> FastAPI:
    """Build the single-route status app.

    The handler only reads the cached level through ``level_getter``; it never
    touches the battery sensor. Any other path gets FastAPI's default 404.
    """
    app = FastAPI(title="Battery Sync", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get(path, response_class=PlainTextResponse)
    async def battery() -> str:
        return str(level_getter())

    return app


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves process signals to its owner."""

    def install_signal_handlers(self) -> None:  # uvicorn < 0.29
        return None

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:  # uvicorn >= 0.29
        yield


class StatusServer:
    """Own the listening socket and the uvicorn server bound to it."""

    def __init__(
        self,
        level_getter: LevelGetter,
        config: Optional[SyncConfig] = None,
        *,
        startup_timeout: float = 5.0,
    ) -> None:
        self.config = config or SyncConfig()
        self.app = create_app(level_getter, path=self.config.path)
        self.startup_timeout = startup_timeout
        self._socket: Optional[socket.socket] = None
        self._server: Optional[_EmbeddedServer] = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def port(self) -> Optional[int]:
        """Actually bound port (differs from the configured one when that is 0)."""
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    async def start(self) -> None:
        if self.running:
            return
        host, port = self.config.bind_host, self.config.port
        sock = self._bind(host, port)
        self._socket = sock

        server = _EmbeddedServer(
            uvicorn.Config(
                self.app,
                lifespan="off",
                log_config=None,
                access_log=False,
            )
        )
        self._server = server
        self._task = asyncio.create_task(server.serve(sockets=[sock]))

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.startup_timeout
        while not server.started:
            if self._task.done() or loop.time() >= deadline:
                reason = "server did not start"
                if self._task.done() and not self._task.cancelled() and self._task.exception():
                    reason = str(self._task.exception())
                await self.stop()
                raise ServerBindFailure(host, port, reason)
            await asyncio.sleep(0.01)
        logger.info("Status server listening on %s:%s%s", host, self.port, self.config.path)

    async def stop(self) -> None:
        """Stop serving and drop pending connections without waiting on them."""
        server, task, sock = self._server, self._task, self._socket
        self._server = None
        self._task = None
        self._socket = None
        if server is not None:
            server.should_exit = True
            server.force_exit = True
        if task is not None and not task.done():
            try:
                await asyncio.wait_for(task, timeout=self.startup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Status server did not exit in time; cancelling")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            except Exception:
                logger.exception("Status server shutdown encountered error")
        if sock is not None:
            with contextlib.suppress(OSError):
                sock.close()

    def _bind(self, host: str, port: int) -> socket.socket:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.setblocking(False)
        except OSError as exc:
            sock.close()
            logger.warning("Status server bind failed on %s:%s: %s", host, port, exc)
            raise ServerBindFailure(host, port, exc.strerror or str(exc)) from exc
        return sock

    async def __aenter__(self) -> "StatusServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.stop()


__all__ = ["StatusServer", "create_app", "LevelGetter"]
