"""Single owner of the observable battery sync state.

All mutation happens on the event loop that runs the controller: the local
sampling ticker, the remote polling ticker and the HTTP handler share that
loop, and the blocking peer request is awaited from a worker thread, so state
writes never interleave. Presentation code observes changes through
:meth:`SyncController.subscribe`.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from typing import Awaitable, Callable, List, Optional, Set, Union

from batsync.client import FetchOutcome, RemoteStatusClient
from batsync.config import SyncConfig
from batsync.errors import PeerValidationError, SensorUnavailable, ServerBindFailure
from batsync.models import BatteryLevel, ConnectionStatus, SyncSnapshot
from batsync.network import local_address
from batsync.sampler import LocalSampler
from batsync.scheduler import PeriodicTask
from batsync.server import StatusServer

logger = logging.getLogger(__name__)

Listener = Callable[[SyncSnapshot], Union[None, Awaitable[None]]]
AddressProvider = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]

EMPTY_PEER_MESSAGE = "Please enter the remote IP address."


class SyncController:
    """Orchestrate local sampling, the status server and remote polling."""

    def __init__(
        self,
        config: Optional[SyncConfig] = None,
        *,
        sampler: Optional[LocalSampler] = None,
        client: Optional[RemoteStatusClient] = None,
        server: Optional[StatusServer] = None,
        address_provider: Optional[AddressProvider] = None,
        serve: bool = True,
    ) -> None:
        self.config = config or SyncConfig()
        self.sampler = sampler or LocalSampler()
        self.client = client or RemoteStatusClient(self.config)
        if server is None and serve:
            server = StatusServer(lambda: self.local_level, self.config)
        self.server = server
        self._address_provider: AddressProvider = address_provider or local_address

        self._snapshot = SyncSnapshot()
        self._listeners: List[Listener] = []
        self._pending: Set[asyncio.Task] = set()
        self._sample_task: Optional[PeriodicTask] = None
        self._poll_task: Optional[PeriodicTask] = None
        self._session_id = 0
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> SyncSnapshot:
        return self._snapshot

    @property
    def local_level(self) -> BatteryLevel:
        return self._snapshot.local_level

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and self._poll_task.running

    @property
    def sampling(self) -> bool:
        return self._sample_task is not None and self._sample_task.running

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every state change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        if self._closed:
            raise RuntimeError("SyncController has been closed")
        if self._started:
            return
        self._started = True

        await self.sample_now()
        self._sample_task = PeriodicTask(self.config.sample_interval, self._sample_tick, name="local-sample")
        self._sample_task.start()

        await self._start_server()
        await self._resolve_local_address()

    async def aclose(self) -> None:
        """Cancel both tickers and release the listening socket."""
        if self._closed:
            return
        self._closed = True
        self._session_id += 1

        tickers = [task for task in (self._sample_task, self._poll_task) if task is not None]
        self._sample_task = None
        self._poll_task = None
        for ticker in tickers:
            ticker.cancel()
        for ticker in tickers:
            await ticker.aclose()

        if self.server is not None and self.server.running:
            await self.server.stop()
            self._update(server_status="Server stopped")

        for pending in list(self._pending):
            pending.cancel()
        self._listeners.clear()
        logger.info("Sync controller closed")

    async def __aenter__(self) -> "SyncController":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.aclose()

    # ------------------------------------------------------------------
    # Local side
    # ------------------------------------------------------------------
    async def sample_now(self) -> BatteryLevel:
        """Read the sensor once; on failure the previous level is kept."""
        try:
            level = await self.sampler.current_level()
        except SensorUnavailable as exc:
            logger.debug("Battery sensor unavailable: %s", exc)
            return self._snapshot.local_level
        self._update(local_level=level)
        return level

    async def _sample_tick(self) -> None:
        await self.sample_now()

    async def _start_server(self) -> None:
        if self.server is None:
            return
        try:
            await self.server.start()
        except ServerBindFailure as exc:
            self._update(server_status=f"Server error: {exc.reason}")
            return
        self._update(server_status=f"Serving on {self.config.bind_host}:{self.server.port}")

    async def _resolve_local_address(self) -> None:
        try:
            address = self._address_provider()
            if asyncio.iscoroutine(address):
                address = await address
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.debug("Local address lookup failed: %s", exc)
            address = None
        self._update(local_address=address or None)

    # ------------------------------------------------------------------
    # Remote side
    # ------------------------------------------------------------------
    def start_sync(self, peer: str) -> None:
        """Begin polling ``peer``, replacing any running session.

        Raises :class:`PeerValidationError` for a blank address, in which case
        nothing changes and a running session keeps going.
        """
        host = (peer or "").strip()
        if not host:
            raise PeerValidationError(EMPTY_PEER_MESSAGE)
        if self._closed:
            raise RuntimeError("SyncController has been closed")

        self._cancel_polling()
        self._session_id += 1
        session_id = self._session_id
        logger.info("Starting sync session %d with %s", session_id, host)
        self._update(peer=host, status=ConnectionStatus.connecting())

        self._poll_task = PeriodicTask(
            self.config.poll_interval,
            functools.partial(self._poll_tick, session_id, host),
            name=f"remote-poll-{session_id}",
            immediate=True,
        )
        self._poll_task.start()

    def stop_sync(self) -> None:
        """Cancel the polling session and return to idle."""
        if self._poll_task is None:
            return
        self._cancel_polling()
        self._session_id += 1
        logger.info("Sync stopped")
        self._update(status=ConnectionStatus.idle())

    def _cancel_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    async def _poll_tick(self, session_id: int, host: str) -> None:
        outcome = await self.client.poll(host)
        self._apply_outcome(session_id, host, outcome)

    def _apply_outcome(self, session_id: int, host: str, outcome: FetchOutcome) -> None:
        if session_id != self._session_id:
            logger.debug("Discarding result for superseded session %d", session_id)
            return
        changes = {"status": outcome.status}
        if outcome.level is not None:
            changes["remote_level"] = outcome.level
        if outcome.status != self._snapshot.status:
            log = logger.info if outcome.level is not None else logger.warning
            log("Peer %s: %s", host, outcome.status.label)
        else:
            logger.debug("Peer %s: %s", host, outcome.status.label)
        self._update(**changes)

    # ------------------------------------------------------------------
    # Notification
    # ------------------------------------------------------------------
    def _update(self, **changes) -> None:
        snapshot = self._snapshot.evolve(**changes)
        if snapshot == self._snapshot:
            return
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                outcome = listener(snapshot)
                if asyncio.iscoroutine(outcome):
                    task = asyncio.create_task(outcome)
                    self._pending.add(task)
                    task.add_done_callback(self._listener_done)
            except Exception:
                logger.exception("State listener %r raised", listener)

    def _listener_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Async state listener raised", exc_info=exc)


__all__ = ["SyncController", "Listener", "AddressProvider", "EMPTY_PEER_MESSAGE"]
