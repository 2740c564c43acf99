"""Polling helpers for a peer's ``/battery`` endpoint."""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from batsync.config import SyncConfig
from batsync.errors import FetchTimeout, HttpStatusError, MalformedResponse, TransportError
from batsync.models import BatteryLevel, ConnectionStatus, is_valid_level

logger = logging.getLogger(__name__)

HttpGet = Callable[..., Any]

_LEVEL_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")


def parse_level(body: Optional[str]) -> BatteryLevel:
	"""Parse a peer response body into a battery level.

	Accepts an optionally signed decimal integer with surrounding whitespace.
	Values outside 0..100 (other than the -1 sentinel) are rejected.
	"""
	if body is None or not _LEVEL_PATTERN.fullmatch(body):
		raise MalformedResponse(body)
	level = int(body)
	if not is_valid_level(level):
		raise MalformedResponse(body)
	return level


@dataclass(frozen=True, slots=True)
class FetchOutcome:
	"""Result of one poll; ``level`` is only set when the status is CONNECTED."""

	status: ConnectionStatus
	level: Optional[BatteryLevel] = None


class RemoteStatusClient:
	"""Fetch a peer's battery level with a hard timeout.

	``http_get`` must be call-compatible with :func:`requests.get`; it runs in
	a worker thread so the event loop stays free while the peer answers.
	"""

	def __init__(self, config: Optional[SyncConfig] = None, *, http_get: Optional[HttpGet] = None) -> None:
		self.config = config or SyncConfig()
		self._http_get: HttpGet = http_get or requests.get

	async def fetch_level(self, peer: str) -> BatteryLevel:
		url = self.config.peer_url(peer)
		timeout = self.config.fetch_timeout
		try:
			# requests applies its timeout per phase; wait_for bounds the total.
			response = await asyncio.wait_for(
				asyncio.to_thread(self._http_get, url, timeout=timeout, allow_redirects=False),
				timeout=timeout,
			)
		except asyncio.TimeoutError as exc:
			raise FetchTimeout(f"{url} did not answer within {timeout:g}s") from exc
		except requests.Timeout as exc:
			raise FetchTimeout(str(exc)) from exc
		except (requests.RequestException, OSError) as exc:
			raise TransportError(str(exc) or type(exc).__name__) from exc

		if response.status_code != 200:
			raise HttpStatusError(response.status_code)
		return parse_level(response.text)

	async def poll(self, peer: str) -> FetchOutcome:
		"""Fetch and classify; never raises except on cancellation."""
		try:
			level = await self.fetch_level(peer)
		except asyncio.CancelledError:
			raise
		except FetchTimeout:
			return FetchOutcome(ConnectionStatus.timed_out())
		except HttpStatusError as exc:
			return FetchOutcome(ConnectionStatus.failed(status_code=exc.status_code))
		except MalformedResponse:
			return FetchOutcome(ConnectionStatus.invalid_response())
		except TransportError as exc:
			return FetchOutcome(ConnectionStatus.failed(reason=str(exc)))
		except Exception as exc:
			logger.debug("Unexpected error polling %s", peer, exc_info=True)
			return FetchOutcome(ConnectionStatus.failed(reason=str(exc) or type(exc).__name__))
		return FetchOutcome(ConnectionStatus.connected(), level)


__all__ = ["RemoteStatusClient", "FetchOutcome", "HttpGet", "parse_level"]
