"""Battery sync command-line launcher."""
from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from typing import Any, List, Optional

from rich.console import Console
from rich.live import Live

from batsync.client import RemoteStatusClient
from batsync.config import DEFAULT_FETCH_TIMEOUT, DEFAULT_PORT, SyncConfig
from batsync.console import render_fetch_table, render_snapshot
from batsync.controller import SyncController
from batsync.models import ConnectionState


def _configure_logging(args: argparse.Namespace) -> None:
	level = logging.INFO
	if args.verbose:
		level = logging.DEBUG
	elif args.quiet:
		level = logging.ERROR
	logging.basicConfig(level=level, format="%(asctime)s %(levelname)-8s %(name)s: %(message)s")


async def _cmd_run(args: argparse.Namespace) -> int:
	config = SyncConfig(port=args.port)
	controller = SyncController(config)
	console = Console()
	stop_event = asyncio.Event()

	def _signal_handler(*_: Any) -> None:
		stop_event.set()

	loop = asyncio.get_running_loop()
	for sig in (signal.SIGINT, signal.SIGTERM):
		with contextlib.suppress(NotImplementedError):
			loop.add_signal_handler(sig, _signal_handler)

	with Live(render_snapshot(controller.snapshot), console=console, refresh_per_second=4) as live:
		controller.subscribe(lambda snapshot: live.update(render_snapshot(snapshot)))
		try:
			await controller.start()
			if args.peer is not None:
				controller.start_sync(args.peer)
			with contextlib.suppress(asyncio.TimeoutError):
				await asyncio.wait_for(stop_event.wait(), timeout=args.runtime)
		finally:
			await controller.aclose()
	return 0


async def _cmd_fetch(args: argparse.Namespace) -> int:
	config = SyncConfig(port=args.port, fetch_timeout=args.timeout)
	client = RemoteStatusClient(config)
	outcome = await client.poll(args.host)
	if args.json:
		payload = {"peer": args.host, "level": outcome.level, "status": outcome.status.to_dict()}
		sys.stdout.write(json.dumps(payload) + "\n")
	else:
		Console().print(render_fetch_table(args.host, outcome.level, outcome.status.label))
	return 0 if outcome.status.state is ConnectionState.CONNECTED else 1


def _build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="Exchange battery levels with a peer on the LAN")
	verbosity = parser.add_mutually_exclusive_group()
	verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
	verbosity.add_argument("-q", "--quiet", action="store_true", help="Errors only")
	sub = parser.add_subparsers(dest="command", required=True)

	run = sub.add_parser("run", help="Serve the local level and poll a peer")
	run.add_argument("--peer", help="Peer host to start syncing with")
	run.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to serve on and poll")
	run.add_argument("--runtime", type=float, help="Stop after this many seconds")
	run.set_defaults(handler=_cmd_run)

	fetch = sub.add_parser("fetch", help="Poll a peer once")
	fetch.add_argument("host", help="Peer host")
	fetch.add_argument("--port", type=int, default=DEFAULT_PORT, help="Peer port")
	fetch.add_argument("--timeout", type=float, default=DEFAULT_FETCH_TIMEOUT, help="Request timeout seconds")
	fetch.add_argument("--json", action="store_true", help="Output JSON")
	fetch.set_defaults(handler=_cmd_fetch)

	return parser


def main(argv: Optional[List[str]] = None) -> int:
	parser = _build_parser()
	args = parser.parse_args(argv)
	_configure_logging(args)
	try:
		return asyncio.run(args.handler(args))
	except ValueError as exc:
		parser.error(str(exc))


if __name__ == "__main__":
	sys.exit(main())
