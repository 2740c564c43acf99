"""Tests for the status endpoint and the server socket lifecycle."""
from __future__ import annotations

import socket
import unittest

from fastapi.testclient import TestClient

from batsync.client import RemoteStatusClient
from batsync.config import SyncConfig
from batsync.errors import ServerBindFailure
from batsync.models import UNKNOWN_LEVEL, ConnectionState
from batsync.server import StatusServer, create_app


class StatusAppTest(unittest.TestCase):
    def setUp(self) -> None:
        self.level = UNKNOWN_LEVEL
        self.client = TestClient(create_app(lambda: self.level))

    def tearDown(self) -> None:
        self.client.close()

    def test_battery_reports_sentinel_before_first_reading(self) -> None:
        response = self.client.get("/battery")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, "-1")
        self.assertTrue(response.headers["content-type"].startswith("text/plain"))

    def test_battery_reports_latest_cached_level(self) -> None:
        self.level = 37
        self.assertEqual(self.client.get("/battery").text, "37")
        self.level = 38
        self.assertEqual(self.client.get("/battery").text, "38")

    def test_unknown_paths_are_not_found(self) -> None:
        for path in ("/", "/health", "/docs", "/battery/extra"):
            with self.subTest(path=path):
                self.assertEqual(self.client.get(path).status_code, 404)

    def test_only_get_is_routed(self) -> None:
        self.assertEqual(self.client.post("/battery").status_code, 405)


class StatusServerLifecycleTest(unittest.IsolatedAsyncioTestCase):
    async def test_bind_failure_is_reported_and_server_stays_absent(self) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            server = StatusServer(lambda: 50, SyncConfig(port=port, bind_host="127.0.0.1"))
            with self.assertRaises(ServerBindFailure) as ctx:
                await server.start()

        self.assertEqual(ctx.exception.port, port)
        self.assertFalse(server.running)
        self.assertIsNone(server.port)
        await server.stop()

    async def test_loopback_round_trip_through_client(self) -> None:
        level = 37
        server = StatusServer(lambda: level, SyncConfig(port=0, bind_host="127.0.0.1"))
        async with server:
            self.assertTrue(server.running)
            client = RemoteStatusClient(SyncConfig(port=server.port, fetch_timeout=2.0))
            outcome = await client.poll("127.0.0.1")

        self.assertEqual(outcome.status.state, ConnectionState.CONNECTED)
        self.assertEqual(outcome.level, 37)
        self.assertFalse(server.running)


if __name__ == "__main__":
    unittest.main()
