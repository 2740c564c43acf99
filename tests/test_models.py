"""Tests for value types and configuration."""
from __future__ import annotations

import unittest

from batsync.config import SyncConfig
from batsync.models import UNKNOWN_LEVEL, ConnectionState, ConnectionStatus, SyncSnapshot, describe_level, is_valid_level


class BatteryLevelTest(unittest.TestCase):
    def test_valid_levels(self) -> None:
        self.assertTrue(is_valid_level(UNKNOWN_LEVEL))
        self.assertTrue(is_valid_level(0))
        self.assertTrue(is_valid_level(100))
        for value in (-2, 101, 50.0, "50", None, True):
            with self.subTest(value=value):
                self.assertFalse(is_valid_level(value))

    def test_describe_level(self) -> None:
        self.assertEqual(describe_level(UNKNOWN_LEVEL), "--%")
        self.assertEqual(describe_level(0), "0%")
        self.assertEqual(describe_level(87), "87%")


class ConnectionStatusTest(unittest.TestCase):
    def test_labels(self) -> None:
        cases = {
            ConnectionStatus.idle(): "Enter IP and start syncing",
            ConnectionStatus.connecting(): "Connecting...",
            ConnectionStatus.connected(): "Connected",
            ConnectionStatus.timed_out(): "Connection timed out",
            ConnectionStatus.invalid_response(): "Invalid response",
            ConnectionStatus.failed(status_code=404): "Connection failed (Status: 404)",
            ConnectionStatus.failed(reason="refused"): "Connection error",
        }
        for status, label in cases.items():
            with self.subTest(state=status.state):
                self.assertEqual(status.label, label)

    def test_terminal_states(self) -> None:
        self.assertFalse(ConnectionStatus.idle().is_terminal)
        self.assertFalse(ConnectionStatus.connecting().is_terminal)
        self.assertTrue(ConnectionStatus.connected().is_terminal)
        self.assertTrue(ConnectionStatus.failed().is_terminal)

    def test_equal_statuses_compare_equal(self) -> None:
        self.assertEqual(ConnectionStatus.failed(status_code=500), ConnectionStatus.failed(status_code=500))
        self.assertNotEqual(ConnectionStatus.failed(status_code=500), ConnectionStatus.failed(status_code=502))


class SyncSnapshotTest(unittest.TestCase):
    def test_defaults_use_sentinel(self) -> None:
        snapshot = SyncSnapshot()
        self.assertEqual(snapshot.local_level, UNKNOWN_LEVEL)
        self.assertEqual(snapshot.remote_level, UNKNOWN_LEVEL)
        self.assertIs(snapshot.status.state, ConnectionState.IDLE)

    def test_evolve_and_to_dict(self) -> None:
        snapshot = SyncSnapshot().evolve(remote_level=42, status=ConnectionStatus.connected(), peer="10.0.0.3")
        payload = snapshot.to_dict()
        self.assertEqual(payload["remote_level"], 42)
        self.assertEqual(payload["status"]["state"], "connected")
        self.assertEqual(payload["peer"], "10.0.0.3")


class SyncConfigTest(unittest.TestCase):
    def test_defaults(self) -> None:
        config = SyncConfig()
        self.assertEqual(config.port, 8080)
        self.assertEqual(config.path, "/battery")
        self.assertEqual(config.bind_host, "0.0.0.0")
        self.assertEqual(config.sample_interval, 5.0)
        self.assertEqual(config.poll_interval, 5.0)
        self.assertEqual(config.fetch_timeout, 3.0)

    def test_peer_url(self) -> None:
        config = SyncConfig()
        self.assertEqual(config.peer_url("192.168.43.1"), "http://192.168.43.1:8080/battery")
        self.assertEqual(config.peer_url("fe80::1"), "http://[fe80::1]:8080/battery")
        self.assertEqual(config.peer_url("phone.local"), "http://phone.local:8080/battery")

    def test_invalid_values_are_rejected(self) -> None:
        for kwargs in ({"port": 70000}, {"port": -1}, {"poll_interval": 0}, {"fetch_timeout": -1.0}, {"path": "battery"}):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValueError):
                    SyncConfig(**kwargs)


if __name__ == "__main__":
    unittest.main()
