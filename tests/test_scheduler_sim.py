"""Simulation tests for the fixed-period ticker."""
from __future__ import annotations

import asyncio
import unittest

from batsync.scheduler import PeriodicTask


class PeriodicTaskSimulationTest(unittest.IsolatedAsyncioTestCase):
    async def test_immediate_tick_runs_without_waiting_a_period(self) -> None:
        fired = asyncio.Event()

        async def tick() -> None:
            fired.set()

        task = PeriodicTask(60.0, tick, immediate=True)
        task.start()
        await asyncio.wait_for(fired.wait(), timeout=1.0)
        self.assertEqual(task.ticks, 1)
        await task.aclose()
        self.assertFalse(task.running)

    async def test_ticks_repeat_until_cancelled(self) -> None:
        calls = []

        async def tick() -> None:
            calls.append(asyncio.get_running_loop().time())

        task = PeriodicTask(0.02, tick)
        task.start()
        await asyncio.sleep(0.15)
        task.cancel()
        self.assertFalse(task.running)
        await task.aclose()
        count = len(calls)
        self.assertGreaterEqual(count, 3)

        await asyncio.sleep(0.05)
        self.assertEqual(len(calls), count)

    async def test_failing_tick_does_not_stop_schedule(self) -> None:
        calls = []

        async def tick() -> None:
            calls.append(1)
            raise RuntimeError("sensor glitch")

        task = PeriodicTask(0.01, tick, immediate=True)
        with self.assertLogs("batsync.scheduler", level="ERROR"):
            task.start()
            await asyncio.sleep(0.06)
        await task.aclose()
        self.assertGreaterEqual(len(calls), 2)

    async def test_cancel_interrupts_in_flight_tick(self) -> None:
        entered = asyncio.Event()
        finished = []

        async def tick() -> None:
            entered.set()
            await asyncio.sleep(10)
            finished.append(1)

        task = PeriodicTask(60.0, tick, immediate=True)
        task.start()
        await asyncio.wait_for(entered.wait(), timeout=1.0)
        await task.aclose()
        self.assertEqual(finished, [])

    async def test_start_twice_is_rejected(self) -> None:
        async def tick() -> None:
            return None

        task = PeriodicTask(1.0, tick)
        task.start()
        with self.assertRaises(RuntimeError):
            task.start()
        await task.aclose()

    def test_interval_must_be_positive(self) -> None:
        async def tick() -> None:
            return None

        with self.assertRaises(ValueError):
            PeriodicTask(0, tick)


if __name__ == "__main__":
    unittest.main()
