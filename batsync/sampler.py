"""Local battery sampling on top of an injectable platform reader."""
from __future__ import annotations

import asyncio
import math
from typing import Awaitable, Callable, Optional, Union

import psutil

from batsync.errors import SensorUnavailable
from batsync.models import MAX_LEVEL, MIN_LEVEL, BatteryLevel

LevelReader = Callable[[], Union[int, float, None, Awaitable[Union[int, float, None]]]]


def psutil_battery_level() -> int:
    """Read the host battery charge through :func:`psutil.sensors_battery`."""
    sensors_battery = getattr(psutil, "sensors_battery", None)
    if sensors_battery is None:
        raise SensorUnavailable("battery sensors are not supported on this platform")
    try:
        battery = sensors_battery()
    except Exception as exc:  # pragma: no cover - platform dependent
        raise SensorUnavailable(str(exc)) from exc
    if battery is None:
        raise SensorUnavailable("no battery detected")
    return int(round(battery.percent))


class LocalSampler:
    """Query the platform battery capability on demand.

    The reader may be a plain function or a coroutine function. It may return
    an ``int``/``float`` percentage; ``None`` or anything outside 0..100 is
    reported as :class:`SensorUnavailable`, as is any exception it raises.
    """

    def __init__(self, reader: Optional[LevelReader] = None) -> None:
        self._reader: LevelReader = reader or psutil_battery_level

    async def current_level(self) -> BatteryLevel:
        try:
            outcome = self._reader()
            if asyncio.iscoroutine(outcome) or isinstance(outcome, asyncio.Future):
                outcome = await outcome
        except asyncio.CancelledError:
            raise
        except SensorUnavailable:
            raise
        except Exception as exc:
            raise SensorUnavailable(str(exc) or type(exc).__name__) from exc

        if outcome is None or isinstance(outcome, bool) or not isinstance(outcome, (int, float)):
            raise SensorUnavailable(f"reader returned {outcome!r}")
        if not math.isfinite(outcome):
            raise SensorUnavailable(f"reader returned {outcome!r}")
        level = int(round(outcome))
        if not MIN_LEVEL <= level <= MAX_LEVEL:
            raise SensorUnavailable(f"reading out of range: {level}")
        return level


__all__ = ["LocalSampler", "LevelReader", "psutil_battery_level"]
