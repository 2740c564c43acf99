from __future__ import annotations

from typing import TypeAlias

BatteryLevel: TypeAlias = int

UNKNOWN_LEVEL: BatteryLevel = -1
MIN_LEVEL: BatteryLevel = 0
MAX_LEVEL: BatteryLevel = 100


def is_valid_level(value: object) -> bool:
    """Return True for 0..100 or the unknown sentinel."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value == UNKNOWN_LEVEL or MIN_LEVEL <= value <= MAX_LEVEL


def describe_level(level: BatteryLevel) -> str:
    return "--%" if level < 0 else f"{level}%"
