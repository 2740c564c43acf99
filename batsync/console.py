"""Terminal rendering of a :class:`~batsync.models.SyncSnapshot` with rich."""
from __future__ import annotations

from typing import Optional

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from batsync.models import BatteryLevel, ConnectionState, SyncSnapshot, describe_level

BAR_WIDTH = 24

_STATE_STYLES = {
    ConnectionState.IDLE: "dim",
    ConnectionState.CONNECTING: "cyan",
    ConnectionState.CONNECTED: "green",
    ConnectionState.TIMED_OUT: "yellow",
    ConnectionState.FAILED: "red",
    ConnectionState.INVALID_RESPONSE: "magenta",
}


def level_color(level: BatteryLevel) -> str:
    if level < 0:
        return "grey50"
    if level <= 15:
        return "red"
    if level <= 40:
        return "orange1"
    return "green"


def battery_bar(level: BatteryLevel, width: int = BAR_WIDTH) -> Text:
    fraction = 0.0 if level < 0 else min(level, 100) / 100
    filled = int(round(fraction * width))
    color = level_color(level)
    bar = Text()
    bar.append("█" * filled, style=color)
    bar.append("░" * (width - filled), style="grey23")
    bar.append(f" {describe_level(level):>4}", style=f"bold {color}")
    return bar


def _device_panel(title: str, detail: Text, level: BatteryLevel) -> Panel:
    return Panel(Group(detail, battery_bar(level)), title=title, title_align="left")


def render_snapshot(snapshot: SyncSnapshot) -> Group:
    local_detail = Text(f"My IP: {snapshot.local_address or 'Loading...'}")
    if snapshot.server_status:
        local_detail.append(f"\n{snapshot.server_status}", style="dim")

    remote_detail = Text("Status: ")
    remote_detail.append(snapshot.status.label, style=_STATE_STYLES[snapshot.status.state])
    if snapshot.peer:
        remote_detail.append(f"\nPeer: {snapshot.peer}", style="dim")

    return Group(
        _device_panel("This Device", local_detail, snapshot.local_level),
        _device_panel("Remote Device", remote_detail, snapshot.remote_level),
    )


def render_fetch_table(peer: str, level: Optional[BatteryLevel], label: str) -> Table:
    table = Table(title="Battery Sync Peer", show_lines=False)
    for column in ("peer", "level", "status"):
        table.add_column(column.upper())
    table.add_row(
        peer,
        Text(describe_level(level), style=level_color(level)) if level is not None else Text("-"),
        label,
    )
    return table


__all__ = [
    "battery_bar",
    "level_color",
    "render_fetch_table",
    "render_snapshot",
]
