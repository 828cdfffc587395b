"""Table of the team members seen on the air, keyed by 48-bit MAC."""

from __future__ import annotations

from typing import Optional

from .simplemap import SortedMap

KEEPALIVE_MS = 1000
_U32 = 0xFFFFFFFF


def _half(value: int) -> int:
    """Halve with truncation toward zero."""
    return -(-value // 2) if value < 0 else value // 2


class NodeTable:
    """Last report time, keep-alive time and RSSI of every known node.

    The leader is the node with the largest MAC address.
    """

    def __init__(self, my_mac: int) -> None:
        self.my_mac = my_mac
        self._times = SortedMap()
        self._alive = SortedMap()
        self._rssi = SortedMap()

    def __len__(self) -> int:
        return len(self._times)

    def __contains__(self, mac: int) -> bool:
        return mac in self._times

    def leader(self) -> Optional[int]:
        """MAC of the leader, or ``None`` when the table is empty."""
        if not self._times:
            return None
        return self._times.key_at(len(self._times) - 1)

    def add_or_update(self, mac: int, ums: int, rssi: int = 0) -> bool:
        """Record a report from ``mac`` at time ``ums``; return whether it is new.

        A known node's RSSI becomes the mean of the old and new readings;
        our own node always has an RSSI of 0.
        """
        ums &= _U32
        if mac not in self._times:
            self._alive.put(mac, 0)
            self._rssi.put(mac, 0)
            self._times.put(mac, ums)
            return True
        self._times.put(mac, ums)
        if mac == self.my_mac:
            self._rssi.put(mac, 0)
        else:
            old = self._rssi.get(mac, 0)
            self._rssi.put(mac, _half(rssi) + _half(old))
        return False

    def drop_stale(self) -> list[int]:
        """Drop nodes that reported less than a second of progress since the last check.

        Returns the MACs that were dropped, in key order.
        """
        dropped = []
        for mac, new in self._times.items():
            old = self._alive.get(mac, 0)
            diff = (new - old) & _U32
            self._alive.put(mac, new)
            if diff < KEEPALIVE_MS:
                for table in (self._times, self._alive, self._rssi):
                    table.remove_key(mac)
                dropped.append(mac)
        return dropped

    def _leader_ms(self) -> int:
        if not self._times:
            return 0
        return self._times.value_at(len(self._times) - 1) % 1000

    def format_time(self, now_ms: int) -> str:
        """Line with every node and its last report time in seconds."""
        entries = "".join(f" {mac:X}:{ums // 1000}" for mac, ums in self._times.items())
        return f"[{now_ms}]===>{len(self._times)}[{entries}]<===\n"

    def format_old(self, now_ms: int) -> str:
        """Line with every node and its keep-alive time in seconds."""
        entries = "".join(f" {mac:X}:{ums // 1000}" for mac, ums in self._alive.items())
        return f"[{now_ms}]--->{len(self._alive)}({entries})<---\n"

    def format_alive(self, now_ms: int) -> str:
        """Line with every node's short id and seconds since its keep-alive check."""
        entries = "".join(
            f" {'#' if mac == self.my_mac else '*'}{mac & 0xFFFF:04X}:"
            f"{((ums - self._alive.get(mac, 0)) & _U32) // 1000:3d}"
            for mac, ums in self._times.items()
        )
        ims = self._leader_ms()
        return f"[{now_ms}]>>>{len(self._times)}[{entries}]<<< {ims:03d}({1000 - ims:03d})ms\n"

    def format_rssi(self, now_ms: int) -> str:
        """Line with every node's short id and RSSI, plus the leader's blink phase."""
        entries = "".join(
            f" {'#' if mac == self.my_mac else '*'}{mac & 0xFFFF:04X}:"
            f"{0 if mac == self.my_mac else rssi:03d}"
            for mac, rssi in self._rssi.items()
        )
        ims = self._leader_ms()
        return (
            f"[{now_ms}]\t>>>{len(self._times)}[{entries}]<<< "
            f"\tSync:{ims:03d}({1000 - ims:03d})ms\n"
        )