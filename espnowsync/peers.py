"""Bounded list of radio peers, evicting the least recently used one."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

MAX_PEERS = 20
ADDRESS_LENGTH = 6

Clock = Callable[[], int]


def _default_clock() -> int:
    return int(time.monotonic() * 1000)


def _mac_bytes(mac) -> bytes:
    data = bytes(mac)
    if len(data) != ADDRESS_LENGTH:
        raise ValueError(f"a MAC address has {ADDRESS_LENGTH} bytes, got {len(data)}")
    return data


def _mac_str(mac: bytes) -> str:
    return ":".join(f"{b:02x}" for b in mac)


@dataclass
class Peer:
    """A slot in the peer list."""

    mac: bytes = bytes(ADDRESS_LENGTH)
    last_msg: int = 0
    active: bool = False


class PeerList:
    """Fixed number of peer slots with last-use times in milliseconds."""

    def __init__(self, capacity: int = MAX_PEERS, clock: Optional[Clock] = None) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._clock = clock or _default_clock
        self._slots = [Peer() for _ in range(capacity)]
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def peer_exists(self, mac) -> bool:
        """Whether ``mac`` is an active peer; marks it as just used if so."""
        peer = self.get_peer(mac)
        if peer is None:
            return False
        peer.last_msg = self._clock()
        return True

    def get_peer(self, mac) -> Optional[Peer]:
        """The active peer with address ``mac``, or ``None``."""
        address = _mac_bytes(mac)
        return next(
            (slot for slot in self._slots if slot.active and slot.mac == address), None
        )

    def update_peer_use(self, mac) -> bool:
        """Mark ``mac`` as just used; return whether it is a peer."""
        peer = self.get_peer(mac)
        if peer is None:
            return False
        peer.last_msg = self._clock()
        return True

    def add_peer(self, mac) -> bool:
        """Add ``mac``; return ``False`` if it exists already or the list is full."""
        address = _mac_bytes(mac)
        if self.peer_exists(address) or self._count >= len(self._slots):
            return False
        slot = next((slot for slot in self._slots if not slot.active), None)
        if slot is None:
            return False
        slot.mac = address
        slot.active = True
        slot.last_msg = self._clock()
        self._count += 1
        return True

    def delete_peer(self, mac) -> bool:
        """Remove ``mac``; return whether it was a peer."""
        peer = self.get_peer(mac)
        if peer is None:
            return False
        peer.active = False
        self._count -= 1
        return True

    def delete_oldest(self) -> Optional[bytes]:
        """Remove the least recently used peer and return its address, or ``None``."""
        active = [slot for slot in self._slots if slot.active]
        if not active:
            return None
        oldest = min(active, key=lambda slot: slot.last_msg)
        oldest.active = False
        self._count -= 1
        return oldest.mac

    def dump(self) -> str:
        """Human readable listing of the active peers and their ages."""
        now = self._clock()
        lines = [f"Number of peers {self._count}"]
        lines.extend(
            f"Peer {_mac_str(slot.mac)} is {now - slot.last_msg} ms old"
            for slot in self._slots
            if slot.active
        )
        return "\n".join(lines) + "\n"