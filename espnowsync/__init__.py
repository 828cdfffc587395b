"""Blink synchronisation among peers on an ESP-NOW style broadcast link."""

__version__ = "0.1.0"

__all__ = [
    "messagepack",
    "simplemap",
    "ringbuffer",
    "debug",
    "peers",
    "quickespnow",
    "protocol",
    "nodes",
    "chipinfo",
    "sync",
]