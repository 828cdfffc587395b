"""Wire format of the sync messages and helpers around it."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from .messagepack import FieldType, MessagePack

MAC_LENGTH = 6

# msgType, padding to the 64-bit field, macAddr64, ums, rssi, tail padding.
_LAYOUT = struct.Struct("<B7xQIb3x")
MESSAGE_SIZE = _LAYOUT.size


class MsgType(IntEnum):
    """Kind of message, carried in the first byte of every frame."""

    HELLO = 0x10
    ECHO_REQ = 0x11
    ECHO_ACK = 0x12
    MSGPACK = 0x80
    RESERVED = 0x81


@dataclass
class EspNowMessage:
    """A fixed-size sync frame: type, sender MAC, time stamp and RSSI."""

    msg_type: Union[MsgType, int] = MsgType.HELLO
    mac_addr64: int = 0
    ums: int = 0
    rssi: int = 0

    def pack(self) -> bytes:
        """Return the frame bytes."""
        try:
            return _LAYOUT.pack(int(self.msg_type), self.mac_addr64, self.ums, self.rssi)
        except struct.error as exc:
            raise ValueError(f"message field out of range: {exc}") from None

    @classmethod
    def unpack(cls, data: bytes) -> "EspNowMessage":
        """Build a message from frame bytes."""
        raw = bytes(data)
        if len(raw) != MESSAGE_SIZE:
            raise ValueError(f"a message has {MESSAGE_SIZE} bytes, got {len(raw)}")
        code, mac, ums, rssi = _LAYOUT.unpack(raw)
        try:
            msg_type: Union[MsgType, int] = MsgType(code)
        except ValueError:
            msg_type = code
        return cls(msg_type, mac, ums, rssi)


def mac_to_int(mac) -> int:
    """Turn a 6-byte MAC address into a 48-bit integer (OUI in the high bits)."""
    data = bytes(mac)
    if len(data) != MAC_LENGTH:
        raise ValueError(f"a MAC address has {MAC_LENGTH} bytes, got {len(data)}")
    return int.from_bytes(data, "big")


def int_to_mac(value: int) -> bytes:
    """Turn a 48-bit integer back into a 6-byte MAC address."""
    if not 0 <= value < 1 << (8 * MAC_LENGTH):
        raise ValueError(f"{value:#x} is not a 48-bit MAC address")
    return value.to_bytes(MAC_LENGTH, "big")


def _format_field(pack: MessagePack, index: int) -> str:
    field_type = pack.type(index)
    if field_type == FieldType.BOOLEAN:
        return f" {1 if pack.get_boolean(index) else 0}"
    if field_type == FieldType.SHORT:
        return f" {pack.get_short(index)}"
    if field_type == FieldType.INTEGER:
        return f" {pack.get_integer(index)}"
    if field_type == FieldType.LONG:
        return f" {pack.get_long(index):X}"
    if field_type == FieldType.FLOAT:
        return f" {pack.get_float(index):.2f}"
    return ""


def format_message_pack(pack: MessagePack) -> str:
    """Dump of the raw bytes of ``pack`` followed by its numeric values."""
    raw = "".join(f" {byte:02X}" for byte in pack.pack())
    values = "".join(_format_field(pack, index) for index in range(pack.count()))
    return f"myMessagePack:{raw}\n({values})\n"