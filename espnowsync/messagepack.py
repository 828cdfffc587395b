"""Compact typed packing of a handful of small values into a byte buffer.

Layout: byte 0 holds the field count, followed by a header of 4-bit type
codes (two per byte, even indexes in the high nibble), followed by the
field data in insertion order. Multi-byte numbers are little endian and
text is stored NUL terminated.
"""

from __future__ import annotations

import struct
from enum import IntEnum


class FieldType(IntEnum):
    """Type code of a packed field."""

    NULL = 0
    BOOLEAN = 1
    SHORT = 2
    INTEGER = 3
    LONG = 4
    FLOAT = 5
    TEXT = 6
    MAX = 7
    ERROR = 0x0F


_FIELD_SIZE = {
    FieldType.NULL: 0,
    FieldType.BOOLEAN: 1,
    FieldType.SHORT: 1,
    FieldType.INTEGER: 2,
    FieldType.LONG: 4,
    FieldType.FLOAT: 4,
    FieldType.TEXT: 0,
}


class MessagePack:
    """A bounded buffer of typed fields that can be packed and unpacked."""

    def __init__(self, buffer_size: int = 100) -> None:
        if not 0 <= buffer_size <= 255:
            raise ValueError(f"buffer size must be within 0..255, got {buffer_size}")
        self._buffer_size = buffer_size
        self._buffer = bytearray(1)

    # -- adding -------------------------------------------------------------

    def add_null(self) -> None:
        """Append a field without data."""
        self._add(FieldType.NULL, b"")

    def add_boolean(self, value: bool) -> None:
        """Append a boolean stored as one byte."""
        self._add(FieldType.BOOLEAN, b"\x01" if value else b"\x00")

    def add_short(self, value: int) -> None:
        """Append an unsigned 8-bit value."""
        self._add(FieldType.SHORT, _unsigned(value, 1))

    def add_integer(self, value: int) -> None:
        """Append an unsigned 16-bit value."""
        self._add(FieldType.INTEGER, _unsigned(value, 2))

    def add_long(self, value: int) -> None:
        """Append an unsigned 32-bit value."""
        self._add(FieldType.LONG, _unsigned(value, 4))

    def add_float(self, value: float) -> None:
        """Append a single precision float."""
        self._add(FieldType.FLOAT, struct.pack("<f", value))

    def add_text(self, value: str) -> None:
        """Append a NUL terminated UTF-8 string."""
        encoded = value.encode("utf-8")
        if b"\x00" in encoded:
            raise ValueError("text must not contain NUL characters")
        self._add(FieldType.TEXT, encoded + b"\x00")

    # -- reading ------------------------------------------------------------

    def get_boolean(self, index: int) -> bool:
        """Return the boolean field at ``index``."""
        return self._get(index, FieldType.BOOLEAN)[0] == 1

    def get_short(self, index: int) -> int:
        """Return the 8-bit field at ``index``."""
        return self._get(index, FieldType.SHORT)[0]

    def get_integer(self, index: int) -> int:
        """Return the 16-bit field at ``index``."""
        return int.from_bytes(self._get(index, FieldType.INTEGER), "little")

    def get_long(self, index: int) -> int:
        """Return the 32-bit field at ``index``."""
        return int.from_bytes(self._get(index, FieldType.LONG), "little")

    def get_float(self, index: int) -> float:
        """Return the float field at ``index``."""
        return struct.unpack("<f", self._get(index, FieldType.FLOAT))[0]

    def get_text(self, index: int) -> str:
        """Return the text field at ``index``."""
        self._check(index, FieldType.TEXT)
        start = self._position(index)
        end = self._text_end(start)
        return self._buffer[start:end].decode("utf-8")

    # -- buffer -------------------------------------------------------------

    def count(self) -> int:
        """Number of fields held."""
        return self._buffer[0]

    def type(self, index: int) -> FieldType:
        """Type of the field at ``index``, or ``FieldType.ERROR`` if there is none."""
        if not 0 <= index < self.count():
            return FieldType.ERROR
        try:
            return FieldType(self._raw_type(index))
        except ValueError:
            return FieldType.ERROR

    def __len__(self) -> int:
        return len(self._buffer)

    def pack(self) -> bytes:
        """Return the packed bytes."""
        return bytes(self._buffer)

    def unpack(self, data: bytes) -> None:
        """Replace the contents with previously packed bytes."""
        if len(data) > self._buffer_size:
            raise ValueError(
                f"{len(data)} bytes do not fit in a buffer of {self._buffer_size}"
            )
        if not data:
            raise ValueError("packed data must hold at least the count byte")
        self._buffer = bytearray(data)

    # -- internals ----------------------------------------------------------

    def _add(self, field_type: FieldType, data: bytes) -> None:
        if self._buffer_size - len(self._buffer) < len(data):
            raise OverflowError("message pack buffer is full")
        count = self.count()
        if count >= 255:
            raise OverflowError("message pack holds the maximum number of fields")
        self._buffer += data
        if count % 2 == 0:
            # A new header byte is needed; it goes right after the current header.
            self._buffer.insert(count // 2 + 1, 0)
        self._set_type(count, field_type)
        self._buffer[0] = count + 1

    def _check(self, index: int, expected: FieldType) -> None:
        if not 0 <= index < self.count():
            raise IndexError(f"no field at index {index}")
        actual = self._raw_type(index)
        if actual != expected:
            raise TypeError(
                f"field {index} has type code {actual}, not {expected.name}"
            )

    def _get(self, index: int, expected: FieldType) -> bytes:
        self._check(index, expected)
        start = self._position(index)
        size = _FIELD_SIZE[expected]
        chunk = bytes(self._buffer[start:start + size])
        if len(chunk) != size:
            raise ValueError(f"field {index} is truncated")
        return chunk

    def _header_length(self) -> int:
        return (self.count() + 1) // 2 + 1

    def _position(self, index: int) -> int:
        position = self._header_length()
        for i in range(index):
            code = self._raw_type(i)
            if code == FieldType.TEXT:
                position = self._text_end(position) + 1
            elif code in _FIELD_SIZE:
                position += _FIELD_SIZE[FieldType(code)]
            else:
                raise ValueError(f"field {i} has unknown type code {code}")
        return position

    def _text_end(self, start: int) -> int:
        try:
            return self._buffer.index(0, start)
        except ValueError:
            raise ValueError("text field is not terminated") from None

    def _raw_type(self, index: int) -> int:
        byte = self._buffer[index // 2 + 1]
        if index % 2 == 0:
            byte >>= 4
        return byte & 0x0F

    def _set_type(self, index: int, field_type: FieldType) -> None:
        code = int(field_type) & 0x0F
        if index % 2 == 0:
            code <<= 4
        self._buffer[index // 2 + 1] |= code


def _unsigned(value: int, size: int) -> bytes:
    limit = 1 << (8 * size)
    if not 0 <= value < limit:
        raise ValueError(f"{value} does not fit in {size} unsigned byte(s)")
    return value.to_bytes(size, "little")