"""Decoding of chip identity, reset reasons, flash mode and partition tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

PARTITION_TYPE_APP = 0x00
PARTITION_TYPE_DATA = 0x01

_RESET_REASONS = {
    1: "Vbat power on reset",
    3: "Software reset digital core",
    4: "Legacy watch dog reset digital core",
    5: "Deep Sleep reset digital core",
    6: "Reset by SLC module, reset digital core",
    7: "Timer Group0 Watch dog reset digital core",
    8: "Timer Group1 Watch dog reset digital core",
    9: "RTC Watch dog Reset digital core",
    10: "Instrusion tested to reset CPU",
    11: "Time Group reset CPU",
    12: "Software reset CPU",
    13: "RTC Watch dog Reset CPU",
    14: "for APP CPU, reseted by PRO CPU",
    15: "Reset when the vdd voltage is not stable",
    16: "RTC Watch dog reset digital core and rtc module",
    21: "USB_UART_CHIP_RESET",
    22: "USB_JTAG_CHIP_RESET",
}

# Checked in this order; the first set bit decides the mode.
_FLASH_MODES = (
    (24, "QIO"),
    (20, "QOUT"),
    (23, "DIO"),
    (14, "DOUT"),
    (13, "Fast"),
)


@dataclass(frozen=True)
class Partition:
    """One entry of a flash partition table."""

    label: str
    type: int
    subtype: int
    address: int
    size: int
    encrypted: bool = False


def chip_id_24(efuse_mac: int) -> int:
    """24-bit chip id: the top three bytes of the 48-bit MAC, byte order reversed."""
    return sum(((efuse_mac >> (40 - shift)) & 0xFF) << shift for shift in (0, 8, 16))


def reset_reason_text(reason: int) -> str:
    """Description of a reset reason code."""
    return _RESET_REASONS.get(reason, f"Error code:{reason}")


def flash_chip_mode(spi_ctrl: int) -> str:
    """Flash read mode encoded in the SPI control register value."""
    return next((name for bit, name in _FLASH_MODES if spi_ctrl & (1 << bit)), "Slow")


def _partition_line(part: Partition) -> str:
    return (
        f"{part.label:>10}:{part.size // 1024:5d}KB "
        f"({part.type:02X}-{part.subtype:02X})@{part.address:06X}"
    )


def format_partition_table(
    partitions: Iterable[Partition], boot_address: int, running_address: int
) -> str:
    """Listing of code then data partitions; code lines mark boot (b) and running (r)."""
    parts = list(partitions)
    lines = ["-----Flash--Size---(Code)-@Addr-----\r\n"]
    lines.extend(
        _partition_line(part)
        + " "
        + ("b" if part.address == boot_address else " ")
        + ("r" if part.address == running_address else " ")
        + "\r\n"
        for part in parts
        if part.type == PARTITION_TYPE_APP
    )
    lines.append("-----Flash--Size---(Data)-@Addr-----\r\n")
    lines.extend(
        _partition_line(part) + "\r\n" for part in parts if part.type == PARTITION_TYPE_DATA
    )
    return "".join(lines)