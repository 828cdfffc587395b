from espnowsync.chipinfo import (
    PARTITION_TYPE_APP,
    PARTITION_TYPE_DATA,
    Partition,
    chip_id_24,
    flash_chip_mode,
    format_partition_table,
    reset_reason_text,
)


def test_chip_id_takes_top_byte_first():
    assert chip_id_24(0xAB << 40) == 0xAB


def test_chip_id_ignores_low_bytes_and_fits_24_bits():
    base = 0x123456 << 24
    assert chip_id_24(base) == chip_id_24(base | 0xFFFFFF)
    assert chip_id_24((1 << 48) - 1) == 0xFFFFFF


def test_reset_reasons():
    assert reset_reason_text(3) == "Software reset digital core"
    assert reset_reason_text(22) == "USB_JTAG_CHIP_RESET"
    assert reset_reason_text(2) == "Error code:2"


def test_flash_modes():
    assert flash_chip_mode(1 << 24) == "QIO"
    assert flash_chip_mode(1 << 20) == "QOUT"
    assert flash_chip_mode(1 << 23) == "DIO"
    assert flash_chip_mode(1 << 14) == "DOUT"
    assert flash_chip_mode(1 << 13) == "Fast"
    assert flash_chip_mode(0) == "Slow"


def test_flash_mode_precedence():
    assert flash_chip_mode((1 << 24) | (1 << 13)) == "QIO"
    assert flash_chip_mode((1 << 23) | (1 << 20)) == "QOUT"


def test_partition_table_layout():
    parts = [
        Partition("nvs", PARTITION_TYPE_DATA, 0x02, 0x9000, 0x5000),
        Partition("app0", PARTITION_TYPE_APP, 0x10, 0x10000, 0x140000),
        Partition("app1", PARTITION_TYPE_APP, 0x11, 0x150000, 0x140000),
    ]
    text = format_partition_table(parts, boot_address=0x10000, running_address=0x150000)
    lines = text.split("\r\n")
    assert lines[0] == "-----Flash--Size---(Code)-@Addr-----"
    assert lines[1].strip().startswith("app0:")
    assert lines[1].endswith("@010000 b ")
    assert lines[2].endswith("@150000  r")
    assert lines[3] == "-----Flash--Size---(Data)-@Addr-----"
    assert lines[4].strip().startswith("nvs:")
    assert lines[4].endswith("(01-02)@009000")
    assert lines[5] == ""
    assert len(lines[1].split(":")[0]) == 10


def test_partition_table_empty():
    text = format_partition_table([], 0, 0)
    assert text == (
        "-----Flash--Size---(Code)-@Addr-----\r\n"
        "-----Flash--Size---(Data)-@Addr-----\r\n"
    )