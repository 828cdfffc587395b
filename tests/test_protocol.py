import pytest

from espnowsync.messagepack import MessagePack
from espnowsync.protocol import (
    MESSAGE_SIZE,
    EspNowMessage,
    MsgType,
    format_message_pack,
    int_to_mac,
    mac_to_int,
)


def test_message_round_trip():
    message = EspNowMessage(MsgType.HELLO, 0x0A0B0C0D0E0F, 123456, -42)
    restored = EspNowMessage.unpack(message.pack())
    assert restored == message
    assert restored.msg_type is MsgType.HELLO


def test_first_byte_is_message_type():
    data = EspNowMessage(MsgType.ECHO_ACK, 1, 2, 3).pack()
    assert data[0] == MsgType.ECHO_ACK
    assert len(data) == MESSAGE_SIZE


def test_packed_size_matches_struct_layout():
    data = EspNowMessage(MsgType.HELLO, 0x020000AABBCC, 1000, -10).pack()
    assert len(data) == 24


def test_unknown_type_kept_as_int():
    data = EspNowMessage(0x42, 7, 8, 9).pack()
    restored = EspNowMessage.unpack(data)
    assert restored.msg_type == 0x42
    assert not isinstance(restored.msg_type, MsgType)


def test_unpack_wrong_size_raises():
    with pytest.raises(ValueError):
        EspNowMessage.unpack(b"\x10" * (MESSAGE_SIZE - 1))


def test_pack_out_of_range_raises():
    with pytest.raises(ValueError):
        EspNowMessage(MsgType.HELLO, 0, 0, 300).pack()


def test_mac_round_trip():
    mac = bytes([0x02, 0x00, 0x00, 0xAA, 0xBB, 0xCC])
    value = mac_to_int(mac)
    assert int_to_mac(value) == mac
    assert value >> 24 == 0x020000
    assert value & 0xFFFFFF == 0xAABBCC


def test_mac_errors():
    with pytest.raises(ValueError):
        mac_to_int(b"\x01\x02")
    with pytest.raises(ValueError):
        int_to_mac(1 << 48)


def test_format_message_pack_lists_bytes_and_values():
    pack = MessagePack()
    pack.add_long(0xABC)
    pack.add_float(25.5)
    pack.add_boolean(True)
    text = format_message_pack(pack)
    first, second, rest = text.split("\n")
    assert rest == ""
    assert first.startswith("myMessagePack:")
    assert len(first[len("myMessagePack:"):].split()) == len(pack)
    assert second == "( ABC 25.50 1)"


def test_format_message_pack_empty():
    text = format_message_pack(MessagePack())
    assert text.endswith("()\n")