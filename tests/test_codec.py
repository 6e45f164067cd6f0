import pytest

from oracle_relay.utils.codec import decode_big_endian, encode_big_endian, to_hex, to_uint32, to_uint64


@pytest.mark.parametrize("value", [0, 1, 255, 256, 27000, 2 ** 31, 2 ** 32 - 1])
def test_uint32_round_trip(value):
    encoded = encode_big_endian(value, 4)
    assert len(encoded) == 4
    assert decode_big_endian(encoded) == value


@pytest.mark.parametrize("value", [0, 1_700_000_000, 2 ** 63, 2 ** 64 - 1])
def test_uint64_round_trip(value):
    assert decode_big_endian(encode_big_endian(value, 8)) == value


def test_encoding_is_big_endian():
    assert encode_big_endian(0x01020304, 4) == b"\x01\x02\x03\x04"
    assert encode_big_endian(1, 8) == b"\x00" * 7 + b"\x01"


def test_overflow_wraps():
    assert encode_big_endian(2 ** 32 + 5, 4) == b"\x00\x00\x00\x05"
    assert to_uint32(2 ** 32 + 27000) == 27000


def test_negative_rejected():
    with pytest.raises(ValueError):
        encode_big_endian(-1, 4)


def test_decode_accepts_lists():
    assert decode_big_endian([0x00, 0x01, 0x00]) == 256


def test_to_hex():
    assert to_hex([0x00, 0xFF, 0x1A]) == "00ff1a"
    assert to_hex(b"") == ""


def test_truncating_helpers():
    assert to_uint32(27000.5) == 27000
    assert to_uint32("61.99") == 61
    assert to_uint64(1_700_000_000) == 1_700_000_000
