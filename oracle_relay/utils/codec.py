from typing import Iterable

from oracle_relay.constants import PRICE_WIDTH, TIMESTAMP_WIDTH


def encode_big_endian(value: int, width: int) -> bytes:
    """
    Pack a non-negative integer into `width` bytes, most significant first.
    Values that do not fit wrap modulo 256**width, the same way the
    consensus application's legacy relay packs them.
    """
    if value < 0:
        raise ValueError(f"cannot encode negative value {value}")
    out = bytearray(width)
    for i in range(width - 1, -1, -1):
        out[i] = value & 0xFF
        value >>= 8
    return bytes(out)


def decode_big_endian(data: Iterable[int]) -> int:
    value = 0
    for byte in data:
        value = value * 256 + byte
    return value


def to_hex(data: Iterable[int]) -> str:
    return "".join(f"{byte & 0xFF:02x}" for byte in data)


def to_uint32(number: float | int | str) -> int:
    """Truncate to an integer and run it through the 4-byte price encoding."""
    return decode_big_endian(encode_big_endian(int(float(number)), PRICE_WIDTH))


def to_uint64(number: float | int | str) -> int:
    return decode_big_endian(encode_big_endian(int(float(number)), TIMESTAMP_WIDTH))
