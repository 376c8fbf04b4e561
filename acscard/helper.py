"""Byte and number conversions used when building card commands."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_SUPPORTED_LENGTHS = (2, 3, 4)
_HEX_CHARACTERS = frozenset("0123456789ABCDEFabcdef")


def _check_length(length: int) -> None:
    if length not in _SUPPORTED_LENGTHS:
        raise ValueError(f"unsupported length {length}; expected 2, 3 or 4")


def _check_value(value: int) -> None:
    if value < 0:
        raise ValueError("value must not be negative")


def convert_uint64_to_bcd_little_endian(value: int, length: int) -> bytes:
    """Return the low ``length`` bytes of ``value``, least significant first."""
    _check_length(length)
    _check_value(value)
    return (value & ((1 << (8 * length)) - 1)).to_bytes(length, "little")


def convert_uint64_to_bcd_big_endian(value: int, length: int) -> bytes:
    """Return the low ``length`` bytes of ``value``, most significant first."""
    _check_length(length)
    _check_value(value)
    return (value & ((1 << (8 * length)) - 1)).to_bytes(length, "big")


def convert_bcd_big_endian_to_uint64(data: bytes) -> int:
    """Read two to four bytes, most significant first, as an unsigned number."""
    data = bytes(data)
    _check_length(len(data))
    return int.from_bytes(data, "big")


def convert_bcd_little_endian_to_uint64(data: bytes) -> int:
    """Read two to four bytes, least significant first, as an unsigned number."""
    data = bytes(data)
    _check_length(len(data))
    return int.from_bytes(data, "little")


def to_bcd(decimal: int) -> int:
    """Pack a number from 0 to 99 into one packed-BCD byte."""
    if not 0 <= decimal <= 99:
        raise ValueError(f"{decimal} does not fit in one BCD byte")
    tens, units = divmod(decimal, 10)
    return (tens << 4) | units


def get_bytes(text: str) -> bytes:
    """Decode a string of hexadecimal digit pairs into bytes."""
    if len(text) % 2:
        raise ValueError("hex string must have an even number of digits")
    bad = next((c for c in text if not is_valid_hex_character(c)), None)
    if bad is not None:
        raise ValueError(f"{bad!r} is not a hexadecimal digit")
    return bytes(int(text[i:i + 2], 16) for i in range(0, len(text), 2))


def is_valid_hex_value(number: int) -> bool:
    """Tell whether ``number`` fits in one byte, i.e. two hex digits."""
    return 0 <= number <= 0xFF


def is_valid_hex_character(character: str) -> bool:
    """Tell whether ``character`` is a single hexadecimal digit."""
    return len(character) == 1 and character in _HEX_CHARACTERS


def hex_dump(data: bytes) -> str:
    """Return ``data`` as lower-case hex and log it at debug level."""
    text = bytes(data).hex()
    logger.debug("%s", text)
    return text