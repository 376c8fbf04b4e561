"""Mifare Classic card operations over the contactless reader."""

from __future__ import annotations

import enum
import logging

from .errors import AcsError
from .helper import convert_bcd_big_endian_to_uint64, convert_uint64_to_bcd_big_endian
from .reader import AcsReader, CardReader, ReaderError

logger = logging.getLogger(__name__)

MAXIMUM_VALUE = 4294967295

_SUCCESS = b"\x90\x00"
_KEY_LENGTH = 6
_MAX_BLOCK_DATA = 0xFF - 5


class KeyType(enum.IntEnum):
    """Which of a sector's two keys to authenticate with."""

    A = 0x60
    B = 0x61


class KeyStore(enum.IntEnum):
    """Reader memory slots that hold a loaded key."""

    STORE_0 = 0x00
    STORE_1 = 0x01


class CardType(enum.IntEnum):
    """Kinds of Mifare card told apart by the answer to reset."""

    UNKNOWN = 0x00
    MIFARE_1K = 0x01
    MIFARE_4K = 0x02
    MIFARE_PLUS = 0x20


def _check_byte(name: str, number: int) -> int:
    if not 0 <= number <= 0xFF:
        raise ValueError(f"{name} must be between 0 and 255")
    return number


def _check_value(value: int) -> int:
    if not 0 <= value <= MAXIMUM_VALUE:
        raise ValueError(f"value must be between 0 and {MAXIMUM_VALUE}")
    return value


class MifareClassic:
    """Reads and writes Mifare Classic cards through an :class:`AcsReader`.

    Every failed operation raises :class:`AcsError`; when the card answered
    with an unexpected status, ``status_word`` holds its two bytes.
    """

    def __init__(self, reader: AcsReader) -> None:
        self._reader = reader
        self.card_type = CardType.UNKNOWN

    def _transmit(self, command: bytes, message: str) -> bytes:
        try:
            return self._reader.transmit(CardReader.PICC, command)
        except ReaderError as exc:
            raise AcsError(message, exc.code) from exc

    @staticmethod
    def _expect_leading_success(response: bytes, message: str) -> None:
        if len(response) < 2:
            raise AcsError(message)
        if response[:2] != _SUCCESS:
            raise AcsError(message, 0, response[:2])

    @staticmethod
    def _expect_trailing_success(response: bytes, message: str) -> bytes:
        if len(response) < 2:
            raise AcsError(message)
        if response[-2:] != _SUCCESS:
            raise AcsError(message, 0, response[-2:])
        return response[:-2]

    def open_reader(self) -> None:
        """Open the contactless reader."""
        try:
            self._reader.open(CardReader.PICC)
        except ReaderError as exc:
            raise AcsError("Open PICC failed", exc.code) from exc

    def close_reader(self) -> None:
        """Close the contactless reader; failures are only logged."""
        try:
            self._reader.close(CardReader.PICC)
        except ReaderError as exc:
            logger.debug("closing PICC failed: %s", exc)

    def connect(self) -> CardType:
        """Power the card, check its answer to reset and return its type."""
        try:
            atr = self._reader.power_on(CardReader.PICC)
        except ReaderError as exc:
            raise AcsError("Power On PICC failed", exc.code) from exc
        logger.debug("ATR: %s", atr.hex())

        if len(atr) < 15 or atr[13] != 0x00 or atr[14] not in (0x01, 0x02):
            raise AcsError("Invalid Mifare Card")

        self.card_type = CardType.MIFARE_1K if atr[14] == 0x01 else CardType.MIFARE_4K
        return self.card_type

    def disconnect(self) -> None:
        """Remove power from the card; failures are only logged."""
        try:
            self._reader.power_off(CardReader.PICC)
        except ReaderError as exc:
            logger.debug("PICC power off failed: %s", exc)

    def load_key(self, key: bytes, key_store: KeyStore) -> None:
        """Load a six-byte key into one of the reader's key slots."""
        key = bytes(key)
        if len(key) != _KEY_LENGTH:
            raise ValueError("a Mifare key is exactly six bytes")
        store = KeyStore(key_store)
        command = bytes((0xFF, 0x82, 0x00, store, _KEY_LENGTH)) + key
        message = "Load key failed"
        response = self._transmit(command, message)
        if len(response) != 2:
            raise AcsError(message)
        self._expect_leading_success(response, message)

    def authenticate(self, key_type: KeyType, block_number: int, key_store: KeyStore) -> None:
        """Authenticate ``block_number`` with the key held in ``key_store``."""
        command = bytes(
            (
                0xFF, 0x86, 0x00, 0x00, 0x05, 0x01, 0x00,
                _check_byte("block number", block_number),
                KeyType(key_type),
                KeyStore(key_store),
            )
        )
        message = "Authentication failed"
        response = self._transmit(command, message)
        if len(response) != 2:
            raise AcsError(message)
        self._expect_leading_success(response, message)

    def read_block(self, block_number: int, length: int) -> bytes:
        """Read ``length`` bytes from a block."""
        command = bytes(
            (
                0xFF, 0xB0, 0x00,
                _check_byte("block number", block_number),
                _check_byte("length", length),
            )
        )
        message = "Read block failed"
        response = self._transmit(command, message)
        return self._expect_trailing_success(response, message)

    def update_block(self, block_number: int, data: bytes) -> None:
        """Write ``data`` to a block."""
        data = bytes(data)
        if len(data) > _MAX_BLOCK_DATA:
            raise ValueError(f"block data longer than {_MAX_BLOCK_DATA} bytes")
        command = bytes(
            (0xFF, 0xD6, 0x00, _check_byte("block number", block_number), len(data))
        ) + data
        message = "Update block failed"
        response = self._transmit(command, message)
        self._expect_leading_success(response, message)

    def _value_operation(self, operation: int, block_number: int, value: int, message: str) -> None:
        command = bytes(
            (0xFF, 0xD7, 0x00, _check_byte("block number", block_number), 0x05, operation)
        ) + convert_uint64_to_bcd_big_endian(_check_value(value), 4)
        response = self._transmit(command, message)
        self._expect_leading_success(response, message)

    def store_value(self, block_number: int, value: int) -> None:
        """Turn a block into a value block holding ``value``."""
        self._value_operation(0x00, block_number, value, "Store value failed")

    def increment_value(self, block_number: int, value: int) -> None:
        """Add ``value`` to a value block."""
        self._value_operation(0x01, block_number, value, "Increment value failed")

    def decrement_value(self, block_number: int, value: int) -> None:
        """Subtract ``value`` from a value block."""
        self._value_operation(0x02, block_number, value, "Decrement value failed")

    def read_value(self, block_number: int) -> int:
        """Return the number held in a value block."""
        command = bytes((0xFF, 0xB1, 0x00, _check_byte("block number", block_number), 0x04))
        message = "Read value failed"
        response = self._transmit(command, message)
        data = self._expect_trailing_success(response, message)
        if len(data) < 4:
            raise AcsError(message)
        return convert_bcd_big_endian_to_uint64(data[:4])

    def restore_value(self, source_block: int, target_block: int) -> None:
        """Copy the value block ``source_block`` to ``target_block``."""
        command = bytes(
            (
                0xFF, 0xD7, 0x00,
                _check_byte("source block", source_block),
                0x02, 0x03,
                _check_byte("target block", target_block),
            )
        )
        message = "Restore value failed"
        response = self._transmit(command, message)
        self._expect_leading_success(response, message)