"""Contact (ICC/SAM) and contactless (PICC) card reader access."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar

from .errors import AcsError
from .helper import get_bytes, hex_dump

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

_STATUS_OK = 0x9000
_PPS_FIDI = 0x95
_MAX_COMMAND_LENGTH = 0xFF


class CardReader(enum.IntFlag):
    """The card interfaces of the terminal."""

    PICC = 0x01
    ICC = 0x02
    ICC_SAM1 = 0x04
    ICC_SAM2 = 0x08


class ReturnStatus(enum.IntEnum):
    """Result codes of reader operations."""

    STATUS_SUCCESS = 0
    ERROR_OPEN_PICC = -1
    ERROR_OPEN_ICC = -2
    ERROR_OPEN_SAM1 = -3
    ERROR_OPEN_SAM2 = -4
    ERROR_POWER_ON_PICC = -5
    ERROR_POWER_ON_ICC = -6
    ERROR_POWER_ON_SAM1 = -7
    ERROR_POWER_ON_SAM2 = -8
    ERROR_TRANSMIT_PICC = -9
    ERROR_TRANSMIT_ICC = -10
    ERROR_TRANSMIT_SAM1 = -11
    ERROR_TRANSMIT_SAM2 = -12
    ERROR_POWER_OFF_PICC = -13
    ERROR_POWER_OFF_ICC = -14
    ERROR_POWER_OFF_SAM1 = -15
    ERROR_POWER_OFF_SAM2 = -16
    ERROR_CLOSE_PICC = -17
    ERROR_CLOSE_ICC = -18
    ERROR_CLOSE_SAM1 = -19
    ERROR_CLOSE_SAM2 = -20
    ERROR_GENERAL = -21


class PollingStatus(enum.IntEnum):
    """Outcomes of polling a reader for a card."""

    CARD_PRESENT = 0
    NO_CARD_PICC = -1
    NO_CARD_ICC = -2
    NO_CARD_SAM1 = -3
    NO_CARD_SAM2 = -4
    UNKNOWN = -5


@dataclass(frozen=True)
class ApduResponse:
    """A card's answer: the raw bytes and the status word taken from them."""

    data: bytes = b""
    status_word: int = 0


@dataclass(frozen=True)
class ParsedApduResponse:
    """A command and its answer as hex text, with whether it succeeded."""

    request_apdu: str
    is_valid: bool
    response_apdu: str


class ReaderError(AcsError):
    """A reader operation failed with the given result code."""

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message or f"reader error {code}", code)

    @property
    def code(self) -> int:
        """The result code of the failed operation."""
        return self.number


class ReaderBackend(Protocol):
    """The terminal's low-level card interface.

    Every method reports failure by raising :class:`ReaderError` (or
    :class:`OSError`).  ``slot`` is one of ``CardReader.ICC``,
    ``CardReader.ICC_SAM1`` and ``CardReader.ICC_SAM2``.
    """

    def picc_open(self) -> None: ...

    def picc_close(self) -> None: ...

    def picc_field_ctrl(self, on: bool) -> None: ...

    def picc_power_on(self) -> bytes: ...

    def picc_power_off(self) -> None: ...

    def picc_poll_card(self) -> None: ...

    def picc_transmit(self, command: bytes) -> bytes: ...

    def icc_open(self) -> None: ...

    def icc_close(self) -> None: ...

    def icc_power_on(self, slot: CardReader) -> bytes: ...

    def icc_pps_set(self, slot: CardReader, fidi: int) -> None: ...

    def icc_power_off(self, slot: CardReader) -> None: ...

    def icc_slot_check(self, slot: CardReader) -> None: ...

    def icc_apdu_transmit(self, slot: CardReader, command: bytes) -> bytes: ...


def parse_response_plus(response: bytes, mplus: bool) -> ApduResponse:
    """Read a Mifare Plus answer, whose first byte is the status."""
    response = bytes(response)
    logger.debug("response length: %d, data: %s", len(response), response.hex())
    if mplus and len(response) >= 1:
        result = ApduResponse(response, response[0] << 8)
    else:
        logger.debug("invalid response length: %d", len(response))
        result = ApduResponse()
    logger.debug("status word: %X", result.status_word)
    return result


def parse_response_classic(response: bytes, mclassic: bool) -> ApduResponse:
    """Read an ISO 7816 answer, whose last two bytes are the status word."""
    response = bytes(response)
    logger.debug("response length: %d, data: %s", len(response), response.hex())
    if mclassic and len(response) >= 2:
        result = ApduResponse(response, int.from_bytes(response[-2:], "big"))
    else:
        logger.debug("invalid response length: %d", len(response))
        result = ApduResponse()
    logger.debug("status word: %X", result.status_word)
    return result


def to_parsed_apdu_response(response: ApduResponse, apdu: str) -> ParsedApduResponse:
    """Pair a command with its answer; the answer is valid on status 9000."""
    is_valid = response.status_word == _STATUS_OK
    logger.debug("status word %X, valid: %s", response.status_word, is_valid)
    return ParsedApduResponse(apdu, is_valid, response.data.hex())


_SLOTS = (CardReader.ICC, CardReader.ICC_SAM1, CardReader.ICC_SAM2)


class AcsReader:
    """Opens, powers and talks to the card readers through a backend."""

    def __init__(self, backend: ReaderBackend) -> None:
        self._backend = backend
        self._status_icc = 0
        self._status_picc = 0

    @staticmethod
    def _attempt(code: int, message: str, action: Callable[..., _T], *args) -> _T:
        try:
            return action(*args)
        except (ReaderError, OSError) as exc:
            raise ReaderError(code, message) from exc

    @staticmethod
    def _single(reader: int) -> CardReader:
        try:
            single = CardReader(reader)
        except ValueError:
            single = None
        if single is None or single not in (CardReader.PICC, *_SLOTS):
            raise ReaderError(255, f"unknown card reader {reader!r}")
        return single

    def open(self, reader: int) -> None:
        """Open the readers named in ``reader``; the PICC field is switched on."""
        flags = CardReader(reader)
        if CardReader.PICC in flags and not self._status_picc:
            self._attempt(1, "open PICC failed", self._backend.picc_open)
            self._status_picc = 1
            self._attempt(2, "PICC field on failed", self._backend.picc_field_ctrl, True)
        if CardReader.ICC in flags and not self._status_icc:
            self._attempt(1, "open ICC failed", self._backend.icc_open)
            self._status_icc = 1

    def close(self, reader: int) -> None:
        """Close the open readers named in ``reader``."""
        flags = CardReader(reader)
        if self._status_picc and CardReader.PICC in flags:
            self._attempt(1, "PICC field off failed", self._backend.picc_field_ctrl, False)
            self._status_picc = 0
            self._attempt(2, "close PICC failed", self._backend.picc_close)
        if self._status_icc and CardReader.ICC in flags:
            self._status_icc = 0
            self._attempt(3, "close ICC failed", self._backend.icc_close)

    def power_on(self, reader: int) -> bytes:
        """Power the card in ``reader`` and return its answer to reset."""
        single = self._single(reader)
        if single is CardReader.PICC:
            atr = bytes(self._attempt(1, "PICC power on failed", self._backend.picc_power_on))
            self._status_picc = 1
            return atr
        power_code, pps_code = {
            CardReader.ICC: (2, 3),
            CardReader.ICC_SAM1: (4, 5),
            CardReader.ICC_SAM2: (6, 7),
        }[single]
        atr = self._attempt(power_code, "power on failed", self._backend.icc_power_on, single)
        # Contact cards report an ATR of zeros of the received length.
        blank = bytes(len(atr))
        self._attempt(pps_code, "PPS failed", self._backend.icc_pps_set, single, _PPS_FIDI)
        return blank

    def power_off(self, reader: int) -> None:
        """Remove power from the card in ``reader``."""
        single = self._single(reader)
        if single is CardReader.PICC:
            self._attempt(1, "PICC power off failed", self._backend.picc_power_off)
            return
        code = {CardReader.ICC: 2, CardReader.ICC_SAM1: 3, CardReader.ICC_SAM2: 4}[single]
        self._attempt(code, "power off failed", self._backend.icc_power_off, single)

    def poll(self, reader: int, poll_type: int) -> None:
        """Look for a card; contact slots raise when no card is present.

        For the PICC, ``poll_type`` 1 polls for a type A card and a failed
        poll is only logged; any other type does nothing.
        """
        single = self._single(reader)
        if single is CardReader.PICC:
            if poll_type == 1:
                try:
                    self._backend.picc_poll_card()
                except (ReaderError, OSError) as exc:
                    logger.debug("PICC poll failed: %s", exc)
            return
        self._attempt(1, "no card present", self._backend.icc_slot_check, single)

    def _send(self, single: CardReader, command: bytes) -> bytes:
        try:
            if single is CardReader.PICC:
                response = self._backend.picc_transmit(command)
            else:
                response = self._backend.icc_apdu_transmit(single, command)
        except ReaderError:
            raise
        except OSError as exc:
            code = exc.errno or ReturnStatus.ERROR_GENERAL
            raise ReaderError(code, "transmit failed") from exc
        return bytes(response)

    def transmit(self, reader: int, command: bytes) -> bytes:
        """Send ``command`` to the card in ``reader`` and return its answer."""
        single = self._single(reader)
        command = bytes(command)
        if len(command) > _MAX_COMMAND_LENGTH:
            raise ValueError("command longer than 255 bytes")
        hex_dump(command)
        response = self._send(single, command)
        hex_dump(response)
        return response

    def custom_transmit(self, reader: int, command_hex: str) -> bytes:
        """Send a command given as hex text and return the card's answer."""
        single = self._single(reader)
        command = get_bytes("".join(command_hex.split()))
        response = self._send(single, command)
        logger.debug("response: %s", response.hex())
        if single in (CardReader.ICC_SAM1, CardReader.ICC_SAM2):
            response = response[: len(response) & 0xFF]
        return response

    def status_icc(self) -> int:
        """1 while the contact reader is open, else 0."""
        return self._status_icc

    def status_picc(self) -> int:
        """1 while the contactless reader is open or powered, else 0."""
        return self._status_picc