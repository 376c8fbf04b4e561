import pytest

from acscard.errors import AcsError
from acscard.reader import (
    AcsReader,
    ApduResponse,
    CardReader,
    ParsedApduResponse,
    PollingStatus,
    ReaderError,
    ReturnStatus,
    parse_response_classic,
    parse_response_plus,
    to_parsed_apdu_response,
)

NATIVE_CODE = -7


class FakeBackend:
    def __init__(self, fail=(), atr=b"\x3b\x8f\x80\x01", response=b"\x90\x00"):
        self.fail = set(fail)
        self.atr = atr
        self.response = response
        self.calls = []

    def _do(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise ReaderError(NATIVE_CODE, name)

    def picc_open(self):
        self._do("picc_open")

    def picc_close(self):
        self._do("picc_close")

    def picc_field_ctrl(self, on):
        self._do("picc_field_ctrl", on)

    def picc_power_on(self):
        self._do("picc_power_on")
        return self.atr

    def picc_power_off(self):
        self._do("picc_power_off")

    def picc_poll_card(self):
        self._do("picc_poll_card")

    def picc_transmit(self, command):
        self._do("picc_transmit", command)
        return self.response

    def icc_open(self):
        self._do("icc_open")

    def icc_close(self):
        self._do("icc_close")

    def icc_power_on(self, slot):
        self._do("icc_power_on", slot)
        return self.atr

    def icc_pps_set(self, slot, fidi):
        self._do("icc_pps_set", slot, fidi)

    def icc_power_off(self, slot):
        self._do("icc_power_off", slot)

    def icc_slot_check(self, slot):
        self._do("icc_slot_check", slot)

    def icc_apdu_transmit(self, slot, command):
        self._do("icc_apdu_transmit", slot, command)
        return self.response


def test_open_picc_switches_field_on():
    backend = FakeBackend()
    reader = AcsReader(backend)
    reader.open(CardReader.PICC)
    assert backend.calls == [("picc_open",), ("picc_field_ctrl", True)]
    assert reader.status_picc() == 1
    assert reader.status_icc() == 0


def test_open_twice_does_not_reopen():
    backend = FakeBackend()
    reader = AcsReader(backend)
    reader.open(CardReader.PICC | CardReader.ICC)
    reader.open(CardReader.PICC | CardReader.ICC)
    assert [c[0] for c in backend.calls].count("picc_open") == 1
    assert [c[0] for c in backend.calls].count("icc_open") == 1
    assert reader.status_icc() == 1


@pytest.mark.parametrize(
    "failing, reader_flag, code",
    [
        ("picc_open", CardReader.PICC, 1),
        ("picc_field_ctrl", CardReader.PICC, 2),
        ("icc_open", CardReader.ICC, 1),
    ],
)
def test_open_failure_codes(failing, reader_flag, code):
    reader = AcsReader(FakeBackend(fail={failing}))
    with pytest.raises(ReaderError) as info:
        reader.open(reader_flag)
    assert info.value.code == code


def test_open_field_failure_leaves_picc_marked_open():
    reader = AcsReader(FakeBackend(fail={"picc_field_ctrl"}))
    with pytest.raises(ReaderError):
        reader.open(CardReader.PICC)
    assert reader.status_picc() == 1


def test_close_resets_status():
    backend = FakeBackend()
    reader = AcsReader(backend)
    reader.open(CardReader.PICC | CardReader.ICC)
    reader.close(CardReader.PICC | CardReader.ICC)
    assert reader.status_picc() == 0
    assert reader.status_icc() == 0
    assert ("picc_field_ctrl", False) in backend.calls
    assert ("icc_close",) in backend.calls


def test_close_unopened_does_nothing():
    backend = FakeBackend()
    AcsReader(backend).close(CardReader.PICC | CardReader.ICC)
    assert backend.calls == []


@pytest.mark.parametrize(
    "failing, reader_flag, code",
    [
        ("picc_field_ctrl", CardReader.PICC, 1),
        ("picc_close", CardReader.PICC, 2),
        ("icc_close", CardReader.ICC, 3),
    ],
)
def test_close_failure_codes(failing, reader_flag, code):
    backend = FakeBackend()
    reader = AcsReader(backend)
    reader.open(reader_flag)
    backend.fail.add(failing)
    with pytest.raises(ReaderError) as info:
        reader.close(reader_flag)
    assert info.value.code == code


def test_power_on_picc_returns_atr():
    backend = FakeBackend(atr=b"\x3b\x01\x02")
    reader = AcsReader(backend)
    assert reader.power_on(CardReader.PICC) == b"\x3b\x01\x02"
    assert reader.status_picc() == 1


@pytest.mark.parametrize("slot", [CardReader.ICC, CardReader.ICC_SAM1, CardReader.ICC_SAM2])
def test_power_on_contact_sets_pps_and_blanks_atr(slot):
    backend = FakeBackend(atr=b"\x3b\x01\x02")
    atr = AcsReader(backend).power_on(slot)
    assert atr == bytes(3)
    assert ("icc_pps_set", slot, 0x95) in backend.calls


@pytest.mark.parametrize(
    "slot, power_code, pps_code",
    [
        (CardReader.ICC, 2, 3),
        (CardReader.ICC_SAM1, 4, 5),
        (CardReader.ICC_SAM2, 6, 7),
    ],
)
def test_power_on_failure_codes(slot, power_code, pps_code):
    with pytest.raises(ReaderError) as info:
        AcsReader(FakeBackend(fail={"icc_power_on"})).power_on(slot)
    assert info.value.code == power_code
    with pytest.raises(ReaderError) as info:
        AcsReader(FakeBackend(fail={"icc_pps_set"})).power_on(slot)
    assert info.value.code == pps_code


def test_power_on_unknown_reader():
    with pytest.raises(ReaderError) as info:
        AcsReader(FakeBackend()).power_on(CardReader.PICC | CardReader.ICC)
    assert info.value.code == 255


@pytest.mark.parametrize(
    "reader_flag, failing, code",
    [
        (CardReader.PICC, "picc_power_off", 1),
        (CardReader.ICC, "icc_power_off", 2),
        (CardReader.ICC_SAM1, "icc_power_off", 3),
        (CardReader.ICC_SAM2, "icc_power_off", 4),
    ],
)
def test_power_off_failure_codes(reader_flag, failing, code):
    with pytest.raises(ReaderError) as info:
        AcsReader(FakeBackend(fail={failing})).power_off(reader_flag)
    assert info.value.code == code


def test_power_off_unknown_reader():
    with pytest.raises(ReaderError) as info:
        AcsReader(FakeBackend()).power_off(0x10)
    assert info.value.code == 255


def test_poll_picc_ignores_failure():
    backend = FakeBackend(fail={"picc_poll_card"})
    AcsReader(backend).poll(CardReader.PICC, 1)
    assert backend.calls == [("picc_poll_card",)]


def test_poll_picc_type_zero_does_nothing():
    backend = FakeBackend()
    AcsReader(backend).poll(CardReader.PICC, 0)
    assert backend.calls == []


def test_poll_contact_without_card_raises():
    with pytest.raises(ReaderError) as info:
        AcsReader(FakeBackend(fail={"icc_slot_check"})).poll(CardReader.ICC_SAM1, 0)
    assert info.value.code == 1


def test_poll_contact_checks_slot():
    backend = FakeBackend()
    AcsReader(backend).poll(CardReader.ICC_SAM2, 0)
    assert backend.calls == [("icc_slot_check", CardReader.ICC_SAM2)]


def test_transmit_picc_and_icc():
    backend = FakeBackend(response=b"\x01\x02\x90\x00")
    reader = AcsReader(backend)
    command = b"\xff\xb0\x00\x04\x10"
    assert reader.transmit(CardReader.PICC, command) == b"\x01\x02\x90\x00"
    assert reader.transmit(CardReader.ICC, command) == b"\x01\x02\x90\x00"
    assert backend.calls[0] == ("picc_transmit", command)
    assert backend.calls[1] == ("icc_apdu_transmit", CardReader.ICC, command)


def test_transmit_propagates_native_code():
    with pytest.raises(ReaderError) as info:
        AcsReader(FakeBackend(fail={"picc_transmit"})).transmit(CardReader.PICC, b"\x00")
    assert info.value.code == NATIVE_CODE


def test_transmit_rejects_long_command():
    with pytest.raises(ValueError):
        AcsReader(FakeBackend()).transmit(CardReader.PICC, bytes(256))


def test_custom_transmit_decodes_hex():
    backend = FakeBackend()
    response = AcsReader(backend).custom_transmit(CardReader.PICC, "FFCA0000 00")
    assert response == b"\x90\x00"
    assert backend.calls == [("picc_transmit", b"\xff\xca\x00\x00\x00")]


def test_custom_transmit_bad_hex():
    with pytest.raises(ValueError):
        AcsReader(FakeBackend()).custom_transmit(CardReader.ICC, "FFZ0")


def test_custom_transmit_sam_truncates_length():
    backend = FakeBackend(response=bytes(300))
    response = AcsReader(backend).custom_transmit(CardReader.ICC_SAM1, "00")
    assert len(response) == 300 & 0xFF


def test_parse_response_classic():
    result = parse_response_classic(b"\x01\x02\x90\x00", True)
    assert result == ApduResponse(b"\x01\x02\x90\x00", 0x9000)


def test_parse_response_classic_too_short():
    assert parse_response_classic(b"\x90", True) == ApduResponse()
    assert parse_response_classic(b"\x90\x00", False) == ApduResponse()


def test_parse_response_plus():
    result = parse_response_plus(b"\x90\xaa\xbb", True)
    assert result.status_word == 0x9000
    assert result.data == b"\x90\xaa\xbb"
    assert parse_response_plus(b"", True) == ApduResponse()


def test_to_parsed_apdu_response_valid():
    parsed = to_parsed_apdu_response(ApduResponse(b"\x12\x90\x00", 0x9000), "FFCA000000")
    assert parsed == ParsedApduResponse("FFCA000000", True, "129000")


def test_to_parsed_apdu_response_invalid():
    response = parse_response_classic(b"\x63\x00", True)
    parsed = to_parsed_apdu_response(response, "FF")
    assert parsed.is_valid is False
    assert parsed.response_apdu == b"\x63\x00".hex()


def test_reader_error_is_acs_error():
    error = ReaderError(5, "boom")
    assert isinstance(error, AcsError)
    assert error.number == 5
    assert error.code == 5


def test_status_enum_lookup():
    assert ReturnStatus(-21) is ReturnStatus.ERROR_GENERAL
    assert PollingStatus(-5) is PollingStatus.UNKNOWN
    assert CardReader(0x08) is CardReader.ICC_SAM2
    backend = FakeBackend()
    AcsReader(backend).power_off(CardReader(0x08))
    assert backend.calls == [("icc_power_off", CardReader.ICC_SAM2)]