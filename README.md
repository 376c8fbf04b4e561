# acscard

Smart card logic for ACS handheld terminals: driving contactless (PICC) and
contact (ICC and SAM) card readers, running MIFARE Classic commands, and
turning presses on a 12-key phone-style keypad into text.

The package has no dependencies beyond the standard library.

## Install

```
pip install acscard
```

For development, with the test tools:

```
pip install -e ".[test]"
pytest
```

## Modules

### `acscard.errors`

`AcsError(message, number=0, status_word=None)` is raised when a reader or
card operation fails. `number` is the reader's result code; `status_word`,
when set, is the two bytes the card answered with (any other length raises
`ValueError`). `str()` of the error shows the message followed by the code
and the status word in upper-case hex, when they are present.

### `acscard.helper`

- `convert_uint64_to_bcd_big_endian(value, length)` and
  `convert_uint64_to_bcd_little_endian(value, length)` return the low
  `length` bytes (2, 3 or 4) of a non-negative integer.
- `convert_bcd_big_endian_to_uint64(data)` and
  `convert_bcd_little_endian_to_uint64(data)` read 2 to 4 bytes back as an
  unsigned integer.
- `to_bcd(decimal)` packs 0 to 99 into one packed-BCD byte.
- `get_bytes(text)` decodes a string of hex digit pairs; an odd length or a
  non-hex character raises `ValueError`.
- `is_valid_hex_value(number)` tells whether a number fits in one byte;
  `is_valid_hex_character(character)` whether a one-character string is a
  hex digit.
- `hex_dump(data)` returns lower-case hex and logs it at debug level.

### `acscard.keymap`

`Key` holds the keypad's key codes and `KeyMode` the input modes
(`NUMBER`, `UPPERCASE`, `LOWERCASE`, `SPECIAL`). `next_mode(mode)` gives the
mode the FUNCTION key moves to (lower case → upper case → number → lower
case; `SPECIAL` stays as it is). `character_cycle(key, mode)` gives the
characters a key steps through, and `is_multi_tap(key, mode)` tells whether
repeated taps cycle:

- in letter modes, `2`–`9` cycle through their letters, `1` through
  `# @ - *`, and `0` types a space;
- in number mode the digit keys type their digit;
- `DOT` always cycles through `. , ? !`;
- in `SPECIAL` mode the digit keys type nothing.

### `acscard.keypad`

`TextField` is an editable line of text with a cursor (`insert`,
`backspace`, `cursor_backward`, `cursor_forward`, `focus_next`, the last of
which clears `focused` and calls the optional `on_focus_next` callback).

`AcsKeypad(mode=KeyMode.LOWERCASE, timeout=0.5, clock=time.monotonic)`
applies key codes to a field with `process_key(field, key)`, which returns
`False` only when `field` is `None`. `CLEAR` deletes, `LEFT`/`RIGHT` move
the cursor, `ENTER` moves focus on and `FUNCTION` switches mode. For a
multi-tap key, the first tap types the first character of its cycle; a
repeat of the same key within `timeout` seconds replaces the last character,
the second tap retyping the first character and each later tap moving one
step on, wrapping round at the end. `key_timeout()` ends the current tap
sequence and `set_mode(mode)` / the `mode` property set and read the mode.

### `acscard.reader`

`AcsReader(backend)` works through a `ReaderBackend`, a protocol you
implement for your hardware; its methods report failure by raising
`ReaderError` or `OSError`. `CardReader` names the interfaces (`PICC`,
`ICC`, `ICC_SAM1`, `ICC_SAM2`).

- `open(reader)` / `close(reader)` take a combination of flags; opening the
  PICC also switches its field on.
- `power_on(reader)` returns the answer to reset. For contact slots it
  returns zero bytes of the received length and then sets the PPS.
- `power_off(reader)`, `poll(reader, poll_type)` (for the PICC, type 1 polls
  and a failure is only logged; contact slots raise when no card is present).
- `transmit(reader, command)` sends up to 255 bytes and returns the answer;
  `custom_transmit(reader, command_hex)` takes the command as hex text.
- `status_icc()` / `status_picc()` return 1 while the reader is open.

Failures raise `ReaderError`, an `AcsError` whose `code` is the result code.
`parse_response_classic` takes the status word from an answer's last two
bytes, `parse_response_plus` from its first byte, and
`to_parsed_apdu_response` marks an answer valid on status `9000`.
`ReturnStatus` and `PollingStatus` list the result codes.

### `acscard.mifare`

`MifareClassic(reader)` runs MIFARE Classic commands over the PICC:
`open_reader`, `close_reader`, `connect` (checks the answer to reset and
returns a `CardType`), `disconnect`, `load_key`, `authenticate`,
`read_block`, `update_block`, `store_value`, `increment_value`,
`decrement_value`, `read_value` and `restore_value`. Failures raise
`AcsError`; when the card answered with a status other than `9000`, its two
bytes are in `status_word`. `close_reader` and `disconnect` only log
failures. Values range from 0 to `MAXIMUM_VALUE` (4294967295).

## Example

```python
from acscard.errors import AcsError
from acscard.mifare import KeyStore, KeyType, MifareClassic
from acscard.reader import AcsReader

reader = AcsReader(my_backend)          # your ReaderBackend
card = MifareClassic(reader)

card.open_reader()
try:
    card.connect()
    card.load_key(bytes(6), KeyStore.STORE_0)
    card.authenticate(KeyType.A, 4, KeyStore.STORE_0)
    card.store_value(4, 100)
    card.increment_value(4, 25)
    print(card.read_value(4))
    card.disconnect()
except AcsError as error:
    print(error)
finally:
    card.close_reader()
```

Keypad input:

```python
from acscard.keymap import Key, KeyMode
from acscard.keypad import AcsKeypad, TextField

field = TextField()
keypad = AcsKeypad(mode=KeyMode.LOWERCASE)
for _ in range(3):
    keypad.process_key(field, Key.NUMBER2)
print(field.text)                       # "b"
```

## What this package does not do

- It contains no reader driver: every hardware call goes through the
  `ReaderBackend` you supply.
- It has no screens, widgets or command-line program; `TextField` is a plain
  text model, not a user-interface element.
- It stores nothing: no transaction history, settings or sessions.