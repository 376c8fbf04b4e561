"""Key codes, input modes and the characters each keypad key produces."""

from __future__ import annotations

import enum


class Key(enum.IntEnum):
    """Key codes reported by the terminal's keypad."""

    LEFT = 16777264
    DOWN = 16777265
    UP = 16777266
    RIGHT = 16777267

    POWER = 16777483
    EXIT = 16777216
    CLEAR = 16777219
    ENTER = 16777220
    FUNCTION = 16777249
    DOT = 16777268

    NUMBER0 = 48
    NUMBER1 = 49
    NUMBER2 = 50
    NUMBER3 = 51
    NUMBER4 = 52
    NUMBER5 = 53
    NUMBER6 = 54
    NUMBER7 = 55
    NUMBER8 = 56
    NUMBER9 = 57


class KeyMode(enum.IntEnum):
    """What the digit keys type."""

    NUMBER = 0
    UPPERCASE = 1
    LOWERCASE = 2
    SPECIAL = 3


_LETTER_MODES = frozenset({KeyMode.LOWERCASE, KeyMode.UPPERCASE})

_LETTERS = {
    Key.NUMBER2: "abc",
    Key.NUMBER3: "def",
    Key.NUMBER4: "ghi",
    Key.NUMBER5: "jkl",
    Key.NUMBER6: "mno",
    Key.NUMBER7: "pqrs",
    Key.NUMBER8: "tuv",
    Key.NUMBER9: "wxyz",
}

_SYMBOLS = ("#", "@", "-", "*")
_PUNCTUATION = (".", ",", "?", "!")

_DIGIT_KEYS = frozenset(
    {
        Key.NUMBER0,
        Key.NUMBER1,
        Key.NUMBER2,
        Key.NUMBER3,
        Key.NUMBER4,
        Key.NUMBER5,
        Key.NUMBER6,
        Key.NUMBER7,
        Key.NUMBER8,
        Key.NUMBER9,
    }
)

_NEXT_MODE = {
    KeyMode.LOWERCASE: KeyMode.UPPERCASE,
    KeyMode.UPPERCASE: KeyMode.NUMBER,
    KeyMode.NUMBER: KeyMode.LOWERCASE,
}


def _as_key(key: int) -> Key | None:
    try:
        return Key(key)
    except ValueError:
        return None


def next_mode(mode: KeyMode) -> KeyMode:
    """Return the mode the FUNCTION key switches to from ``mode``.

    Lower case, upper case and number modes follow one another in a
    ring; the special mode is left as it is.
    """
    mode = KeyMode(mode)
    return _NEXT_MODE.get(mode, mode)


def character_cycle(key: int, mode: KeyMode) -> tuple[str, ...]:
    """Return the characters ``key`` types in ``mode``, in tap order.

    A key that types nothing in ``mode`` gives an empty tuple; a key that
    types one fixed character gives a tuple of one.
    """
    mode = KeyMode(mode)
    key = _as_key(key)
    if key is None:
        return ()
    if key is Key.DOT:
        return _PUNCTUATION
    if key not in _DIGIT_KEYS:
        return ()
    if mode is KeyMode.NUMBER:
        return (chr(key.value),)
    if mode not in _LETTER_MODES:
        return ()
    if key is Key.NUMBER0:
        return (" ",)
    if key is Key.NUMBER1:
        return _SYMBOLS
    letters = _LETTERS[key]
    if mode is KeyMode.UPPERCASE:
        letters = letters.upper()
    return tuple(letters)


def is_multi_tap(key: int, mode: KeyMode) -> bool:
    """Tell whether repeated taps of ``key`` cycle through characters."""
    mode = KeyMode(mode)
    key = _as_key(key)
    if key is None:
        return False
    if key is Key.DOT:
        return True
    return (
        mode in _LETTER_MODES
        and key in _DIGIT_KEYS
        and key is not Key.NUMBER0
    )