"""Multi-tap text entry for the terminal's numeric keypad."""

from __future__ import annotations

import time
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Callable, Optional

from .keymap import Key, KeyMode, character_cycle, is_multi_tap, next_mode

_TRACKED_KEYS = frozenset(
    {
        Key.NUMBER1,
        Key.NUMBER2,
        Key.NUMBER3,
        Key.NUMBER4,
        Key.NUMBER5,
        Key.NUMBER6,
        Key.NUMBER7,
        Key.NUMBER8,
        Key.NUMBER9,
        Key.DOT,
    }
)


@dataclass
class TextField:
    """An editable line of text with a cursor.

    ``cursor`` defaults to the end of ``text``.  ``on_focus_next`` is
    called when the field hands focus on to the next one.
    """

    text: str = ""
    cursor: Optional[int] = None
    on_focus_next: Optional[Callable[[], object]] = dataclass_field(default=None, repr=False)
    focused: bool = True

    def __post_init__(self) -> None:
        if self.cursor is None:
            self.cursor = len(self.text)
        if not 0 <= self.cursor <= len(self.text):
            raise ValueError("cursor lies outside the text")

    def insert(self, text: str) -> None:
        """Insert ``text`` at the cursor and move the cursor past it."""
        self.text = self.text[: self.cursor] + text + self.text[self.cursor :]
        self.cursor += len(text)

    def backspace(self) -> None:
        """Delete the character before the cursor, if there is one."""
        if self.cursor == 0:
            return
        self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
        self.cursor -= 1

    def cursor_backward(self) -> None:
        """Move the cursor one character to the left."""
        if self.cursor > 0:
            self.cursor -= 1

    def cursor_forward(self) -> None:
        """Move the cursor one character to the right."""
        if self.cursor < len(self.text):
            self.cursor += 1

    def focus_next(self) -> object:
        """Give up focus and notify whoever is next in the chain."""
        self.focused = False
        if self.on_focus_next is not None:
            return self.on_focus_next()
        return None


class AcsKeypad:
    """Turns keypad key codes into edits of a :class:`TextField`.

    Repeated taps of a letter or symbol key within ``timeout`` seconds
    replace the last character with the next one in the key's cycle.
    """

    def __init__(
        self,
        mode: KeyMode = KeyMode.LOWERCASE,
        timeout: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout < 0:
            raise ValueError("timeout must not be negative")
        self._mode = KeyMode(mode)
        self.timeout = timeout
        self._clock = clock
        self._key_count = 0
        self._last_key: Optional[Key] = None
        self._deadline: Optional[float] = None

    @property
    def mode(self) -> KeyMode:
        """The current input mode."""
        return self._mode

    def set_mode(self, mode: KeyMode) -> None:
        """Switch the input mode."""
        self._mode = KeyMode(mode)

    def key_timeout(self) -> None:
        """End the current multi-tap sequence."""
        self._key_count = 0
        self._deadline = None

    def _expire(self) -> None:
        if self._deadline is not None and self._clock() >= self._deadline:
            self.key_timeout()

    def _restart_timer(self) -> None:
        self._deadline = self._clock() + self.timeout

    def _multi_tap(self, text_field: TextField, cycle: tuple[str, ...]) -> None:
        count = self._key_count
        if count == 0:
            text_field.insert(cycle[0])
            self._key_count = 1
        elif count <= len(cycle):
            text_field.backspace()
            text_field.insert(cycle[count - 1])
            self._key_count = count + 1 if count < len(cycle) else 1
        else:
            return
        self._restart_timer()

    def process_key(self, field: Optional[TextField], key: int) -> bool:
        """Apply ``key`` to ``field``; return whether it was handled."""
        if field is None:
            return False
        self._expire()

        try:
            code = Key(key)
        except ValueError:
            return True

        if code in _TRACKED_KEYS and code != self._last_key:
            self._last_key = code
            self._key_count = 0

        if code is Key.CLEAR:
            field.backspace()
        elif code is Key.FUNCTION:
            self._mode = next_mode(self._mode)
        elif code is Key.LEFT:
            field.cursor_backward()
        elif code is Key.RIGHT:
            field.cursor_forward()
        elif code is Key.ENTER:
            field.focus_next()
        elif is_multi_tap(code, self._mode):
            self._multi_tap(field, character_cycle(code, self._mode))
        else:
            characters = character_cycle(code, self._mode)
            if characters:
                field.insert(characters[0])
        return True