"""Errors raised by card reader and card operations."""

from __future__ import annotations


class AcsError(Exception):
    """A failed reader or card operation.

    ``number`` is the reader's result code and ``status_word`` the two
    status bytes the card answered with, when it answered at all.
    """

    def __init__(
        self,
        message: str,
        number: int = 0,
        status_word: bytes | None = None,
    ) -> None:
        super().__init__(message)
        if status_word is not None:
            status_word = bytes(status_word)
            if len(status_word) != 2:
                raise ValueError("a status word is exactly two bytes")
        self.message = message
        self.number = number
        self.status_word = status_word

    def __str__(self) -> str:
        parts = [self.message]
        if self.number:
            parts.append(f"code {self.number}")
        if self.status_word is not None:
            parts.append(f"status word {self.status_word.hex().upper()}")
        if len(parts) == 1:
            return self.message
        return f"{parts[0]} ({', '.join(parts[1:])})"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"number={self.number!r}, status_word={self.status_word!r})"
        )