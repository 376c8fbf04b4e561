"""Smart card reader access, MIFARE Classic commands and multi-tap keypad input."""

__version__ = "0.1.0"
__all__ = ["errors", "helper", "keymap", "keypad", "reader", "mifare"]