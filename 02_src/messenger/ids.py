"""Identifier generation."""

import secrets
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Return a new opaque id: base36 millisecond clock + 11 random base36 chars.

    No coordination with stored data; uniqueness is probabilistic.
    """
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(11))
    return _to_base36(time.time_ns() // 1_000_000) + suffix
