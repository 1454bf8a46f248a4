"""Conversions between logical addresses, physical addresses, and raw bytes."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from typing import Any

from cecctl.core.errors import ValidationError

DEFAULT_PHYSICAL_ADDRESS = "1000"

_HEX_RE = re.compile(r"^[0-9a-f]+$")
_DECIMAL_RE = re.compile(r"^[0-9]+$")
_HEX_PREFIX_RE = re.compile(r"(?<![0-9a-f])0x", re.IGNORECASE)
_NON_HEX_RE = re.compile(r"[^0-9a-f]+", re.IGNORECASE)


def normalize_nibble(value: Any) -> int:
    """Coerce *value* to a logical address in [0, 15].

    This is deliberately lenient: out-of-range numbers are clamped to the
    nearest bound, while non-finite or unparsable input maps to 0. Callers
    that need strict checking should validate before calling.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        text = value.strip().lower()
        try:
            value = int(text, 16) if text.startswith("0x") else float(text)
        except ValueError:
            return 0
    if not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        value = int(value)
    return min(max(value, 0), 15)


def normalize_byte(value: Any) -> int:
    """Return *value* as an int in [0, 255] or raise ``ValidationError``.

    Strings may be ``0x``-prefixed hex, plain decimal digits, or bare hex
    digits; a string made only of decimal digits is read as decimal.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Byte value must be a number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"Byte value must be an integer, got {value!r}")
        value = int(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("0x"):
            text = text[2:]
            base = 16
        elif _DECIMAL_RE.match(text):
            base = 10
        else:
            base = 16
        if not text or not _HEX_RE.match(text):
            raise ValidationError(f"Could not parse byte value {value!r}")
        value = int(text, base)
    if not isinstance(value, int):
        raise ValidationError(f"Unsupported byte value {value!r}")
    if value < 0 or value > 0xFF:
        raise ValidationError(f"Byte value {value} is outside 0..255")
    return int(value)


def to_hex(value: Any) -> str:
    return f"{normalize_byte(value):02X}"


def _fit_four(digits: str) -> str:
    return digits.zfill(4)[:4].upper()


def normalize_physical_address(value: Any) -> str:
    """Return the canonical 4-hex-digit form of a physical address.

    Accepts a ``(hi, lo)`` byte pair, an int (or integral float), a dotted string such as
    ``"1.0.0.0"``, or raw hex such as ``"1000"``. Shorter forms are padded
    with leading zeros; longer ones keep their leading four digits. Anything
    empty or unrecognized falls back to ``DEFAULT_PHYSICAL_ADDRESS``.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_PHYSICAL_ADDRESS
    if isinstance(value, (bytes, bytearray)):
        value = list(value)
    if isinstance(value, Sequence) and not isinstance(value, str):
        if len(value) != 2:
            return DEFAULT_PHYSICAL_ADDRESS
        try:
            hi, lo = (normalize_byte(part) for part in value)
        except ValidationError:
            return DEFAULT_PHYSICAL_ADDRESS
        return f"{hi:02X}{lo:02X}"
    if isinstance(value, float):
        if not value.is_integer():
            return DEFAULT_PHYSICAL_ADDRESS
        value = int(value)
    if isinstance(value, int):
        if value < 0:
            return DEFAULT_PHYSICAL_ADDRESS
        return _fit_four(f"{value:X}")
    if isinstance(value, str):
        text = value.strip().lower()
        if "." in text:
            segments = text.split(".")
            if len(segments) != 4 or not all(len(s) == 1 and _HEX_RE.match(s) for s in segments):
                return DEFAULT_PHYSICAL_ADDRESS
            return "".join(segments).upper()
        if text.startswith("0x"):
            text = text[2:]
        if not text or not _HEX_RE.match(text):
            return DEFAULT_PHYSICAL_ADDRESS
        return _fit_four(text)
    return DEFAULT_PHYSICAL_ADDRESS


def physical_address_to_bytes(address: Any) -> tuple[int, int]:
    normalized = normalize_physical_address(address)
    return int(normalized[:2], 16), int(normalized[2:], 16)


def format_physical_address(address: Any) -> str:
    """Render a physical address in the dotted form used by cec-client."""
    return ".".join(normalize_physical_address(address))


def string_to_ascii_bytes(text: str, max_len: int) -> tuple[int, ...]:
    """Encode *text* for OSD messages: printable ASCII only, at most *max_len* bytes."""
    cleaned = "".join(ch if 0x20 <= ord(ch) <= 0x7E else "?" for ch in str(text))
    return tuple(ord(ch) for ch in cleaned[: max(max_len, 0)])


def parse_payload(payload: Any) -> tuple[int, ...]:
    """Normalize a vendor payload to bytes.

    Iterables are validated item by item with ``normalize_byte``. Text is
    read as hex: ``0x`` prefixes are dropped, runs of non-hex characters
    separate tokens, and tokens longer than two digits are split into pairs
    (``"0A1B"`` is two bytes).
    """
    if isinstance(payload, (bytes, bytearray)):
        values = tuple(payload)
    elif isinstance(payload, str):
        collected: list[int] = []
        for token in _NON_HEX_RE.split(_HEX_PREFIX_RE.sub(" ", payload)):
            if not token:
                continue
            if len(token) > 2 and len(token) % 2:
                raise ValidationError(f"Payload token '{token}' has an odd number of hex digits")
            collected.extend(bytes.fromhex(token.zfill(2)))
        values = tuple(collected)
    elif isinstance(payload, int) and not isinstance(payload, bool):
        values = (normalize_byte(payload),)
    else:
        try:
            items = list(payload)
        except TypeError as exc:
            raise ValidationError(f"Unsupported payload {payload!r}") from exc
        values = tuple(normalize_byte(item) for item in items)
    if not values:
        raise ValidationError("Payload must contain at least one byte")
    return values


def normalize_vendor_id(value: Any) -> tuple[int, int, int]:
    """Return a 24-bit IEEE OUI as three bytes.

    Accepts an int, a hex string (``"0000F0"``, ``"0x0000F0"``) or three
    byte-like values.
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("0x"):
            text = text[2:]
        if not text or len(text) > 6 or not _HEX_RE.match(text):
            raise ValidationError(f"Vendor id {value!r} must be up to 6 hex digits")
        value = int(text, 16)
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0 or value > 0xFFFFFF:
            raise ValidationError(f"Vendor id {value} is outside 0..0xFFFFFF")
        return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF
    if isinstance(value, (bytes, bytearray, list, tuple)) and len(value) == 3:
        first, second, third = (normalize_byte(part) for part in value)
        return first, second, third
    raise ValidationError(f"Unsupported vendor id {value!r}")
