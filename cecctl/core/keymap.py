"""Remote-key name resolution for User Control Pressed messages."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from cecctl.core.address import normalize_byte
from cecctl.core.errors import UnknownKeyError, ValidationError

LOGGER = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_LITERAL_RE = re.compile(r"^0x([0-9a-f]{1,2})$")

# CEC 1.4 "UI Command" operand values.
CANONICAL_KEYS: Mapping[str, int] = MappingProxyType(
    {
        "select": 0x00,
        "up": 0x01,
        "down": 0x02,
        "left": 0x03,
        "right": 0x04,
        "rightup": 0x05,
        "rightdown": 0x06,
        "leftup": 0x07,
        "leftdown": 0x08,
        "rootmenu": 0x09,
        "setupmenu": 0x0A,
        "contentsmenu": 0x0B,
        "favoritemenu": 0x0C,
        "exit": 0x0D,
        "topmenu": 0x10,
        "dvdmenu": 0x11,
        "numberentrymode": 0x1D,
        "number11": 0x1E,
        "number12": 0x1F,
        "number0": 0x20,
        "number1": 0x21,
        "number2": 0x22,
        "number3": 0x23,
        "number4": 0x24,
        "number5": 0x25,
        "number6": 0x26,
        "number7": 0x27,
        "number8": 0x28,
        "number9": 0x29,
        "dot": 0x2A,
        "enter": 0x2B,
        "clear": 0x2C,
        "nextfavorite": 0x2F,
        "channelup": 0x30,
        "channeldown": 0x31,
        "previouschannel": 0x32,
        "soundselect": 0x33,
        "inputselect": 0x34,
        "displayinformation": 0x35,
        "help": 0x36,
        "pageup": 0x37,
        "pagedown": 0x38,
        "power": 0x40,
        "volumeup": 0x41,
        "volumedown": 0x42,
        "mute": 0x43,
        "play": 0x44,
        "stop": 0x45,
        "pause": 0x46,
        "record": 0x47,
        "rewind": 0x48,
        "fastforward": 0x49,
        "eject": 0x4A,
        "forward": 0x4B,
        "backward": 0x4C,
        "stoprecord": 0x4D,
        "pauserecord": 0x4E,
        "angle": 0x50,
        "subpicture": 0x51,
        "videoondemand": 0x52,
        "electronicprogramguide": 0x53,
        "timerprogramming": 0x54,
        "initialconfiguration": 0x55,
        "selectbroadcasttype": 0x56,
        "selectsoundpresentation": 0x57,
        "playfunction": 0x60,
        "pauseplayfunction": 0x61,
        "recordfunction": 0x62,
        "pauserecordfunction": 0x63,
        "stopfunction": 0x64,
        "mutefunction": 0x65,
        "restorevolumefunction": 0x66,
        "tunefunction": 0x67,
        "selectmediafunction": 0x68,
        "selectavinputfunction": 0x69,
        "selectaudioinputfunction": 0x6A,
        "powertogglefunction": 0x6B,
        "powerofffunction": 0x6C,
        "poweronfunction": 0x6D,
        "f1blue": 0x71,
        "f2red": 0x72,
        "f3green": 0x73,
        "f4yellow": 0x74,
        "f5": 0x75,
        "data": 0x76,
    }
)

# Values are either a canonical name or a literal code.
KEY_ALIASES: Mapping[str, str | int] = MappingProxyType(
    {
        "ok": "select",
        "back": "exit",
        "return": "exit",
        "home": "rootmenu",
        "menu": "rootmenu",
        "settings": "setupmenu",
        "setup": "setupmenu",
        "contents": "contentsmenu",
        "favorites": "favoritemenu",
        "options": 0x0B,
        "0": "number0",
        "1": "number1",
        "2": "number2",
        "3": "number3",
        "4": "number4",
        "5": "number5",
        "6": "number6",
        "7": "number7",
        "8": "number8",
        "9": "number9",
        "chup": "channelup",
        "chdown": "channeldown",
        "prev": "previouschannel",
        "last": "previouschannel",
        "input": "inputselect",
        "source": "inputselect",
        "info": "displayinformation",
        "volup": "volumeup",
        "voldown": "volumedown",
        "ff": "fastforward",
        "rew": "rewind",
        "skipforward": "forward",
        "skipback": "backward",
        "guide": "electronicprogramguide",
        "epg": "electronicprogramguide",
        "blue": "f1blue",
        "red": "f2red",
        "green": "f3green",
        "yellow": "f4yellow",
        "poweron": "poweronfunction",
        "poweroff": "powerofffunction",
        "powertoggle": "powertogglefunction",
        "playpause": 0x61,
    }
)


def normalize_key_name(name: str) -> str:
    return _NON_ALNUM_RE.sub("", str(name).lower())


class KeyTable:
    """Resolves remote-key names to control codes.

    Lookups go through three read-only tables in fixed order: caller
    overrides, the canonical CEC table, then aliases. An alias points at a
    canonical name (resolved through overrides first) or at a literal code.
    Names are compared after lowercasing and stripping everything that is
    not a letter or digit, so ``"Volume Up"``, ``"volume_up"`` and
    ``"VOLUMEUP"`` are the same key.
    """

    def __init__(self, overrides: Mapping[str, Any] | None = None) -> None:
        normalized: dict[str, int] = {}
        for name, code in (overrides or {}).items():
            key = normalize_key_name(name)
            if not key:
                raise ValidationError(f"Key override name {name!r} is empty after normalization")
            try:
                normalized[key] = normalize_byte(code)
            except ValidationError as exc:
                raise ValidationError(f"Key override '{name}': {exc}") from exc
        self.overrides: Mapping[str, int] = MappingProxyType(normalized)
        self.canonical = CANONICAL_KEYS
        self.aliases = KEY_ALIASES
        self.shadowed: tuple[str, ...] = tuple(
            sorted(k for k in normalized if k in CANONICAL_KEYS or k in KEY_ALIASES)
        )
        for name in self.shadowed:
            LOGGER.debug("Key override '%s' replaces built-in entry", name)

    def _lookup(self, name: str) -> int | None:
        if name in self.overrides:
            return self.overrides[name]
        return self.canonical.get(name)

    def resolve_key(self, key: Any) -> int:
        if isinstance(key, (int, float)) and not isinstance(key, bool):
            return normalize_byte(key)
        if not isinstance(key, str):
            raise UnknownKeyError(f"Unsupported key {key!r}")

        name = normalize_key_name(key)
        code = self._lookup(name)
        if code is not None:
            return code

        alias = self.aliases.get(name)
        if isinstance(alias, int):
            return alias
        if alias is not None:
            code = self._lookup(alias)
            if code is not None:
                return code

        literal = _LITERAL_RE.match(name)
        if literal:
            return int(literal.group(1), 16)

        raise UnknownKeyError(f"Unknown key '{key}'. Use 'cecctl keys' to list key names.")

    def names(self) -> dict[str, int]:
        table = dict(self.canonical)
        table.update(self.overrides)
        return dict(sorted(table.items(), key=lambda item: (item[1], item[0])))
