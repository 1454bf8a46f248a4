"""CEC opcodes and encoding of cec-client ``tx`` lines."""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum
from typing import Any

from cecctl.core.address import normalize_byte, normalize_nibble
from cecctl.core.errors import ValidationError
from cecctl.core.model import MAX_PARAMS, Frame

BROADCAST = 0xF
OSD_NAME_MAX = 14
OSD_STRING_MAX = 13


class Opcode(IntEnum):
    FEATURE_ABORT = 0x00
    IMAGE_VIEW_ON = 0x04
    TEXT_VIEW_ON = 0x0D
    STANDBY = 0x36
    USER_CONTROL_PRESSED = 0x44
    USER_CONTROL_RELEASED = 0x45
    GIVE_OSD_NAME = 0x46
    SET_OSD_NAME = 0x47
    SET_OSD_STRING = 0x64
    SYSTEM_AUDIO_MODE_REQUEST = 0x70
    GIVE_AUDIO_STATUS = 0x71
    SET_SYSTEM_AUDIO_MODE = 0x72
    REPORT_AUDIO_STATUS = 0x7A
    GIVE_SYSTEM_AUDIO_MODE_STATUS = 0x7D
    SYSTEM_AUDIO_MODE_STATUS = 0x7E
    ROUTING_CHANGE = 0x80
    ROUTING_INFORMATION = 0x81
    ACTIVE_SOURCE = 0x82
    GIVE_PHYSICAL_ADDRESS = 0x83
    REPORT_PHYSICAL_ADDRESS = 0x84
    REQUEST_ACTIVE_SOURCE = 0x85
    SET_STREAM_PATH = 0x86
    DEVICE_VENDOR_ID = 0x87
    VENDOR_COMMAND = 0x89
    VENDOR_REMOTE_BUTTON_DOWN = 0x8A
    VENDOR_REMOTE_BUTTON_UP = 0x8B
    GIVE_DEVICE_VENDOR_ID = 0x8C
    MENU_REQUEST = 0x8D
    MENU_STATUS = 0x8E
    GIVE_DEVICE_POWER_STATUS = 0x8F
    REPORT_POWER_STATUS = 0x90
    GET_MENU_LANGUAGE = 0x91
    INACTIVE_SOURCE = 0x9D
    CEC_VERSION = 0x9E
    GET_CEC_VERSION = 0x9F
    VENDOR_COMMAND_WITH_ID = 0xA0


class DeviceType(IntEnum):
    TV = 0
    RECORDING_DEVICE = 1
    RESERVED = 2
    TUNER = 3
    PLAYBACK_DEVICE = 4
    AUDIO_SYSTEM = 5


def make_frame(
    opcode: Any,
    params: Iterable[Any] = (),
    target: Any = 0,
    source: Any = 1,
) -> Frame:
    """Validate every field and return a ``Frame`` ready to encode."""
    try:
        op = normalize_byte(opcode)
    except ValidationError as exc:
        raise ValidationError(f"Invalid opcode: {exc}") from exc

    payload: list[int] = []
    for index, param in enumerate(params):
        try:
            payload.append(normalize_byte(param))
        except ValidationError as exc:
            raise ValidationError(f"Invalid parameter #{index} for opcode {op:02X}: {exc}") from exc
    if len(payload) > MAX_PARAMS:
        raise ValidationError(
            f"Opcode {op:02X} carries {len(payload)} parameter bytes; CEC allows at most {MAX_PARAMS}"
        )

    return Frame(
        source=normalize_nibble(source),
        destination=normalize_nibble(target),
        opcode=op,
        params=tuple(payload),
    )


def build_frame(
    opcode: Any,
    params: Iterable[Any] = (),
    target: Any = 0,
    source: Any = 1,
) -> str:
    """Encode a cec-client transmit line.

    >>> build_frame(Opcode.STANDBY, [], target=0, source=4)
    'tx 40:36'
    """
    return make_frame(opcode, params, target, source).encode()
