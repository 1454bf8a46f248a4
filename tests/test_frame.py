from __future__ import annotations

import re

import pytest

from cecctl.core.errors import ValidationError
from cecctl.core.frame import BROADCAST, Opcode, build_frame, make_frame
from cecctl.core.model import Frame

_FRAME_RE = re.compile(r"^tx [0-9A-F]{2}(:[0-9A-F]{2})+$")


def test_standby_example() -> None:
    assert build_frame(0x36, [], target=0, source=4) == "tx 40:36"


def test_params_are_colon_separated_uppercase() -> None:
    line = build_frame(Opcode.ACTIVE_SOURCE, [0x10, 0x00], target=BROADCAST, source=1)
    assert line == "tx 1F:82:10:00"


def test_string_inputs_are_normalized() -> None:
    assert build_frame("0x44", ["0x0a"], target="0", source="4") == "tx 40:44:0A"


@pytest.mark.parametrize(
    ("opcode", "params", "target", "source"),
    [
        (0x04, [], 0, 1),
        (0x47, [ord(c) for c in "cecctl"], 0, 4),
        (0xA0, [0, 0, 0xF0, 1, 2], 5, 8),
        (0xFF, [255] * 14, 15, 15),
    ],
)
def test_output_shape_is_stable(opcode, params, target, source) -> None:
    first = build_frame(opcode, params, target, source)
    assert _FRAME_RE.match(first)
    assert first == build_frame(opcode, params, target, source)
    assert all(len(token) == 2 for token in first[3:].split(":"))


def test_nibbles_are_clamped() -> None:
    assert build_frame(0x36, [], target=99, source=-2) == "tx 0F:36"


def test_invalid_param_raises() -> None:
    with pytest.raises(ValidationError):
        build_frame(0x89, [1, 300])


def test_invalid_opcode_raises() -> None:
    with pytest.raises(ValidationError):
        build_frame(0x100)


def test_too_many_params_raises() -> None:
    with pytest.raises(ValidationError):
        build_frame(0x89, [0] * 15)


def test_make_frame_fields() -> None:
    frame = make_frame(Opcode.SET_STREAM_PATH, (0x21, 0x00), target=BROADCAST, source=4)
    assert frame.source == 4
    assert frame.destination == 15
    assert frame.opcode == 0x86
    assert frame.params == (0x21, 0x00)
    assert frame.encode() == "tx 4F:86:21:00"


@pytest.mark.parametrize(
    "fields",
    [
        {"source": 16, "destination": 0, "opcode": 0x36},
        {"source": 1, "destination": -1, "opcode": 0x36},
        {"source": 1, "destination": 0, "opcode": 0x136},
        {"source": 1, "destination": 0, "opcode": 0x89, "params": (1, 256)},
        {"source": 1, "destination": 0, "opcode": 0x89, "params": (0,) * 15},
        {"source": True, "destination": 0, "opcode": 0x36},
        {"source": 1, "destination": 0, "opcode": "36"},
    ],
)
def test_frame_rejects_out_of_range_fields(fields) -> None:
    with pytest.raises(ValidationError):
        Frame(**fields)


def test_frame_constructed_directly_encodes() -> None:
    assert Frame(source=1, destination=0, opcode=0x44, params=(0x41,)).encode() == "tx 10:44:41"
