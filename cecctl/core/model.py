"""Core data models used across codec, controller, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field

from cecctl.core.errors import ValidationError

MAX_PARAMS = 14


def _check_int(name: str, value: object, upper: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= upper:
        raise ValidationError(f"Frame {name} must be an integer in 0..{upper}, got {value!r}")


@dataclass(frozen=True)
class Frame:
    source: int
    destination: int
    opcode: int
    params: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        _check_int("source", self.source, 0xF)
        _check_int("destination", self.destination, 0xF)
        _check_int("opcode", self.opcode, 0xFF)
        if len(self.params) > MAX_PARAMS:
            raise ValidationError(
                f"Frame carries {len(self.params)} parameter bytes; CEC allows at most {MAX_PARAMS}"
            )
        for index, param in enumerate(self.params):
            _check_int(f"parameter #{index}", param, 0xFF)

    def encode(self) -> str:
        header = f"{self.source:X}{self.destination:X}"
        tokens = [f"{self.opcode:02X}", *(f"{p:02X}" for p in self.params)]
        return f"tx {header}:{':'.join(tokens)}"


@dataclass(frozen=True)
class CommandResult:
    succeeded: bool
    output: str
    error: str | None = None


@dataclass(frozen=True)
class PowerStatus:
    available: bool
    status: str
    raw: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class KeyPressResult:
    key: str | int
    code: int
    output: str


@dataclass(frozen=True)
class DeviceRecord:
    logical_address: int
    name: str
    physical_address: str | None = None
    vendor_id: str | None = None
    vendor_name: str | None = None
    osd_name: str | None = None
    osd_string: str | None = None
    device_type: str | None = None
    cec_version: str | None = None
    power_status: str | None = None
    language: str | None = None


@dataclass(frozen=True)
class ScanResult:
    devices: tuple[DeviceRecord, ...]
    raw: str


@dataclass(frozen=True)
class ControllerConfig:
    binary: str = "cec-client"
    target: int = 0
    source: int = 1
    physical_address: str = "1000"
    osd_name: str = "cecctl"
    device_type: int = 4
    vendor_id: int = 0x0000F0
    timeout_s: float = 5.0
    scan_timeout_s: float = 15.0
    hold_s: float = 0.1
    key_overrides: dict[str, int] = field(default_factory=dict)
