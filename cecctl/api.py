"""Stable public API for building tooling on top of cecctl.

This module is the supported integration surface for third-party callers
(dashboards, schedulers, scripts). Avoid importing from internal modules
unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from cecctl.core.address import (
    format_physical_address,
    normalize_byte,
    normalize_nibble,
    normalize_physical_address,
    physical_address_to_bytes,
    string_to_ascii_bytes,
)
from cecctl.core.config_loader import LoadedConfig, load_config
from cecctl.core.controller import CecController
from cecctl.core.errors import (
    AdapterError,
    AvailabilityError,
    CecctlError,
    CommandTimeoutError,
    ConfigError,
    ConfigLoadError,
    UnknownKeyError,
    ValidationError,
)
from cecctl.core.frame import BROADCAST, DeviceType, Opcode, build_frame
from cecctl.core.keymap import KeyTable
from cecctl.core.model import (
    CommandResult,
    ControllerConfig,
    DeviceRecord,
    Frame,
    KeyPressResult,
    PowerStatus,
    ScanResult,
)
from cecctl.core.scan_parser import parse_scan_output
from cecctl.transports.base import CommandChannel
from cecctl.transports.cec_client import AdapterLocator, CecClientChannel

__all__ = [
    "CecctlError",
    "ValidationError",
    "AvailabilityError",
    "AdapterError",
    "CommandTimeoutError",
    "UnknownKeyError",
    "ConfigError",
    "ConfigLoadError",
    "CommandResult",
    "ControllerConfig",
    "DeviceRecord",
    "Frame",
    "KeyPressResult",
    "PowerStatus",
    "ScanResult",
    "LoadedConfig",
    "BROADCAST",
    "DeviceType",
    "Opcode",
    "KeyTable",
    "CommandChannel",
    "AdapterLocator",
    "CecClientChannel",
    "CecController",
    "build_frame",
    "parse_scan_output",
    "normalize_nibble",
    "normalize_byte",
    "normalize_physical_address",
    "physical_address_to_bytes",
    "format_physical_address",
    "string_to_ascii_bytes",
    "load_config",
    "open_controller",
]


def open_controller(
    config_path: str | Path | None = None,
    *,
    channel: CommandChannel | None = None,
) -> CecController:
    """Build a controller from the user's config file (or defaults)."""
    loaded = load_config(config_path)
    return CecController(loaded.config, channel=channel)
