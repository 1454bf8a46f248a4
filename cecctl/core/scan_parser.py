"""Parser for the device blocks printed by ``cec-client`` on ``scan``."""

from __future__ import annotations

import re
from typing import Any

from cecctl.core.address import normalize_physical_address
from cecctl.core.model import DeviceRecord

_DEVICE_LINE_RE = re.compile(r"^device\s+#([0-9a-f]+)\s*:\s*(.*)$", re.IGNORECASE)
_FIELD_LINE_RE = re.compile(
    r"^(address|vendor|osd name|osd string|device type|cec version|power status|language)\s*:\s*(.*)$",
    re.IGNORECASE,
)
_VENDOR_RE = re.compile(r"^(.*?)\s*\(([^)]*)\)\s*$")

_FIELD_NAMES = {
    "osd name": "osd_name",
    "osd string": "osd_string",
    "device type": "device_type",
    "cec version": "cec_version",
    "power status": "power_status",
    "language": "language",
}


def _apply_field(fields: dict[str, Any], key: str, value: str) -> None:
    if key == "address":
        fields["physical_address"] = normalize_physical_address(value)
    elif key == "vendor":
        match = _VENDOR_RE.match(value)
        if match:
            fields["vendor_name"] = match.group(1).strip() or None
            fields["vendor_id"] = match.group(2).strip() or None
        else:
            fields["vendor_name"] = value or None
    else:
        fields[_FIELD_NAMES[key]] = value or None


def parse_scan_output(text: str) -> list[DeviceRecord]:
    """Turn scan output into device records, in the order they were printed.

    Each ``device #N: name`` line opens a new record; known ``key: value``
    lines that follow are merged into it. Anything else is skipped.
    """
    devices: list[DeviceRecord] = []
    current: dict[str, Any] | None = None

    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue

        device_match = _DEVICE_LINE_RE.match(line)
        if device_match:
            if current is not None:
                devices.append(DeviceRecord(**current))
            current = {
                "logical_address": int(device_match.group(1), 16),
                "name": device_match.group(2).strip(),
            }
            continue

        if current is None:
            continue

        field_match = _FIELD_LINE_RE.match(line)
        if field_match:
            _apply_field(current, field_match.group(1).lower(), field_match.group(2).strip())

    if current is not None:
        devices.append(DeviceRecord(**current))
    return devices
