"""Intent-level CEC operations used by the CLI and third-party callers."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any

from cecctl.core.address import (
    normalize_byte,
    normalize_nibble,
    normalize_physical_address,
    normalize_vendor_id,
    parse_payload,
    physical_address_to_bytes,
    string_to_ascii_bytes,
)
from cecctl.core.frame import BROADCAST, OSD_NAME_MAX, OSD_STRING_MAX, Opcode, build_frame
from cecctl.core.keymap import KeyTable
from cecctl.core.model import (
    CommandResult,
    ControllerConfig,
    KeyPressResult,
    PowerStatus,
    ScanResult,
)
from cecctl.core.scan_parser import parse_scan_output
from cecctl.transports.base import CommandChannel, Locator
from cecctl.transports.cec_client import CecClientChannel

_POWER_STATUS_RE = re.compile(r"power status:\s*(.+)", re.IGNORECASE)
LOGGER = logging.getLogger(__name__)


class CecController:
    """Translate TV-control intents into cec-client commands.

    Every operation spawns its own adapter process through the channel, so
    calls share no state; concurrent calls may reach the bus in any order.
    Inputs are validated before anything is spawned.
    """

    def __init__(
        self,
        config: ControllerConfig | None = None,
        *,
        channel: CommandChannel | None = None,
        key_table: KeyTable | None = None,
        locator: Locator | None = None,
    ) -> None:
        config = config or ControllerConfig()
        self.config = config
        self.target = normalize_nibble(config.target)
        self.source = normalize_nibble(config.source)
        self.physical_address = normalize_physical_address(config.physical_address)
        self.osd_name = config.osd_name
        self.device_type = normalize_byte(config.device_type)
        self.vendor_id = normalize_vendor_id(config.vendor_id)
        self.timeout_s = float(config.timeout_s)
        self.scan_timeout_s = float(config.scan_timeout_s)
        self.hold_s = float(config.hold_s)
        self.key_table = key_table or KeyTable(config.key_overrides)
        self.channel = channel or CecClientChannel(config.binary, locator=locator)

    @property
    def adapter_available(self) -> bool:
        return getattr(self.channel, "available", True)

    def runtime_warnings(self) -> tuple[str, ...]:
        warnings: list[str] = []
        if not self.adapter_available:
            warnings.append(
                f"{self.config.binary} not found on PATH; CEC commands will fail. Install cec-utils."
            )
        return tuple(warnings)

    def resolve_key(self, key: Any) -> int:
        return self.key_table.resolve_key(key)

    def _target(self, target: Any) -> int:
        return self.target if target is None else normalize_nibble(target)

    def _frame(self, opcode: int, params: Iterable[Any] = (), target: Any = None) -> str:
        return build_frame(opcode, params, self._target(target), self.source)

    async def _send(self, commands: Sequence[str], timeout_s: float | None = None) -> CommandResult:
        return await self.channel.send_commands(
            commands,
            timeout_s=self.timeout_s if timeout_s is None else timeout_s,
        )

    async def _transmit(self, opcode: int, params: Iterable[Any] = (), target: Any = None) -> CommandResult:
        return await self._send([self._frame(opcode, params, target)])

    async def send_raw(self, commands: Sequence[str], *, timeout_s: float | None = None) -> CommandResult:
        """Pass adapter command lines through unchanged."""
        return await self._send(commands, timeout_s)

    # Power

    async def turn_on(self, target: Any = None) -> CommandResult:
        return await self._send([f"on {self._target(target):X}"])

    async def standby(self, target: Any = None) -> CommandResult:
        return await self._send([f"standby {self._target(target):X}"])

    async def image_view_on(self, target: Any = None) -> CommandResult:
        return await self._transmit(Opcode.IMAGE_VIEW_ON, target=target)

    async def text_view_on(self, target: Any = None) -> CommandResult:
        return await self._transmit(Opcode.TEXT_VIEW_ON, target=target)

    async def get_power_status(self, target: Any = None) -> PowerStatus:
        """Query the power state without raising.

        Adapter failures are reported as ``available=False`` so this can be
        polled from a status endpoint.
        """
        try:
            result = await self._send([f"pow {self._target(target):X}"])
        except Exception as exc:
            LOGGER.debug("Power status unavailable: %s", exc)
            return PowerStatus(available=False, status="unavailable", error=str(exc))

        match = _POWER_STATUS_RE.search(result.output)
        status = match.group(1).strip().lower() if match else "unknown"
        return PowerStatus(available=True, status=status, raw=result.output)

    async def request_power_status(self, target: Any = None) -> CommandResult:
        return await self._transmit(Opcode.GIVE_DEVICE_POWER_STATUS, target=target)

    # Identification and routing

    async def give_osd_name(self, target: Any = None) -> CommandResult:
        return await self._transmit(Opcode.GIVE_OSD_NAME, target=target)

    async def request_physical_address(self, target: Any = None) -> CommandResult:
        return await self._transmit(Opcode.GIVE_PHYSICAL_ADDRESS, target=target)

    async def request_vendor_id(self, target: Any = None) -> CommandResult:
        return await self._transmit(Opcode.GIVE_DEVICE_VENDOR_ID, target=target)

    async def request_cec_version(self, target: Any = None) -> CommandResult:
        return await self._transmit(Opcode.GET_CEC_VERSION, target=target)

    async def request_active_source(self) -> CommandResult:
        return await self._transmit(Opcode.REQUEST_ACTIVE_SOURCE, target=BROADCAST)

    async def set_stream_path(self, physical_address: Any) -> CommandResult:
        params = physical_address_to_bytes(physical_address)
        return await self._transmit(Opcode.SET_STREAM_PATH, params, target=BROADCAST)

    async def set_active_source(self, physical_address: Any = None) -> CommandResult:
        address = self.physical_address if physical_address is None else physical_address
        params = physical_address_to_bytes(address)
        return await self._transmit(Opcode.ACTIVE_SOURCE, params, target=BROADCAST)

    async def inactive_source(self, physical_address: Any = None, target: Any = None) -> CommandResult:
        address = self.physical_address if physical_address is None else physical_address
        params = physical_address_to_bytes(address)
        return await self._transmit(Opcode.INACTIVE_SOURCE, params, target=target)

    async def report_physical_address(
        self,
        physical_address: Any = None,
        device_type: Any = None,
    ) -> CommandResult:
        address = self.physical_address if physical_address is None else physical_address
        kind = self.device_type if device_type is None else device_type
        params = (*physical_address_to_bytes(address), kind)
        return await self._transmit(Opcode.REPORT_PHYSICAL_ADDRESS, params, target=BROADCAST)

    async def set_osd_name(self, name: str | None = None, target: Any = None) -> CommandResult:
        params = string_to_ascii_bytes(self.osd_name if name is None else name, OSD_NAME_MAX)
        return await self._transmit(Opcode.SET_OSD_NAME, params, target=target)

    async def set_osd_string(
        self,
        text: str,
        target: Any = None,
        display_control: Any = 0x00,
    ) -> CommandResult:
        params = (display_control, *string_to_ascii_bytes(text, OSD_STRING_MAX))
        return await self._transmit(Opcode.SET_OSD_STRING, params, target=target)

    # Remote keys

    async def send_key(
        self,
        key: Any,
        *,
        target: Any = None,
        hold_s: float | None = None,
    ) -> KeyPressResult:
        """Press and release one remote key.

        Press and release are two separate adapter runs with a pause of
        ``hold_s`` seconds between them.
        """
        code = self.key_table.resolve_key(key)
        press = self._frame(Opcode.USER_CONTROL_PRESSED, [code], target)
        release = self._frame(Opcode.USER_CONTROL_RELEASED, (), target)

        await self._send([press])
        await asyncio.sleep(max(self.hold_s if hold_s is None else hold_s, 0))
        result = await self._send([release])
        return KeyPressResult(key=key, code=code, output=result.output)

    async def send_key_sequence(
        self,
        keys: Iterable[Any],
        *,
        target: Any = None,
        delay_s: float = 0.0,
        hold_s: float | None = None,
    ) -> list[KeyPressResult]:
        """Send keys one after another; the first failure stops the sequence."""
        keys = [keys] if isinstance(keys, str) else list(keys)
        results: list[KeyPressResult] = []
        for index, key in enumerate(keys):
            results.append(await self.send_key(key, target=target, hold_s=hold_s))
            if delay_s > 0 and index < len(keys) - 1:
                await asyncio.sleep(delay_s)
        return results

    # Vendor commands

    async def send_vendor_command(self, payload: Any, *, target: Any = None) -> CommandResult:
        return await self._transmit(Opcode.VENDOR_COMMAND, parse_payload(payload), target=target)

    async def send_vendor_command_with_id(
        self,
        payload: Any,
        *,
        vendor_id: Any = None,
        target: Any = None,
    ) -> CommandResult:
        oui = self.vendor_id if vendor_id is None else normalize_vendor_id(vendor_id)
        params = (*oui, *parse_payload(payload))
        return await self._transmit(Opcode.VENDOR_COMMAND_WITH_ID, params, target=target)

    # Discovery

    async def scan_devices(self) -> ScanResult:
        result = await self._send(["scan"], timeout_s=self.scan_timeout_s)
        devices = parse_scan_output(result.output)
        LOGGER.debug("Scan found %d device(s)", len(devices))
        return ScanResult(devices=tuple(devices), raw=result.output)
