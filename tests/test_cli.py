from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from cecctl import cli
from cecctl.core.errors import AdapterError
from cecctl.core.keymap import KeyTable
from cecctl.core.model import (
    CommandResult,
    DeviceRecord,
    KeyPressResult,
    PowerStatus,
    ScanResult,
)


class FakeController:
    instances: list["FakeController"] = []

    def __init__(self, config) -> None:
        self.config = config
        self.physical_address = "1000"
        self.key_table = KeyTable()
        self.calls: list[tuple] = []
        FakeController.instances.append(self)

    def runtime_warnings(self) -> tuple[str, ...]:
        return ()

    async def turn_on(self):
        self.calls.append(("turn_on",))
        return CommandResult(succeeded=True, output="")

    async def image_view_on(self):
        self.calls.append(("image_view_on",))
        return CommandResult(succeeded=True, output="")

    async def standby(self):
        self.calls.append(("standby",))
        return CommandResult(succeeded=True, output="")

    async def get_power_status(self):
        return PowerStatus(available=True, status="on", raw="power status: on")

    async def send_key_sequence(self, keys, *, delay_s=0.0, hold_s=None):
        self.calls.append(("send_key_sequence", tuple(keys), delay_s, hold_s))
        return [KeyPressResult(key=k, code=self.key_table.resolve_key(k), output="") for k in keys]

    async def send_vendor_command(self, payload):
        self.calls.append(("send_vendor_command", payload))
        return CommandResult(succeeded=True, output="")

    async def send_vendor_command_with_id(self, payload, *, vendor_id=None):
        self.calls.append(("send_vendor_command_with_id", payload, vendor_id))
        return CommandResult(succeeded=True, output="")

    async def set_active_source(self, physical_address=None):
        self.calls.append(("set_active_source", physical_address))
        return CommandResult(succeeded=True, output="")

    async def set_osd_name(self, name):
        self.calls.append(("set_osd_name", name))
        return CommandResult(succeeded=True, output="")

    async def scan_devices(self):
        return ScanResult(
            devices=(
                DeviceRecord(
                    logical_address=0,
                    name="TV",
                    physical_address="0000",
                    vendor_name="LG",
                    vendor_id="00E091",
                    power_status="standby",
                ),
            ),
            raw="device #0: TV",
        )

    async def send_raw(self, lines):
        self.calls.append(("send_raw", tuple(lines)))
        return CommandResult(succeeded=True, output="waiting for input")


runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setattr(cli, "CecController", FakeController)
    FakeController.instances.clear()


def test_on_command() -> None:
    result = runner.invoke(cli.app, ["on"])
    assert result.exit_code == 0
    assert "Power on sent" in result.stdout
    assert FakeController.instances[0].calls == [("turn_on",)]


def test_on_command_image_view() -> None:
    result = runner.invoke(cli.app, ["on", "--image-view"])
    assert result.exit_code == 0
    assert FakeController.instances[0].calls == [("image_view_on",)]


def test_target_option_overrides_config() -> None:
    result = runner.invoke(cli.app, ["--target", "5", "standby"])
    assert result.exit_code == 0
    assert FakeController.instances[0].config.target == 5


def test_status_command() -> None:
    result = runner.invoke(cli.app, ["status"])
    assert result.exit_code == 0
    assert "Power status: on" in result.stdout


def test_status_unavailable_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    class Unavailable(FakeController):
        async def get_power_status(self):
            return PowerStatus(available=False, status="unavailable", error="cec-client not found")

    monkeypatch.setattr(cli, "CecController", Unavailable)
    result = runner.invoke(cli.app, ["status"])
    assert result.exit_code == 1
    assert "unavailable (cec-client not found)" in result.stdout


def test_key_command() -> None:
    result = runner.invoke(cli.app, ["key", "down", "ok", "--delay", "0.3", "--hold", "0.1"])
    assert result.exit_code == 0
    assert "Sent down (0x02)" in result.stdout
    assert "Sent ok (0x00)" in result.stdout
    assert FakeController.instances[0].calls == [("send_key_sequence", ("down", "ok"), 0.3, 0.1)]


def test_key_command_unknown_key_is_clean() -> None:
    result = runner.invoke(cli.app, ["key", "teleport"])
    assert result.exit_code == 1
    assert "Error: Unknown key 'teleport'" in result.stderr
    assert "Traceback" not in result.stdout


def test_keys_command_lists_table() -> None:
    result = runner.invoke(cli.app, ["keys"])
    assert result.exit_code == 0
    assert "0x00  select" in result.stdout
    assert "0x41  volumeup" in result.stdout


def test_vendor_command() -> None:
    result = runner.invoke(cli.app, ["vendor", "01 02"])
    assert result.exit_code == 0
    assert FakeController.instances[0].calls == [("send_vendor_command", "01 02")]


def test_vendor_command_with_id() -> None:
    result = runner.invoke(cli.app, ["vendor", "01", "--vendor-id", "00903E"])
    assert result.exit_code == 0
    assert FakeController.instances[0].calls == [("send_vendor_command_with_id", "01", "00903E")]


def test_active_source_command() -> None:
    result = runner.invoke(cli.app, ["active-source"])
    assert result.exit_code == 0
    assert "Active source set to 1.0.0.0" in result.stdout


def test_osd_name_command() -> None:
    result = runner.invoke(cli.app, ["osd-name", "Kitchen Pi"])
    assert result.exit_code == 0
    assert FakeController.instances[0].calls == [("set_osd_name", "Kitchen Pi")]


def test_scan_command() -> None:
    result = runner.invoke(cli.app, ["scan"])
    assert result.exit_code == 0
    assert "#0 TV @ 0.0.0.0" in result.stdout
    assert "vendor: LG (00E091)" in result.stdout
    assert "power status: standby" in result.stdout


def test_raw_command() -> None:
    result = runner.invoke(cli.app, ["raw", "tx 10:36", "as"])
    assert result.exit_code == 0
    assert "waiting for input" in result.stdout
    assert FakeController.instances[0].calls == [("send_raw", ("tx 10:36", "as"))]


def test_adapter_error_is_clean(monkeypatch: pytest.MonkeyPatch) -> None:
    class Failing(FakeController):
        async def turn_on(self):
            raise AdapterError("adapter busy")

    monkeypatch.setattr(cli, "CecController", Failing)
    result = runner.invoke(cli.app, ["on"])
    assert result.exit_code == 1
    assert "Error: adapter busy" in result.stderr
    assert "Traceback" not in result.stderr


def test_config_warnings_are_printed(tmp_path: Path) -> None:
    config = tmp_path / "cecctl.yaml"
    config.write_text("key_overrides:\n  select: 0x2B\n", encoding="utf-8")
    result = runner.invoke(cli.app, ["--config", str(config), "standby"])
    assert result.exit_code == 0
    assert "Warning: Key override 'select'" in result.stderr


def test_runtime_warning_is_printed(monkeypatch: pytest.MonkeyPatch) -> None:
    class Warn(FakeController):
        def runtime_warnings(self) -> tuple[str, ...]:
            return ("cec-client not found on PATH; CEC commands will fail. Install cec-utils.",)

    monkeypatch.setattr(cli, "CecController", Warn)
    result = runner.invoke(cli.app, ["standby"])
    assert result.exit_code == 0
    assert "Warning: cec-client not found on PATH" in result.stderr


def test_bad_config_is_clean(tmp_path: Path) -> None:
    config = tmp_path / "cecctl.yaml"
    config.write_text("target: 99\n", encoding="utf-8")
    result = runner.invoke(cli.app, ["--config", str(config), "on"])
    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.stderr