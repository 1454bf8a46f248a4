"""cec-client transport: one short-lived adapter process per call."""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Callable, Sequence

from cecctl.core.errors import (
    AdapterError,
    AvailabilityError,
    CommandTimeoutError,
    ValidationError,
)
from cecctl.core.model import CommandResult
from cecctl.transports.base import Locator

# -s: single command mode (read stdin, exit), -d 1: errors only in the log.
ADAPTER_ARGS = ("-s", "-d", "1")
LOGGER = logging.getLogger(__name__)


class AdapterLocator:
    """Finds adapter executables on PATH and remembers the answer.

    A lookup is made once per binary name; both hits and misses are cached
    until ``reset()`` is called.
    """

    def __init__(self, which: Callable[[str], str | None] = shutil.which) -> None:
        self._which = which
        self._cache: dict[str, str | None] = {}

    def resolve(self, binary: str) -> str | None:
        if binary not in self._cache:
            path = self._which(binary)
            if path is None:
                LOGGER.warning("Adapter binary '%s' not found on PATH", binary)
            else:
                LOGGER.debug("Resolved adapter binary '%s' to %s", binary, path)
            self._cache[binary] = path
        return self._cache[binary]

    def reset(self) -> None:
        self._cache.clear()


DEFAULT_LOCATOR = AdapterLocator()


def _validate_commands(commands: Sequence[str]) -> list[str]:
    if isinstance(commands, str):
        commands = [commands]
    lines = [str(command).strip() for command in commands]
    if not lines:
        raise ValidationError("At least one adapter command is required")
    if any(not line or "\n" in line or "\r" in line for line in lines):
        raise ValidationError("Adapter commands must be non-empty single lines")
    return lines


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()


class CecClientChannel:
    def __init__(
        self,
        binary: str = "cec-client",
        *,
        args: Sequence[str] = ADAPTER_ARGS,
        locator: Locator | None = None,
    ) -> None:
        self.binary = binary
        self.args = tuple(args)
        self.locator = locator or DEFAULT_LOCATOR

    @property
    def available(self) -> bool:
        return self.locator.resolve(self.binary) is not None

    async def send_commands(
        self,
        commands: Sequence[str],
        *,
        timeout_s: float = 5.0,
    ) -> CommandResult:
        lines = _validate_commands(commands)
        path = self.locator.resolve(self.binary)
        if path is None:
            raise AvailabilityError(
                f"{self.binary} not found on PATH. Install cec-utils (or libcec) and retry."
            )

        stdin_data = "".join(f"{line}\n" for line in lines).encode()
        LOGGER.debug("Running %s with %s", path, lines)
        try:
            process = await asyncio.create_subprocess_exec(
                path,
                *self.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise AdapterError(f"Could not start {self.binary}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(stdin_data),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError:
            await _terminate(process)
            LOGGER.warning("%s timed out after %.1fs; process killed", self.binary, timeout_s)
            raise CommandTimeoutError(
                f"{self.binary} did not finish within {timeout_s:g}s"
            ) from None
        except asyncio.CancelledError:
            await _terminate(process)
            raise

        out_text = stdout.decode(errors="replace")
        err_text = stderr.decode(errors="replace").strip()
        if process.returncode != 0:
            LOGGER.warning("%s exited with code %s", self.binary, process.returncode)
            raise AdapterError(err_text or f"{self.binary} exited with code {process.returncode}")

        return CommandResult(succeeded=True, output=out_text.strip())
