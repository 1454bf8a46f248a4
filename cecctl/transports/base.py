"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from cecctl.core.model import CommandResult


class CommandChannel(Protocol):
    async def send_commands(
        self,
        commands: Sequence[str],
        *,
        timeout_s: float = 5.0,
    ) -> CommandResult:
        """Run command lines through the adapter and return its output."""


class Locator(Protocol):
    def resolve(self, binary: str) -> str | None:
        """Return the executable path for *binary*, or None if it is missing."""
