"""Error taxonomy for crank.

Every failure that reaches the command line is a ``CrankError``. The CLI maps
``exit_code`` straight onto the process exit status.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Optional, Sequence, Union


class CrankError(Exception):
    """Base class for all crank failures."""

    exit_code = 1


class ConfigError(CrankError):
    """Manifest malformed, bad settings, or no compatible build target."""

    exit_code = 4


class FilesystemError(CrankError):
    """Create, copy or read failure during staging or device copy."""

    def __init__(
        self,
        message: str,
        paths: Optional[Sequence[Union[str, Path]]] = None,
    ) -> None:
        self.paths = [Path(p) for p in paths or []]
        super().__init__(message)


class ToolInvocationError(CrankError):
    """External process failed to spawn or exited nonzero."""

    exit_code = 2

    def __init__(
        self,
        command: Sequence[Union[str, Path]],
        returncode: Optional[int] = None,
        output: Optional[str] = None,
        not_found: bool = False,
        hint: Optional[str] = None,
    ) -> None:
        self.command = [str(part) for part in command]
        self.returncode = returncode
        self.output = output
        self.not_found = not_found
        self.hint = hint
        super().__init__(self._describe())

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)

    def _describe(self) -> str:
        if self.not_found:
            message = f"Failed to spawn `{self.command_line}`: executable not found"
        else:
            message = f"`{self.command_line}` failed with exit status {self.returncode}"
        if self.output:
            message += f"\n{self.output.rstrip()}"
        if self.hint:
            message += f"\nhint: {self.hint}"
        return message


class DeviceError(CrankError):
    """Device deployment could not complete."""

    exit_code = 3


class DeviceTimeoutError(DeviceError):
    """A device poll did not observe its condition within the configured bound."""

    def __init__(self, condition: str, timeout: float) -> None:
        self.condition = condition
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g}s waiting for {condition}")
