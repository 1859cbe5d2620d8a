"""Synchronous external process invocation."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from crank.errors import ToolInvocationError

logger = logging.getLogger(__name__)

Command = Sequence[Union[str, Path]]


def run_command(
    command: Command,
    cwd: Optional[Path] = None,
    quiet: bool = False,
    capture: bool = False,
    hint: Optional[str] = None,
) -> subprocess.CompletedProcess:
    """Run ``command`` to completion.

    Args:
        command: Program and arguments
        cwd: Working directory
        quiet: Discard stdout but let stderr through to the terminal
        capture: Capture stdout and stderr; they are only surfaced on failure
        hint: Remediation hint attached to the error

    Returns:
        The completed process

    Raises:
        ToolInvocationError: If the program cannot be spawned or exits nonzero
    """
    argv = [str(part) for part in command]
    logger.debug(f"Running: {shlex.join(argv)}")

    kwargs = {}
    if capture:
        kwargs.update(stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
    elif quiet:
        kwargs.update(stdout=subprocess.DEVNULL)

    try:
        result = subprocess.run(argv, cwd=cwd, check=False, **kwargs)
    except OSError as e:
        # FileNotFoundError, PermissionError, exec format errors
        logger.debug(f"Spawn failed: {e}")
        raise ToolInvocationError(argv, not_found=True, hint=hint) from e

    if result.returncode != 0:
        raise ToolInvocationError(
            argv,
            returncode=result.returncode,
            output=result.stdout if capture else None,
            hint=hint,
        )
    return result


def run_best_effort(command: Command, what: str) -> bool:
    """Run ``command``; log a warning instead of raising on failure."""
    try:
        run_command(command, quiet=True)
    except ToolInvocationError as e:
        logger.warning(f"{what} failed (continuing): {e}")
        return False
    return True
