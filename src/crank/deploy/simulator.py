"""Launching bundles in the Playdate Simulator."""

from __future__ import annotations

import logging
from pathlib import Path

from crank.config.models import Settings
from crank.errors import ToolInvocationError
from crank.platform import Platform
from crank.toolchain.process import run_command

logger = logging.getLogger(__name__)


class SimulatorLauncher:
    """Opens a ``.pdx`` in the host's simulator and waits for it to exit."""

    def __init__(self, settings: Settings, platform: Platform, runner=run_command):
        self.settings = settings
        self.platform = platform
        self.runner = runner

    def launch(self, pdx_path: Path) -> None:
        """Run the simulator on ``pdx_path``.

        Raises:
            ToolInvocationError: ``not_found`` is set when the simulator is
                missing; otherwise it exited nonzero
        """
        command = self.platform.simulator_command(self.settings.sdk_root, pdx_path)
        logger.info(f"Launching simulator with {pdx_path.name}")
        try:
            self.runner(command)
        except ToolInvocationError as e:
            if e.not_found:
                hint = (
                    f"Playdate Simulator not found; check the SDK installation at "
                    f"{self.settings.sdk_root} or set PLAYDATE_SDK_PATH"
                )
            else:
                hint = "the simulator started but exited with an error"
            raise ToolInvocationError(
                e.command, e.returncode, e.output, not_found=e.not_found, hint=hint
            ) from e
