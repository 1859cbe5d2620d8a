"""Routes a compiled bundle to the simulator or the device."""

from __future__ import annotations

from pathlib import Path

from crank.config.models import BuildConfig, TargetKind
from crank.deploy.device import DeviceDeployer
from crank.deploy.simulator import SimulatorLauncher


class Dispatcher:
    """Picks the deployment path from the build's target kind."""

    def __init__(self, simulator: SimulatorLauncher, device: DeviceDeployer):
        self.simulator = simulator
        self.device = device

    def deploy(self, config: BuildConfig, pdx_path: Path, title: str) -> None:
        if config.target_kind is TargetKind.DEVICE:
            self.device.deploy(pdx_path, title)
        else:
            self.simulator.launch(pdx_path)
