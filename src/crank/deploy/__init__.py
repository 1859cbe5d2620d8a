"""Deployment to the Playdate Simulator and to hardware.

Public API:
    - Dispatcher: routes a bundle by target kind
    - SimulatorLauncher: opens a bundle in the simulator
    - DeviceDeployer, DeviceSession, DeviceState: USB device state machine
"""

from .device import DeviceDeployer, DeviceSession, DeviceState
from .dispatcher import Dispatcher
from .simulator import SimulatorLauncher

__all__ = [
    "DeviceDeployer",
    "DeviceSession",
    "DeviceState",
    "Dispatcher",
    "SimulatorLauncher",
]
