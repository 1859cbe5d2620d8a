"""Deploying a bundle to a Playdate over USB.

The device shows up either as a serial port (run mode) or as a mass-storage
volume (disk mode). Deploying walks it through::

    IDLE -> AWAITING_DISK_MODE -> AWAITING_MOUNT -> COPYING -> EJECTING
         -> AWAITING_SERIAL_RETURN -> RUNNING

with ``FAILED`` reachable from anywhere. Every wait is a filesystem poll on a
fixed tick. Waits are unbounded unless ``Settings.device_timeout`` is set, in
which case a stuck device raises ``DeviceTimeoutError``.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from crank.config.models import Settings
from crank.errors import CrankError, DeviceError, ToolInvocationError
from crank.platform import Platform
from crank.toolchain.process import run_command
from crank.utils.fs import copy_tree
from crank.utils.wait import wait_until

logger = logging.getLogger(__name__)

DISK_MODE_COMMAND = "datadisk"
RUN_COMMAND = "run"


class DeviceState(str, Enum):
    """Deployment progress, in order."""

    IDLE = "idle"
    AWAITING_DISK_MODE = "awaiting_disk_mode"
    AWAITING_MOUNT = "awaiting_mount"
    COPYING = "copying"
    EJECTING = "ejecting"
    AWAITING_SERIAL_RETURN = "awaiting_serial_return"
    RUNNING = "running"
    FAILED = "failed"


_FORWARD_ORDER = [
    DeviceState.IDLE,
    DeviceState.AWAITING_DISK_MODE,
    DeviceState.AWAITING_MOUNT,
    DeviceState.COPYING,
    DeviceState.EJECTING,
    DeviceState.AWAITING_SERIAL_RETURN,
    DeviceState.RUNNING,
]


@dataclass
class DeviceSession:
    """One deploy attempt. Nothing about it outlives ``DeviceDeployer.deploy``."""

    serial_device: Path
    mount_point: Path
    state: DeviceState = DeviceState.IDLE
    history: List[DeviceState] = field(default_factory=lambda: [DeviceState.IDLE])

    @property
    def finished(self) -> bool:
        return self.state in (DeviceState.RUNNING, DeviceState.FAILED)

    def advance(self, new_state: DeviceState) -> None:
        """Move forward to ``new_state``; only ``FAILED`` may be entered from anywhere."""
        if self.finished:
            raise DeviceError(f"Session already {self.state.value}")
        if new_state is not DeviceState.FAILED and (
            _FORWARD_ORDER.index(new_state) <= _FORWARD_ORDER.index(self.state)
        ):
            raise DeviceError(f"Illegal transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)


TransitionCallback = Callable[[DeviceState, DeviceState], None]


class DeviceDeployer:
    """Copies a ``.pdx`` onto a connected device and starts it."""

    def __init__(
        self,
        settings: Settings,
        platform: Platform,
        runner=run_command,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        on_transition: Optional[TransitionCallback] = None,
    ):
        """Initialize deployer.

        Args:
            settings: Device paths, poll tick, settle delays and timeout
            platform: Supplies the eject command
            runner: Runs external commands (eject)
            sleep: Sleep function used by every wait
            clock: Monotonic clock used for timeouts
            on_transition: Called with (old, new) on every state change
        """
        self.settings = settings
        self.platform = platform
        self.runner = runner
        self.sleep = sleep
        self.clock = clock
        self.on_transition = on_transition

    @property
    def serial_device(self) -> Path:
        return self.settings.serial_device

    @property
    def mount_point(self) -> Path:
        return self.settings.mount_point

    @property
    def games_dir(self) -> Path:
        return self.mount_point / self.settings.games_dir

    def deploy(self, pdx_path: Path, title: str) -> DeviceSession:
        """Install ``pdx_path`` as ``<title>.pdx`` and launch it.

        Returns:
            The finished session (state ``RUNNING``)

        Raises:
            DeviceError: Serial command failed or a wait timed out
            FilesystemError: Copying onto the device failed
        """
        session = DeviceSession(self.serial_device, self.mount_point)
        handlers = {
            DeviceState.IDLE: self._start,
            DeviceState.AWAITING_DISK_MODE: self._await_disk_mode,
            DeviceState.AWAITING_MOUNT: self._await_mount,
            DeviceState.COPYING: lambda: self._copy(pdx_path, title),
            DeviceState.EJECTING: self._eject,
            DeviceState.AWAITING_SERIAL_RETURN: lambda: self._await_serial_return(title),
        }

        try:
            while not session.finished:
                self._transition(session, handlers[session.state]())
        except CrankError:
            self._transition(session, DeviceState.FAILED)
            raise

        logger.info(f"'{title}' is running on the device")
        return session

    def _transition(self, session: DeviceSession, new_state: DeviceState) -> None:
        old_state = session.state
        session.advance(new_state)
        logger.debug(f"Device state {old_state.value} -> {new_state.value}")
        if self.on_transition is not None:
            self.on_transition(old_state, new_state)

    def _wait(self, condition: Callable[[], bool], description: str, settle_ticks: int = 0) -> None:
        wait_until(
            condition,
            description,
            tick=self.settings.poll_interval,
            timeout=self.settings.device_timeout,
            settle_ticks=settle_ticks,
            sleep=self.sleep,
            clock=self.clock,
        )

    def _send(self, command: str) -> None:
        """Write one command line to the serial device.

        The port is opened write-only without ``O_CREAT``; a port that has
        vanished is an error, never a new regular file.
        """
        logger.debug(f"Sending '{command}' to {self.serial_device}")
        try:
            fd = os.open(self.serial_device, os.O_WRONLY)
            with os.fdopen(fd, "w", encoding="ascii") as port:
                port.write(f"{command}\n")
        except OSError as e:
            raise DeviceError(f"Cannot send '{command}' to {self.serial_device}: {e}") from e

    def _start(self) -> DeviceState:
        if self.serial_device.exists():
            logger.info("Found device serial port, switching to disk mode")
            self._send(DISK_MODE_COMMAND)
            return DeviceState.AWAITING_DISK_MODE
        logger.info("No serial port found, assuming the device is already in disk mode")
        return DeviceState.AWAITING_MOUNT

    def _await_disk_mode(self) -> DeviceState:
        self._wait(lambda: not self.serial_device.exists(), "the device to leave run mode")
        return DeviceState.AWAITING_MOUNT

    def _await_mount(self) -> DeviceState:
        self._wait(
            lambda: self.mount_point.exists() and self.games_dir.is_dir(),
            f"the device volume at {self.mount_point}",
            settle_ticks=self.settings.mount_settle_ticks,
        )
        logger.info("Found device volume")
        return DeviceState.COPYING

    def _copy(self, pdx_path: Path, title: str) -> DeviceState:
        destination = self.games_dir / f"{title}.pdx"
        logger.info(f"Copying {pdx_path.name} to {destination}")
        copied = copy_tree(pdx_path, destination)
        logger.debug(f"Copied {copied} file(s)")
        return DeviceState.EJECTING

    def _eject(self) -> DeviceState:
        command = self.platform.eject_command(self.mount_point)
        try:
            self.runner(command)
        except ToolInvocationError as e:
            logger.warning(f"Eject failed, continuing anyway: {e}")
        return DeviceState.AWAITING_SERIAL_RETURN

    def _await_serial_return(self, title: str) -> DeviceState:
        self._wait(
            self.serial_device.exists,
            "the device to return to run mode",
            settle_ticks=self.settings.serial_settle_ticks,
        )
        self._send(f"{RUN_COMMAND} /{self.settings.games_dir}/{title}.pdx")
        return DeviceState.RUNNING
