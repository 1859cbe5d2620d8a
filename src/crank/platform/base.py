"""Platform capability interface.

Everything that differs between host operating systems (SDK location, device
paths, simulator launch, eject, file-browser reveal, library naming) lives
behind one ``Platform`` implementation chosen once at startup.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List


class Platform(ABC):
    """Host operating system capabilities."""

    name: str = "unknown"
    executable_suffix: str = ""

    @abstractmethod
    def default_sdk_root(self, home: Path) -> Path:
        """Where the Playdate SDK installs by default."""

    @abstractmethod
    def default_serial_device(self) -> Path:
        """Serial path the device exposes in run mode."""

    @abstractmethod
    def default_mount_point(self) -> Path:
        """Where the device's storage mounts in disk mode."""

    @abstractmethod
    def dynamic_library_name(self, stem: str) -> str:
        """File name Cargo gives a ``cdylib`` with the given stem."""

    @abstractmethod
    def simulator_command(self, sdk_root: Path, pdx_path: Path) -> List[str]:
        """Command that opens ``pdx_path`` in the Playdate Simulator."""

    @abstractmethod
    def eject_command(self, mount_point: Path) -> List[str]:
        """Command that unmounts the device volume."""

    @abstractmethod
    def reveal_command(self, path: Path) -> List[str]:
        """Command that shows ``path`` in the file browser."""

    @property
    def simulator_binary_name(self) -> str:
        """Name of the simulator library inside a bundle."""
        return "pdex" + Path(self.dynamic_library_name("pdex")).suffix

    def executable(self, directory: Path, name: str) -> Path:
        return directory / f"{name}{self.executable_suffix}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
