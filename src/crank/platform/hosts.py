"""Concrete host platforms."""

from __future__ import annotations

import getpass
from pathlib import Path
from typing import List

from crank.platform.base import Platform


class MacOSPlatform(Platform):
    name = "macos"

    def default_sdk_root(self, home: Path) -> Path:
        return home / "Developer" / "PlaydateSDK"

    def default_serial_device(self) -> Path:
        return Path("/dev/cu.usbmodem00000000001A1")

    def default_mount_point(self) -> Path:
        return Path("/Volumes/PLAYDATE")

    def dynamic_library_name(self, stem: str) -> str:
        return f"lib{stem}.dylib"

    def simulator_command(self, sdk_root: Path, pdx_path: Path) -> List[str]:
        return ["open", "-a", "Playdate Simulator", str(pdx_path)]

    def eject_command(self, mount_point: Path) -> List[str]:
        return ["diskutil", "eject", str(mount_point)]

    def reveal_command(self, path: Path) -> List[str]:
        return ["open", "-R", str(path)]


class LinuxPlatform(Platform):
    name = "linux"

    def default_sdk_root(self, home: Path) -> Path:
        return home / "PlaydateSDK"

    def default_serial_device(self) -> Path:
        return Path("/dev/ttyACM0")

    def default_mount_point(self) -> Path:
        return Path("/run/media") / getpass.getuser() / "PLAYDATE"

    def dynamic_library_name(self, stem: str) -> str:
        return f"lib{stem}.so"

    def simulator_command(self, sdk_root: Path, pdx_path: Path) -> List[str]:
        return [str(self.executable(sdk_root / "bin", "PlaydateSimulator")), str(pdx_path)]

    def eject_command(self, mount_point: Path) -> List[str]:
        return ["eject", str(mount_point)]

    def reveal_command(self, path: Path) -> List[str]:
        return ["xdg-open", str(path.parent)]


class WindowsPlatform(Platform):
    name = "windows"
    executable_suffix = ".exe"

    def default_sdk_root(self, home: Path) -> Path:
        return home / "Documents" / "PlaydateSDK"

    def default_serial_device(self) -> Path:
        return Path(r"\\.\COM3")

    def default_mount_point(self) -> Path:
        return Path("D:\\")

    def dynamic_library_name(self, stem: str) -> str:
        return f"{stem}.dll"

    def simulator_command(self, sdk_root: Path, pdx_path: Path) -> List[str]:
        return [str(self.executable(sdk_root / "bin", "PlaydateSimulator")), str(pdx_path)]

    def eject_command(self, mount_point: Path) -> List[str]:
        drive = str(mount_point).rstrip("\\")
        script = (
            "(New-Object -comObject Shell.Application)"
            f".Namespace(17).ParseName('{drive}').InvokeVerb('Eject')"
        )
        return ["powershell", "-NoProfile", "-Command", script]

    def reveal_command(self, path: Path) -> List[str]:
        return ["explorer", f"/select,{path}"]
