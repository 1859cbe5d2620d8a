"""Toolchain backed by cargo, the ARM GNU toolchain and the SDK's ``pdc``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from crank.config.models import BuildConfig, Settings
from crank.platform import Platform
from crank.toolchain.base import Toolchain
from crank.toolchain.process import run_command

logger = logging.getLogger(__name__)

DEVICE_TRIPLE = "thumbv7em-none-eabihf"

CPU_FLAGS = [
    "-mthumb",
    "-mcpu=cortex-m7",
    "-mfloat-abi=hard",
    "-mfpu=fpv4-sp-d16",
    "-D__FPU_USED=1",
]

COMPILE_FLAGS = [
    "-g", "-c", *CPU_FLAGS,
    "-O2",
    "-falign-functions=16",
    "-fomit-frame-pointer",
    "-gdwarf-2",
    "-Wall",
    "-Wno-unused",
    "-Wstrict-prototypes",
    "-Wno-unknown-pragmas",
    "-fverbose-asm",
    "-ffunction-sections",
    "-fdata-sections",
    "-DTARGET_PLAYDATE=1",
    "-DTARGET_EXTENSION=1",
]

LINK_FLAGS = [*CPU_FLAGS, "-Wl,--gc-sections,--no-warn-mismatch"]

ARM_TOOLCHAIN_HINT = "install the GNU Arm Embedded toolchain or set CRANK_ARM_TOOLCHAIN"
SDK_HINT = "check the Playdate SDK installation or set PLAYDATE_SDK_PATH"


def cargo_build_args(config: BuildConfig, manifest_path: Optional[Path] = None) -> List[str]:
    """Arguments for ``cargo build`` matching ``config``."""
    args = ["cargo", "build"]
    if manifest_path is not None:
        args += ["--manifest-path", str(manifest_path)]
    if config.target.is_lib:
        args.append("--lib")
    else:
        args += ["--example", config.target.example]
    if config.is_release:
        args.append("--release")
    if config.is_device:
        args += ["--target", DEVICE_TRIPLE]
    if config.features:
        args += ["--features", ",".join(sorted(config.features))]
    return args


class NativeToolchain(Toolchain):
    """Runs the real tools as subprocesses."""

    def __init__(self, settings: Settings, platform: Platform) -> None:
        self.settings = settings
        self.platform = platform

    def _arm_tool(self, name: str) -> str:
        if self.settings.arm_toolchain_dir is not None:
            return str(self.platform.executable(self.settings.arm_toolchain_dir, name))
        return name

    def build(
        self,
        config: BuildConfig,
        project_root: Path,
        manifest_path: Optional[Path] = None,
    ) -> None:
        args = cargo_build_args(config, manifest_path)
        logger.info(f"Building {config.target_kind.value} {config.profile.value} artifacts")
        run_command(args, cwd=project_root, hint="install Rust and cargo from https://rustup.rs")

    def clean(self, project_root: Path, manifest_path: Optional[Path] = None) -> None:
        args = ["cargo", "clean"]
        if manifest_path is not None:
            args += ["--manifest-path", str(manifest_path)]
        run_command(args, cwd=project_root)

    def compile(self, source: Path, output: Path, include_dirs: Sequence[Path]) -> None:
        args = [self._arm_tool("arm-none-eabi-gcc"), *COMPILE_FLAGS, str(source)]
        for include_dir in include_dirs:
            args += ["-I", str(include_dir)]
        args += ["-o", str(output)]
        run_command(args, quiet=True, hint=ARM_TOOLCHAIN_HINT)

    def link(self, objects: Sequence[Path], link_map: Path, output: Path) -> None:
        args = [self._arm_tool("arm-none-eabi-gcc"), *map(str, objects), *LINK_FLAGS]
        args += ["-T", str(link_map), "-o", str(output)]
        run_command(args, quiet=True, hint=ARM_TOOLCHAIN_HINT)

    def extract_binary(self, elf: Path, output: Path) -> None:
        args = [self._arm_tool("arm-none-eabi-objcopy"), "-O", "binary", str(elf), str(output)]
        run_command(args, quiet=True, hint=ARM_TOOLCHAIN_HINT)

    def run_bundle_compiler(self, source_dir: Path, destination: Path) -> None:
        pdc = self.platform.executable(self.settings.sdk_bin_dir, "pdc")
        run_command([pdc, source_dir, destination], capture=True, hint=SDK_HINT)
