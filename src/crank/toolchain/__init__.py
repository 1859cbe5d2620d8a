"""External toolchain adapters."""

from crank.toolchain.base import Toolchain
from crank.toolchain.native import DEVICE_TRIPLE, NativeToolchain, cargo_build_args
from crank.toolchain.process import run_best_effort, run_command

__all__ = [
    "DEVICE_TRIPLE",
    "NativeToolchain",
    "Toolchain",
    "cargo_build_args",
    "run_best_effort",
    "run_command",
]
