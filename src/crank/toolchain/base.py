"""Toolchain interface used by the pipeline.

The pipeline only ever talks to these six operations, so tests can swap in a
recording or failing double instead of spawning real compilers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from crank.config.models import BuildConfig


class Toolchain(ABC):
    """External build tools, each call blocking until the tool exits."""

    @abstractmethod
    def build(
        self,
        config: BuildConfig,
        project_root: Path,
        manifest_path: Optional[Path] = None,
    ) -> None:
        """Build the crate's object code for ``config``."""

    @abstractmethod
    def clean(self, project_root: Path, manifest_path: Optional[Path] = None) -> None:
        """Remove previous build output."""

    @abstractmethod
    def compile(self, source: Path, output: Path, include_dirs: Sequence[Path]) -> None:
        """Compile one C source into an object file for the device."""

    @abstractmethod
    def link(self, objects: Sequence[Path], link_map: Path, output: Path) -> None:
        """Link objects and static libraries into an ELF image."""

    @abstractmethod
    def extract_binary(self, elf: Path, output: Path) -> None:
        """Extract a flat loadable binary from an ELF image."""

    @abstractmethod
    def run_bundle_compiler(self, source_dir: Path, destination: Path) -> None:
        """Compile a staging directory into a ``.pdx`` package."""
