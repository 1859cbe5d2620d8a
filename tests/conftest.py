"""Shared fixtures: a temporary Cargo project, settings and a toolchain double."""

from __future__ import annotations

import shutil
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from crank.config import BuildConfig, Manifest, Settings
from crank.errors import ToolInvocationError
from crank.pipeline import Pipeline, Project
from crank.platform import LinuxPlatform
from crank.toolchain import DEVICE_TRIPLE, Toolchain
from crank.utils import artifact_stem


class RecordingToolchain(Toolchain):
    """Toolchain double that records calls and fakes their outputs.

    ``fail_on`` names an operation that raises ``ToolInvocationError``.
    """

    def __init__(self, platform=None, fail_on: Optional[str] = None):
        self.platform = platform or LinuxPlatform()
        self.fail_on = fail_on
        self.calls: List[str] = []
        self.configs: List[BuildConfig] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name == self.fail_on:
            raise ToolInvocationError([name], returncode=1)

    def build(self, config, project_root, manifest_path=None):
        self._record("build")
        self.configs.append(config)
        out_dir = Path(project_root) / "target"
        if config.is_device:
            out_dir = out_dir / DEVICE_TRIPLE
        out_dir = out_dir / config.profile.value
        if config.target.example is not None:
            stem = artifact_stem(config.target.example)
            out_dir = out_dir / "examples"
        else:
            stem = artifact_stem(Project(project_root).package_name)
        out_dir.mkdir(parents=True, exist_ok=True)
        if config.is_device:
            (out_dir / f"lib{stem}.a").write_bytes(b"static")
        else:
            (out_dir / self.platform.dynamic_library_name(stem)).write_bytes(b"dylib")

    def clean(self, project_root, manifest_path=None):
        self._record("clean")

    def compile(self, source: Path, output: Path, include_dirs: Sequence[Path]):
        self._record("compile")
        output.write_bytes(b"object")

    def link(self, objects: Sequence[Path], link_map: Path, output: Path):
        self._record("link")
        output.write_bytes(b"elf")

    def extract_binary(self, elf: Path, output: Path):
        self._record("extract_binary")
        output.write_bytes(b"pdex-binary")

    def run_bundle_compiler(self, source_dir: Path, destination: Path):
        self._record("run_bundle_compiler")
        shutil.copytree(source_dir, destination)


class RecordingDispatcher:
    def __init__(self):
        self.deployed = []

    def deploy(self, config, pdx_path, title):
        self.deployed.append((config.target_kind, pdx_path, title))


@pytest.fixture
def project_dir(tmp_path):
    """A Cargo project named ``hello-world`` with one asset."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "Cargo.toml").write_text('[package]\nname = "hello-world"\nversion = "0.1.0"\n')
    (root / "images").mkdir()
    (root / "images" / "a.png").write_bytes(b"\x89PNG\r\n\x1a\nfake-image")
    return root


@pytest.fixture
def project(project_dir):
    return Project(project_dir)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        sdk_root=tmp_path / "PlaydateSDK",
        serial_device=tmp_path / "dev" / "cu.usbmodemPD",
        mount_point=tmp_path / "Volumes" / "PLAYDATE",
        poll_interval=0.1,
    )


@pytest.fixture
def toolchain():
    return RecordingToolchain()


@pytest.fixture
def make_pipeline(project, settings):
    """Factory building a ``Pipeline`` against the temporary project."""

    def factory(config, manifest=None, toolchain=None, dispatcher=None):
        return Pipeline(
            config,
            project,
            manifest or Manifest(),
            settings,
            toolchain or RecordingToolchain(),
            LinuxPlatform(),
            dispatcher=dispatcher,
        )

    return factory
