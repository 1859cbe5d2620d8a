"""Release packaging: device + simulator builds zipped into one archive."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable

from crank.config.models import BuildConfig, Profile, TargetKind
from crank.errors import FilesystemError
from crank.pipeline.orchestrator import Pipeline, PipelineResult
from crank.platform import Platform
from crank.toolchain.process import run_best_effort

logger = logging.getLogger(__name__)

PipelineFactory = Callable[[BuildConfig], Pipeline]


def create_archive(pdx_path: Path) -> Path:
    """Zip ``pdx_path`` into ``<pdx_path>.zip``, replacing any previous archive.

    Archive members are prefixed with the bundle directory name so the
    archive unpacks to ``<Title>.pdx/``.
    """
    archive_path = pdx_path.with_name(pdx_path.name + ".zip")
    try:
        if archive_path.exists():
            archive_path.unlink()
        created = shutil.make_archive(
            str(pdx_path),
            "zip",
            root_dir=pdx_path.parent,
            base_dir=pdx_path.name,
        )
    except OSError as e:
        raise FilesystemError(f"Cannot create archive {archive_path}: {e}", [archive_path]) from e
    return Path(created)


class Packager:
    """Builds release bundles for both targets and archives the result."""

    def __init__(self, pipeline_factory: PipelineFactory, platform: Platform, runner=run_best_effort):
        """Initialize packager.

        Args:
            pipeline_factory: Builds a ``Pipeline`` for a given config
            platform: Supplies the file-browser reveal command
            runner: Best-effort command runner used for reveal
        """
        self.pipeline_factory = pipeline_factory
        self.platform = platform
        self.runner = runner

    def package(self, base_config: BuildConfig, clean: bool = False, reveal: bool = False) -> Path:
        """Build device then simulator release bundles and zip the simulator one.

        The two runs share a staging directory; the device run must finish
        first so its ``pdex.bin`` ends up in the simulator bundle.

        Args:
            base_config: Target and features; kind and profile are overridden
            clean: Clean before the first build
            reveal: Show the archive in the file browser afterwards

        Returns:
            Path to ``<Title>.pdx.zip``
        """
        device = self._run(base_config, TargetKind.DEVICE, clean)
        simulator = self._run(base_config, TargetKind.SIMULATOR, False)

        if device.title != simulator.title:
            logger.warning(f"Device and simulator titles differ: {device.title!r} != {simulator.title!r}")

        pdx_path = simulator.pdx_path
        if not pdx_path.is_dir():
            raise FilesystemError(f"Simulator bundle not found: {pdx_path}", [pdx_path])

        archive = create_archive(pdx_path)
        logger.info(f"Created archive {archive}")

        if reveal:
            self.runner(self.platform.reveal_command(archive), "Revealing archive")
        return archive

    def _run(self, base_config: BuildConfig, kind: TargetKind, clean: bool) -> PipelineResult:
        config = base_config.with_target_kind(kind, Profile.RELEASE)
        logger.info(f"Packaging: {kind.value} release build")
        return self.pipeline_factory(config).run(clean=clean)
