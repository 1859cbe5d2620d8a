"""Build pipeline: crate → binary → staging bundle → ``.pdx``.

Stages run in a fixed order and the first failure stops the run; the staging
directory is left behind for inspection:

1. ``cargo build`` (after ``cargo clean`` when asked)
2. Device: compile the SDK's ``setup.c``, link it with the crate's static
   library and extract ``pdex.bin``. Simulator: pick up the crate's dynamic
   library.
3. Create the staging bundle and place the binary
4. Copy declared assets
5. Write ``pdxinfo``
6. Replace ``<Title>.pdx`` with a fresh ``pdc`` build
7. Deploy, when a run was requested
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from crank.config.manifest import Manifest, TargetSpec
from crank.config.models import BuildConfig, Settings
from crank.errors import ConfigError, FilesystemError
from crank.packaging.bundler import DEVICE_BINARY_NAME, BundleAssembler, StagingBundle
from crank.pipeline.project import Project
from crank.platform import Platform
from crank.toolchain.base import Toolchain
from crank.toolchain.native import DEVICE_TRIPLE
from crank.utils.naming import artifact_stem, title_case

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of a successful pipeline run."""

    config: BuildConfig
    target_name: str
    bundle: StagingBundle

    @property
    def title(self) -> str:
        return self.bundle.title

    @property
    def pdx_path(self) -> Path:
        return self.bundle.pdx_path


class Pipeline:
    """Runs every build stage for one ``BuildConfig``."""

    def __init__(
        self,
        config: BuildConfig,
        project: Project,
        manifest: Manifest,
        settings: Settings,
        toolchain: Toolchain,
        platform: Platform,
        dispatcher=None,
    ):
        """Initialize pipeline.

        Args:
            config: What to build
            project: Cargo project being built
            manifest: Asset and metadata declarations
            settings: Host settings (SDK location)
            toolchain: External tools
            platform: Host platform (library naming)
            dispatcher: Deployment dispatcher, needed only to run the result
        """
        self.config = config
        self.project = project
        self.manifest = manifest
        self.settings = settings
        self.toolchain = toolchain
        self.platform = platform
        self.dispatcher = dispatcher
        self.assembler = BundleAssembler(project.root)

    @property
    def target_name(self) -> str:
        if self.config.target.is_lib:
            return self.project.package_name
        return self.config.target.example

    @property
    def artifact_dir(self) -> Path:
        """Where cargo leaves artifacts for this config."""
        path = self.project.target_root
        if self.config.is_device:
            path = path / DEVICE_TRIPLE
        path = path / self.config.profile.value
        if not self.config.target.is_lib:
            path = path / "examples"
        return path

    def resolve_title(self, target_name: str, spec: Optional[TargetSpec]) -> str:
        """Bundle title: the metadata display name, else the word-cased target."""
        if spec is not None and spec.metadata is not None and spec.metadata.name:
            title = spec.metadata.name
        else:
            title = title_case(target_name)
        if not title or title in (".", "..") or Path(title).name != title:
            raise ConfigError(f"Cannot derive a bundle title from target {target_name!r}")
        return title

    def run(self, clean: bool = False, deploy: bool = False) -> PipelineResult:
        """Execute all stages.

        Args:
            clean: Run ``cargo clean`` first
            deploy: Hand the bundle to the dispatcher afterwards

        Returns:
            Result naming the compiled bundle

        Raises:
            ConfigError: Before any tool runs, if no target can be resolved
            ToolInvocationError: If an external tool fails
            FilesystemError: If staging fails
        """
        if deploy and self.dispatcher is None:
            raise ConfigError("A deployment dispatcher is required to run the bundle")

        target_name = self.target_name
        spec = self.manifest.get_target(target_name)
        title = self.resolve_title(target_name, spec)
        bundle = StagingBundle(self.project.target_root, title)
        logger.info(
            f"Building '{title}' for {self.config.target_kind.value} "
            f"({self.config.profile.value})"
        )

        if clean:
            logger.info("Cleaning previous build output")
            self.toolchain.clean(self.project.root, self.project.manifest_path)

        # 1. crate
        self.toolchain.build(self.config, self.project.root, self.project.manifest_path)

        # 2. loadable binary
        stem = artifact_stem(target_name)
        if self.config.is_device:
            binary, binary_name = self._build_device_binary(stem), DEVICE_BINARY_NAME
        else:
            binary, binary_name = self._locate_simulator_library(stem), self.platform.simulator_binary_name

        # 3. staging
        self.assembler.create(bundle)
        self.assembler.place_binary(bundle, binary, binary_name)
        if not self.config.is_device:
            self.assembler.ensure_placeholder(bundle, DEVICE_BINARY_NAME)

        # 4. assets, 5. metadata
        count = self.assembler.copy_assets(bundle, spec)
        if count:
            logger.info(f"Copied {count} asset(s)")
        self.assembler.write_metadata(bundle, spec.metadata if spec else None)

        # 6. pdc
        if not (bundle.root / binary_name).is_file():
            raise FilesystemError(f"Staging bundle is missing {binary_name}", [bundle.root / binary_name])
        self.assembler.remove_package(bundle)
        logger.info(f"Compiling {bundle.pdx_path.name}")
        self.toolchain.run_bundle_compiler(bundle.root, bundle.pdx_path)

        result = PipelineResult(config=self.config, target_name=target_name, bundle=bundle)
        logger.info(f"Bundle ready: {bundle.pdx_path}")

        # 7. deploy
        if deploy:
            self.dispatcher.deploy(self.config, result.pdx_path, title)

        return result

    def _build_device_binary(self, stem: str) -> Path:
        """Compile the startup shim, link it with the crate and extract the binary."""
        out_dir = self.artifact_dir
        static_lib = out_dir / f"lib{stem}.a"
        setup_obj = out_dir / "setup.o"
        elf = out_dir / f"{stem}.elf"
        binary = out_dir / f"{stem}.bin"

        logger.info("Compiling startup shim")
        self.toolchain.compile(self.settings.setup_source, setup_obj, [self.settings.c_api_dir])
        logger.info(f"Linking {elf.name}")
        self.toolchain.link([setup_obj, static_lib], self.settings.link_map, elf)
        self.toolchain.extract_binary(elf, binary)

        if not binary.is_file():
            raise FilesystemError(f"Expected device binary not produced: {binary}", [binary])
        return binary

    def _locate_simulator_library(self, stem: str) -> Path:
        library = self.artifact_dir / self.platform.dynamic_library_name(stem)
        if not library.is_file():
            raise FilesystemError(
                f"Simulator library not found: {library} (is the crate type cdylib?)",
                [library],
            )
        return library
