"""Wiring shared by the CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import ValidationError

from crank.config import BuildConfig, Manifest, Settings, load_manifest, load_settings
from crank.config.models import Profile, TargetKind, TargetSelector
from crank.deploy import DeviceDeployer, Dispatcher, SimulatorLauncher
from crank.errors import ConfigError
from crank.packaging.archive import Packager
from crank.pipeline import Pipeline, Project
from crank.platform import Platform, current_platform
from crank.toolchain import NativeToolchain, Toolchain
from crank.utils import setup_logger


def setup_logging(verbose: bool, quiet: bool, log_file: Optional[Path], json_format: bool) -> None:
    """Set up logging configuration."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    setup_logger(level=level, log_file=log_file, json_format=json_format)


def parse_features(values: Iterable[str]) -> List[str]:
    """Flatten ``--features a,b --features c`` into ``[a, b, c]``."""
    features = []
    for value in values:
        features.extend(part.strip() for part in value.split(",") if part.strip())
    return features


def make_build_config(
    device: bool,
    release: bool,
    example: Optional[str],
    features: Iterable[str],
) -> BuildConfig:
    """Build config from command-line flags.

    Raises:
        ConfigError: If the flags do not form a valid config
    """
    try:
        return BuildConfig(
            target_kind=TargetKind.DEVICE if device else TargetKind.SIMULATOR,
            profile=Profile.RELEASE if release else Profile.DEBUG,
            features=frozenset(parse_features(features)),
            target=TargetSelector.for_example(example) if example is not None else TargetSelector.lib(),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid build options:\n{e}") from e


@dataclass
class Session:
    """Everything resolved once per invocation."""

    settings: Settings
    platform: Platform
    project: Project
    manifest: Manifest
    toolchain: Toolchain

    @classmethod
    def create(
        cls,
        manifest_path: Optional[Path] = None,
        device_timeout: Optional[float] = None,
    ) -> "Session":
        platform = current_platform()
        settings = load_settings(platform=platform, device_timeout=device_timeout)
        project = Project.discover(manifest_path)
        return cls(
            settings=settings,
            platform=platform,
            project=project,
            manifest=load_manifest(project.root),
            toolchain=NativeToolchain(settings, platform),
        )

    def dispatcher(self) -> Dispatcher:
        return Dispatcher(
            SimulatorLauncher(self.settings, self.platform),
            DeviceDeployer(self.settings, self.platform),
        )

    def pipeline(self, config: BuildConfig, deployable: bool = False) -> Pipeline:
        return Pipeline(
            config,
            self.project,
            self.manifest,
            self.settings,
            self.toolchain,
            self.platform,
            dispatcher=self.dispatcher() if deployable else None,
        )

    def packager(self) -> Packager:
        return Packager(self.pipeline, self.platform)
