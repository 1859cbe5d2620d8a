"""crank: build and deploy orchestrator for Playdate games.

Turns a compiled Cargo crate into a console-loadable ``.pdx`` bundle and ships
it to the Playdate Simulator or to a connected device:
- Cargo and ARM toolchain invocation
- Bundle staging (assets, ``pdxinfo`` metadata) and ``pdc`` compilation
- Simulator launch and USB device deployment
- Release packaging into a distributable zip archive
"""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "Crank Team"

# Public API exports
from crank.config import (
    BuildConfig,
    Manifest,
    Metadata,
    Profile,
    Settings,
    TargetKind,
    TargetSelector,
    TargetSpec,
    load_manifest,
    load_settings,
)
from crank.errors import (
    ConfigError,
    CrankError,
    DeviceError,
    DeviceTimeoutError,
    FilesystemError,
    ToolInvocationError,
)
from crank.pipeline import Pipeline, PipelineResult, Project
from crank.utils import title_case

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "BuildConfig",
    "Manifest",
    "Metadata",
    "Profile",
    "Settings",
    "TargetKind",
    "TargetSelector",
    "TargetSpec",
    "load_manifest",
    "load_settings",
    # Errors
    "CrankError",
    "ConfigError",
    "DeviceError",
    "DeviceTimeoutError",
    "FilesystemError",
    "ToolInvocationError",
    # Pipeline
    "Pipeline",
    "PipelineResult",
    "Project",
    # Utils
    "title_case",
]
