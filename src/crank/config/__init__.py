"""Configuration management with Pydantic validation."""

from __future__ import annotations

from crank.config.loader import SdkConfig, load_settings, parse_timeout
from crank.config.manifest import (
    MANIFEST_FILENAME,
    Manifest,
    Metadata,
    TargetSpec,
    load_manifest,
)
from crank.config.models import (
    BuildConfig,
    Profile,
    Settings,
    TargetKind,
    TargetSelector,
)

__all__ = [
    "BuildConfig",
    "MANIFEST_FILENAME",
    "Manifest",
    "Metadata",
    "Profile",
    "SdkConfig",
    "Settings",
    "TargetKind",
    "TargetSelector",
    "TargetSpec",
    "load_manifest",
    "load_settings",
    "parse_timeout",
]
