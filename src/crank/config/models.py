"""Pydantic models for build configuration and host settings."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TargetKind(str, Enum):
    """Where the bundle will run."""

    DEVICE = "device"
    SIMULATOR = "simulator"


class Profile(str, Enum):
    """Cargo build profile."""

    DEBUG = "debug"
    RELEASE = "release"


class TargetSelector(BaseModel):
    """Either the crate's library target or one of its examples."""

    model_config = ConfigDict(frozen=True)

    example: Optional[str] = None

    @classmethod
    def lib(cls) -> "TargetSelector":
        return cls()

    @classmethod
    def for_example(cls, name: str) -> "TargetSelector":
        return cls(example=name)

    @property
    def is_lib(self) -> bool:
        return self.example is None

    @field_validator("example")
    @classmethod
    def validate_example(cls, v: Optional[str]) -> Optional[str]:
        """Reject blank example names."""
        if v is not None and not v.strip():
            raise ValueError("example name must not be empty")
        return v


class BuildConfig(BaseModel):
    """Parameters of one pipeline run. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    target_kind: TargetKind = TargetKind.SIMULATOR
    profile: Profile = Profile.DEBUG
    features: FrozenSet[str] = Field(default_factory=frozenset)
    target: TargetSelector = Field(default_factory=TargetSelector.lib)

    @property
    def is_device(self) -> bool:
        return self.target_kind is TargetKind.DEVICE

    @property
    def is_release(self) -> bool:
        return self.profile is Profile.RELEASE

    def with_target_kind(self, target_kind: TargetKind, profile: Profile) -> "BuildConfig":
        """Copy of this config retargeted at ``target_kind`` with ``profile``."""
        return self.model_copy(update={"target_kind": target_kind, "profile": profile})


class Settings(BaseModel):
    """Host settings resolved once at startup and passed explicitly.

    Defaults for device paths and the SDK location come from the host
    ``Platform``; see ``crank.config.loader.load_settings`` for the
    environment overrides.
    """

    sdk_root: Path
    serial_device: Path
    mount_point: Path
    arm_toolchain_dir: Optional[Path] = None

    # Device polling
    poll_interval: float = Field(0.1, gt=0)
    mount_settle_ticks: int = Field(5, ge=0)
    serial_settle_ticks: int = Field(5, ge=0)
    device_timeout: Optional[float] = Field(None, gt=0)
    games_dir: str = "Games"

    @property
    def c_api_dir(self) -> Path:
        return self.sdk_root / "C_API"

    @property
    def setup_source(self) -> Path:
        return self.c_api_dir / "buildsupport" / "setup.c"

    @property
    def link_map(self) -> Path:
        return self.c_api_dir / "buildsupport" / "link_map.ld"

    @property
    def sdk_bin_dir(self) -> Path:
        return self.sdk_root / "bin"
