"""Project manifest: per-target asset lists and bundle metadata.

The manifest lives in ``Crank.yaml`` at the project root::

    targets:
      hello_world:
        assets:
          - images/player.png
        metadata:
          name: Hello World
          version: "1.0"

A missing file is an empty manifest.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from crank.errors import ConfigError

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "Crank.yaml"

# (model field, pdxinfo key) in the order pdxinfo lines are written.
PDXINFO_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "name"),
    ("author", "author"),
    ("description", "description"),
    ("bundle_id", "bundleID"),
    ("version", "version"),
    ("build_number", "buildNumber"),
    ("image_path", "imagePath"),
    ("launch_sound_path", "launchSoundPath"),
)


class ManifestLoader(yaml.SafeLoader):
    """Safe loader that keeps numeric scalars exactly as written.

    ``version: 1.10`` stays ``"1.10"`` and ``name: 2048`` stays ``"2048"``;
    pydantic still converts ``build_number: 7`` to an int.
    """


def _construct_raw_scalar(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> str:
    return loader.construct_scalar(node)


ManifestLoader.add_constructor("tag:yaml.org,2002:int", _construct_raw_scalar)
ManifestLoader.add_constructor("tag:yaml.org,2002:float", _construct_raw_scalar)


class Metadata(BaseModel):
    """Display metadata written to ``pdxinfo``. Unset fields stay unset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    bundle_id: Optional[str] = None
    version: Optional[str] = None
    build_number: Optional[int] = None
    image_path: Optional[str] = None
    launch_sound_path: Optional[str] = None

    @field_validator("*")
    @classmethod
    def validate_single_line(cls, v: Any) -> Any:
        """Each field becomes exactly one ``key=value`` line in pdxinfo."""
        if isinstance(v, str) and ("\n" in v or "\r" in v):
            raise ValueError("metadata values must fit on a single line")
        return v

    def pdxinfo_lines(self) -> List[str]:
        """``key=value`` lines for every set field, in pdxinfo order."""
        lines = []
        for field, key in PDXINFO_FIELDS:
            value = getattr(self, field)
            if value is not None:
                lines.append(f"{key}={value}")
        return lines


class TargetSpec(BaseModel):
    """Assets and metadata declared for one target."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    assets: List[str] = Field(default_factory=list)
    metadata: Optional[Metadata] = None

    @field_validator("assets")
    @classmethod
    def validate_assets(cls, v: List[str]) -> List[str]:
        """Asset paths must stay inside the project."""
        for asset in v:
            path = Path(asset)
            if path.is_absolute() or ".." in path.parts:
                raise ValueError(f"asset path must be relative to the project: {asset}")
        return v


class Manifest(BaseModel):
    """All targets declared by a project. Read-only once loaded."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    targets: Dict[str, TargetSpec] = Field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str, source: str = "<manifest>") -> "Manifest":
        """Parse manifest YAML.

        Raises:
            ConfigError: If the text is not valid YAML or not a valid manifest
        """
        try:
            data = yaml.load(text, Loader=ManifestLoader)
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed manifest {source}: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Malformed manifest {source}: expected a mapping at the top level")

        # ``targets:`` with nothing under it
        if data.get("targets", {}) is None:
            data = {**data, "targets": {}}

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid manifest {source}:\n{e}") from e

    def get_target(self, name: str) -> Optional[TargetSpec]:
        return self.targets.get(name)


def load_manifest(project_root: Path) -> Manifest:
    """Load ``Crank.yaml`` from ``project_root``; absent means empty."""
    path = Path(project_root) / MANIFEST_FILENAME
    if not path.exists():
        logger.debug(f"No manifest at {path}, using empty manifest")
        return Manifest()

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read manifest {path}: {e}") from e

    manifest = Manifest.from_text(text, source=str(path))
    logger.debug(f"Loaded manifest {path} with {len(manifest.targets)} target(s)")
    return manifest
