"""Locating the Cargo project being built."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Optional

from crank.errors import ConfigError

logger = logging.getLogger(__name__)

CARGO_MANIFEST = "Cargo.toml"


class Project:
    """A Cargo project root, optionally addressed by an explicit manifest path."""

    def __init__(self, root: Path, manifest_path: Optional[Path] = None):
        self.root = Path(root)
        self.manifest_path = manifest_path
        self._package_name: Optional[str] = None

    @classmethod
    def discover(cls, manifest_path: Optional[Path] = None, cwd: Optional[Path] = None) -> "Project":
        """Project for ``--manifest-path`` if given, else the working directory.

        Raises:
            ConfigError: If an explicit manifest path does not exist
        """
        if manifest_path is not None:
            try:
                resolved = Path(manifest_path).resolve(strict=True)
            except OSError as e:
                raise ConfigError(f"Cannot find manifest at path '{manifest_path}'") from e
            return cls(resolved.parent, resolved)
        return cls((cwd or Path.cwd()).resolve())

    @property
    def target_root(self) -> Path:
        return self.root / "target"

    @property
    def cargo_toml(self) -> Path:
        return self.manifest_path or self.root / CARGO_MANIFEST

    @property
    def package_name(self) -> str:
        """``[package].name`` from ``Cargo.toml``.

        Raises:
            ConfigError: If there is no readable Cargo.toml with a package name
        """
        if self._package_name is None:
            path = self.cargo_toml
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            except FileNotFoundError as e:
                raise ConfigError(f"No {CARGO_MANIFEST} found at {path}") from e
            except (OSError, tomllib.TOMLDecodeError) as e:
                raise ConfigError(f"Cannot read {path}: {e}") from e

            name = data.get("package", {}).get("name")
            if not isinstance(name, str) or not name:
                raise ConfigError(f"{path} has no [package] name; pass --example to pick a target")
            self._package_name = name
        return self._package_name

    def __repr__(self) -> str:
        return f"Project({self.root})"
