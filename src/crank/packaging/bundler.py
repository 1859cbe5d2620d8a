"""Bundle staging: the directory ``pdc`` compiles into a ``.pdx``.

A staging bundle holds:
- The loadable binary (``pdex.bin`` for the device, ``pdex.dylib`` and friends
  for the simulator)
- Declared assets at their declared relative paths
- ``pdxinfo`` metadata, when the target declares any
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from crank.config.manifest import Metadata, TargetSpec
from crank.errors import FilesystemError

logger = logging.getLogger(__name__)

DEVICE_BINARY_NAME = "pdex.bin"
PDXINFO_FILENAME = "pdxinfo"
PDX_SUFFIX = ".pdx"


class StagingBundle:
    """Staging directory for one target, named after its title."""

    def __init__(self, target_root: Path, title: str):
        """Initialize bundle.

        Args:
            target_root: Build output root (``<project>/target``)
            title: Word-cased display title
        """
        self.target_root = Path(target_root)
        self.title = title

        # Standard paths
        self.root = self.target_root / title
        self.pdx_path = self.target_root / f"{title}{PDX_SUFFIX}"
        self.archive_path = self.target_root / f"{title}{PDX_SUFFIX}.zip"
        self.pdxinfo = self.root / PDXINFO_FILENAME
        self.device_binary = self.root / DEVICE_BINARY_NAME

    def exists(self) -> bool:
        return self.root.is_dir()

    def __repr__(self) -> str:
        return f"StagingBundle({self.root})"


class BundleAssembler:
    """Fills a staging bundle from the project tree."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)

    def create(self, bundle: StagingBundle) -> StagingBundle:
        """Create the staging directory; an existing one is reused."""
        try:
            bundle.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot create staging directory {bundle.root}: {e}", [bundle.root]) from e
        logger.debug(f"Staging directory: {bundle.root}")
        return bundle

    def place_binary(self, bundle: StagingBundle, source: Path, name: str) -> Path:
        """Copy a built binary into the bundle under ``name``."""
        destination = bundle.root / name
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise FilesystemError(f"Cannot copy {source} to {destination}: {e}", [source]) from e
        logger.debug(f"Placed {source.name} as {name}")
        return destination

    def ensure_placeholder(self, bundle: StagingBundle, name: str) -> None:
        """Create an empty ``name`` in the bundle unless one is already there."""
        path = bundle.root / name
        if path.exists():
            return
        try:
            path.touch()
        except OSError as e:
            raise FilesystemError(f"Cannot create {path}: {e}", [path]) from e

    def copy_assets(self, bundle: StagingBundle, spec: Optional[TargetSpec]) -> int:
        """Copy every declared asset to its relative path in the bundle.

        Returns:
            Number of assets copied

        Raises:
            FilesystemError: On the first asset that is missing or unreadable
        """
        if spec is None:
            return 0

        for asset in spec.assets:
            source = self.project_root / asset
            destination = bundle.root / asset
            if not source.is_file():
                raise FilesystemError(f"Asset not found: {asset} (looked in {source})", [source])
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source, destination)
            except OSError as e:
                raise FilesystemError(f"Cannot copy asset {asset}: {e}", [source]) from e
            logger.debug(f"Copied asset {asset}")

        return len(spec.assets)

    def write_metadata(self, bundle: StagingBundle, metadata: Optional[Metadata]) -> Optional[Path]:
        """Write ``pdxinfo`` for ``metadata``; nothing is written without it."""
        if metadata is None:
            return None

        lines = metadata.pdxinfo_lines()
        try:
            bundle.pdxinfo.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"Cannot write {bundle.pdxinfo}: {e}", [bundle.pdxinfo]) from e
        logger.debug(f"Wrote {PDXINFO_FILENAME} with {len(lines)} field(s)")
        return bundle.pdxinfo

    def remove_package(self, bundle: StagingBundle) -> None:
        """Delete a previously compiled ``.pdx`` at the bundle's destination."""
        if not bundle.pdx_path.exists():
            return
        try:
            if bundle.pdx_path.is_dir():
                shutil.rmtree(bundle.pdx_path)
            else:
                bundle.pdx_path.unlink()
        except OSError as e:
            raise FilesystemError(f"Cannot remove old package {bundle.pdx_path}: {e}", [bundle.pdx_path]) from e
        logger.debug(f"Removed old package {bundle.pdx_path}")
