"""Filesystem helpers."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Tuple

from crank.errors import FilesystemError

logger = logging.getLogger(__name__)


def copy_tree(source: Path, destination: Path) -> int:
    """Copy the directory tree at ``source`` onto ``destination``.

    Walks iteratively with an explicit stack. A failing file or directory does
    not stop the walk; every failure is collected and reported together once
    the walk is done. Existing files at the destination are overwritten.

    Args:
        source: Directory to copy
        destination: Directory to copy into (created if missing)

    Returns:
        Number of files copied

    Raises:
        FilesystemError: Naming every path that could not be copied
    """
    source = Path(source)
    destination = Path(destination)
    if not source.is_dir():
        raise FilesystemError(f"Source directory not found: {source}", [source])

    failures: List[Tuple[Path, OSError]] = []
    copied = 0
    stack: List[Tuple[Path, Path]] = [(source, destination)]

    while stack:
        src_dir, dst_dir = stack.pop()
        try:
            dst_dir.mkdir(parents=True, exist_ok=True)
            entries = sorted(src_dir.iterdir())
        except OSError as e:
            failures.append((dst_dir, e))
            continue

        for entry in entries:
            target = dst_dir / entry.name
            if entry.is_dir():
                stack.append((entry, target))
                continue
            try:
                logger.debug(f"Copying {entry} to {target}")
                shutil.copyfile(entry, target)
                copied += 1
            except OSError as e:
                failures.append((entry, e))

    if failures:
        details = "\n".join(f"  {path}: {error}" for path, error in failures)
        raise FilesystemError(
            f"Failed to copy {len(failures)} path(s) from {source} to {destination}:\n{details}",
            [path for path, _ in failures],
        )
    return copied
