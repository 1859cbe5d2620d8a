"""Host platform selection."""

from __future__ import annotations

import sys
from typing import Optional

from crank.platform.base import Platform
from crank.platform.hosts import LinuxPlatform, MacOSPlatform, WindowsPlatform


def current_platform(system: Optional[str] = None) -> Platform:
    """Return the ``Platform`` for ``system`` (defaults to ``sys.platform``)."""
    system = system or sys.platform
    if system == "darwin":
        return MacOSPlatform()
    if system.startswith("win"):
        return WindowsPlatform()
    return LinuxPlatform()


__all__ = [
    "LinuxPlatform",
    "MacOSPlatform",
    "Platform",
    "WindowsPlatform",
    "current_platform",
]
