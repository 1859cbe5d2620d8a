"""Resolve host settings from the environment and the Playdate SDK config."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from pydantic import ValidationError

from crank.config.models import Settings
from crank.errors import ConfigError
from crank.platform import Platform, current_platform

logger = logging.getLogger(__name__)

SDK_CONFIG_DIR = ".Playdate"
SDK_CONFIG_FILENAME = "config"
SDK_CONFIG_KEY_SDK_ROOT = "SDKRoot"

ENV_SDK_PATH = "PLAYDATE_SDK_PATH"
ENV_SERIAL_DEVICE = "CRANK_SERIAL_DEVICE"
ENV_MOUNT_POINT = "CRANK_MOUNT_POINT"
ENV_ARM_TOOLCHAIN = "CRANK_ARM_TOOLCHAIN"
ENV_DEVICE_TIMEOUT = "CRANK_DEVICE_TIMEOUT"


class SdkConfig:
    """The SDK's own ``~/.Playdate/config``: tab-separated key/value lines."""

    def __init__(self, values: Dict[str, str]) -> None:
        self.values = values

    @classmethod
    def parse(cls, text: str) -> "SdkConfig":
        values = {}
        for line in text.strip().splitlines():
            key, sep, value = line.partition("\t")
            if sep:
                values[key] = value
        return cls(values)

    @classmethod
    def load(cls, home: Path) -> Optional["SdkConfig"]:
        path = home / SDK_CONFIG_DIR / SDK_CONFIG_FILENAME
        if not path.is_file():
            return None
        try:
            return cls.parse(path.read_text(encoding="utf-8"))
        except OSError as e:
            logger.warning(f"Ignoring unreadable SDK config {path}: {e}")
            return None

    @property
    def sdk_root(self) -> Optional[Path]:
        value = self.values.get(SDK_CONFIG_KEY_SDK_ROOT)
        return Path(value) if value else None


def parse_timeout(raw: Optional[Union[str, float]]) -> Optional[float]:
    """Parse a device timeout; empty, ``0`` or ``none`` mean wait forever.

    Accepts the environment's text or a number given on the command line;
    both are checked the same way.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        if raw.strip().lower() in ("", "0", "none", "inf", "infinite"):
            return None
        try:
            timeout = float(raw)
        except ValueError as e:
            raise ConfigError(f"Invalid device timeout {raw!r}: expected seconds") from e
    else:
        timeout = float(raw)
    if timeout < 0:
        raise ConfigError(f"Invalid device timeout {raw!r}: must not be negative")
    return timeout or None


def resolve_sdk_root(environ: Mapping[str, str], home: Path, platform: Platform) -> Path:
    """SDK root from the environment, then the SDK config, then the default."""
    if environ.get(ENV_SDK_PATH):
        return Path(environ[ENV_SDK_PATH])

    sdk_config = SdkConfig.load(home)
    if sdk_config is not None and sdk_config.sdk_root is not None:
        return sdk_config.sdk_root

    return platform.default_sdk_root(home)


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    platform: Optional[Platform] = None,
    home: Optional[Path] = None,
    device_timeout: Optional[float] = None,
) -> Settings:
    """Resolve ``Settings`` once for this invocation.

    Args:
        environ: Environment to read overrides from (defaults to ``os.environ``)
        platform: Host platform supplying defaults
        home: Home directory holding ``.Playdate/config``
        device_timeout: Explicit timeout, taking precedence over the environment

    Returns:
        Validated settings

    Raises:
        ConfigError: If an override is malformed
    """
    environ = os.environ if environ is None else environ
    platform = platform or current_platform()
    home = home or Path.home()

    if device_timeout is None:
        device_timeout = parse_timeout(environ.get(ENV_DEVICE_TIMEOUT))
    else:
        device_timeout = parse_timeout(device_timeout)

    toolchain_dir = environ.get(ENV_ARM_TOOLCHAIN)

    try:
        settings = Settings(
            sdk_root=resolve_sdk_root(environ, home, platform),
            serial_device=environ.get(ENV_SERIAL_DEVICE) or platform.default_serial_device(),
            mount_point=environ.get(ENV_MOUNT_POINT) or platform.default_mount_point(),
            arm_toolchain_dir=toolchain_dir or None,
            device_timeout=device_timeout,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid settings:\n{e}") from e

    logger.debug(f"Settings: {settings}")
    return settings
