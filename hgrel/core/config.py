"""Typed configuration loading and access.

Configuration is optional. Lookup order:
1. explicit path (``--config``)
2. ``HGREL_CONFIG`` environment variable
3. ``hgrel.toml`` in the current directory, when present
4. built-in defaults

The ``hg`` executable can additionally be overridden with ``HGREL_HG``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from hgrel.platform.detection import detect_platform

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "HgConfig",
    "ReleaseConfig",
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "HG_ENV_VAR",
    "default_hg_executable",
    "load_config",
    "resolve_config",
]

CONFIG_FILE_NAME = "hgrel.toml"
CONFIG_ENV_VAR = "HGREL_CONFIG"
HG_ENV_VAR = "HGREL_HG"

DEFAULT_CLONE_DIR = "_repo_"
DEFAULT_MANIFEST = "releasefiles.txt"
DEFAULT_EXCLUDE_PREFIX = ".hg"


def default_hg_executable() -> str:
    return detect_platform().exe_name("hg")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class HgConfig:
    """Mercurial executable settings."""

    executable: str = field(default_factory=default_hg_executable)


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Names used inside the release directory.

    Attributes:
        clone_dir: Temporary clone subdirectory of the release directory.
        manifest: Pattern listfile written inside the clone.
        exclude_prefix: Changed paths starting with this prefix
            (case-insensitive) are never released.
    """

    clone_dir: str = DEFAULT_CLONE_DIR
    manifest: str = DEFAULT_MANIFEST
    exclude_prefix: str = DEFAULT_EXCLUDE_PREFIX


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    hg: HgConfig = field(default_factory=HgConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        hg: StrDict = get_table(data, "hg") or {}
        release: StrDict = get_table(data, "release") or {}

        for key in ("clone_dir", "manifest"):
            name = get_str(release, key)
            if name is not None and ("/" in name or "\\" in name):
                raise ValueError(f"release.{key} must be a plain file name, got {name!r}")

        return cls(
            hg=HgConfig(executable=get_str(hg, "executable") or default_hg_executable()),
            release=ReleaseConfig(
                clone_dir=get_str(release, "clone_dir") or DEFAULT_CLONE_DIR,
                manifest=get_str(release, "manifest") or DEFAULT_MANIFEST,
                exclude_prefix=get_str(release, "exclude_prefix") or DEFAULT_EXCLUDE_PREFIX,
            ),
        )

    def with_executable(self, executable: str) -> Config:
        return replace(self, hg=HgConfig(executable=executable))


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def resolve_config(
    explicit: Path | None = None,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[Config, ConfigError]:
    """Locate and load configuration following the documented lookup order.

    An explicitly named file (option or environment variable) must exist;
    the implicit ``hgrel.toml`` is only read when present.
    """
    environ = os.environ if env is None else env
    base = cwd or Path.cwd()

    path = explicit
    if path is None and environ.get(CONFIG_ENV_VAR):
        path = Path(environ[CONFIG_ENV_VAR])

    if path is not None:
        result = load_config(path)
    elif (base / CONFIG_FILE_NAME).is_file():
        result = load_config(base / CONFIG_FILE_NAME)
    else:
        result = Ok(Config())

    if isinstance(result, Err):
        return result

    config = result.value
    hg_override = environ.get(HG_ENV_VAR, "").strip()
    if hg_override:
        config = config.with_executable(hg_override)
    return Ok(config)
