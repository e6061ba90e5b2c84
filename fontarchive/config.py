"""
fontarchive – config.py
======================

Run configuration for the command-line driver.

Values come from three layers, later ones winning:

1. built-in defaults (see :class:`ArchiverConfig`);
2. an optional JSON config file (``~/.font_archiver_config`` by default);
3. command-line flags.

Example config file::

    {
      "fonts_base_dir": "/home/me/.local/share/fonts",
      "metadata_backend": "fonttools",
      "update_cache": false
    }

The classification core never reads this object; the driver passes the
base path and the metadata backend explicitly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from fontarchive.metadata import METADATA_BACKENDS

DEFAULT_FONTS_BASE_DIR = Path("/usr/share/fonts")
DEFAULT_CONFIG_FILE = Path.home() / ".font_archiver_config"

EXTRACT_DIR_NAME = ".font_temp_extract"
CLONE_DIR_NAME = ".github_fonts"

_PATH_FIELDS = {"fonts_base_dir", "work_dir", "extract_dir", "clone_dir"}
_BOOL_FIELDS = {"recursive", "dry_run", "verbose", "update_cache", "keep_temp"}


@dataclass
class ArchiverConfig:
    fonts_base_dir: Path = DEFAULT_FONTS_BASE_DIR
    work_dir: Path | None = None
    extract_dir: Path | None = None
    clone_dir: Path | None = None
    metadata_backend: str = "auto"
    recursive: bool = False
    dry_run: bool = False
    verbose: bool = False
    update_cache: bool = True
    keep_temp: bool = False

    def __post_init__(self) -> None:
        if self.work_dir is None:
            self.work_dir = Path.cwd()
        self.work_dir = Path(self.work_dir)
        self.fonts_base_dir = Path(self.fonts_base_dir)
        if self.extract_dir is None:
            self.extract_dir = self.work_dir / EXTRACT_DIR_NAME
        if self.clone_dir is None:
            self.clone_dir = self.work_dir / CLONE_DIR_NAME
        self.extract_dir = Path(self.extract_dir)
        self.clone_dir = Path(self.clone_dir)
        if self.metadata_backend not in METADATA_BACKENDS:
            raise ValueError(
                f"metadata_backend must be one of {', '.join(METADATA_BACKENDS)}, "
                f"got {self.metadata_backend!r}"
            )


def _coerce(key: str, value: Any) -> Any:
    if key in _PATH_FIELDS:
        if not isinstance(value, str):
            raise ValueError(f"Config key '{key}' must be a string path")
        return Path(value).expanduser()
    if key in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ValueError(f"Config key '{key}' must be true or false")
        return value
    if not isinstance(value, str):
        raise ValueError(f"Config key '{key}' must be a string")
    return value


def load_config_values(path: Path) -> dict[str, Any]:
    """Read and validate a JSON config file.

    Raises:
        ValueError: the file is not valid JSON, its root is not an object,
            or it contains unknown keys / wrongly typed values.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")

    known = {f.name for f in fields(ArchiverConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    return {key: _coerce(key, value) for key, value in data.items()}


def load_config(
    path: Path | None = None, overrides: dict[str, Any] | None = None
) -> ArchiverConfig:
    """Build an :class:`ArchiverConfig` from a config file plus overrides.

    ``path=None`` means the default location, which is optional; an explicit
    ``path`` must exist. ``None`` values in ``overrides`` are ignored so that
    unset CLI flags do not mask file values.
    """
    values: dict[str, Any] = {}

    if path is None:
        if DEFAULT_CONFIG_FILE.is_file():
            values.update(load_config_values(DEFAULT_CONFIG_FILE))
    else:
        if not path.is_file():
            raise ValueError(f"Config file not found: {path}")
        values.update(load_config_values(path))

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    return ArchiverConfig(**values)
