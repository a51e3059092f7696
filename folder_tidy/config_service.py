"""Configuration management for Folder Tidy.

This module centralises all logic related to finding and loading
configuration files.  It supports both AppData and portable
installation modes, resolves the appropriate configuration
directory, and exposes helper functions to read/write JSON
configuration files with JSON schema validation.

The configuration is stored in a JSON file called ``config.json``.
Clients can override the configuration location by passing
``--portable`` to the CLI or by placing a ``portable.flag`` file
alongside the running script.  Portable mode always prioritises
using files from the application directory.

When running in AppData mode on Windows the configuration lives
under ``%APPDATA%\\FolderTidy``; on other systems the directory
defaults to ``$XDG_CONFIG_HOME/FolderTidy`` or ``~/.config/FolderTidy``.

The schema ships with the package (``schemas/config.schema.json``) and
is checked with ``jsonschema``.  An invalid file on load produces a
warning and the defaults; an invalid payload on save raises
``ValueError``.

Example usage::

    from folder_tidy.config_service import ConfigService

    config_service = ConfigService(app_dir=Path.cwd())
    cfg = config_service.load_config()
    cfg["workers"] = 4
    config_service.save_config(cfg)
"""

from __future__ import annotations

import json
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema


APP_NAME = "FolderTidy"
SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

DEFAULT_CONFIG: Dict[str, Any] = {
    "workers": 1,
    "hash_algorithm": "sha256",
    "affinity_min_files": 3,
    "extra_extensions": {},
    "log_to_console": True,
}


def _get_appdata_root(app_name: str = APP_NAME) -> Path:
    """Return the platform‑specific base directory for config files."""
    system = platform.system().lower()
    if system == "windows":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / app_name
        return Path.home() / f"AppData/Roaming/{app_name}"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / app_name
    return Path.home() / ".config" / app_name


def _load_json(file_path: Path) -> Any:
    if not file_path.exists():
        return None
    with file_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _save_json(data: Any, file_path: Path) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _validate_json(data: Any, schema_path: Path) -> None:
    """Validate ``data`` against the schema at ``schema_path``."""
    schema = _load_json(schema_path)
    if not schema:
        return
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc.message}")


def with_defaults(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    merged = dict(DEFAULT_CONFIG)
    merged.update(config or {})
    return merged


def validate_config(config: Optional[Dict[str, Any]], schema_path: Path = SCHEMA_DIR / "config.schema.json") -> Dict[str, Any]:
    """Return ``config`` merged over the defaults, raising ``ValueError`` if invalid."""
    merged = with_defaults(config)
    _validate_json(merged, schema_path)
    return merged


@dataclass
class ConfigService:
    """Resolve and manage Folder Tidy configuration."""

    app_dir: Path
    portable_flag_filename: str = "portable.flag"
    config_filename: str = "config.json"
    schema_path: Path = SCHEMA_DIR / "config.schema.json"
    _cached_mode: Optional[bool] = field(default=None, init=False, repr=False)

    def _portable_flag_exists(self) -> bool:
        return (Path(self.app_dir) / self.portable_flag_filename).exists()

    def detect_mode(self, cli_portable: bool = False) -> bool:
        """Return ``True`` if portable mode should be used.

        Portable mode is selected if a ``portable.flag`` file exists in
        the application directory or ``cli_portable`` is truthy.  The
        check is performed once per instance and cached.
        """
        if self._cached_mode is None:
            self._cached_mode = bool(cli_portable) or self._portable_flag_exists()
        return self._cached_mode

    def get_config_dir(self, cli_portable: bool = False) -> Path:
        if self.detect_mode(cli_portable=cli_portable):
            return Path(self.app_dir)
        return _get_appdata_root()

    def get_config_path(self, cli_portable: bool = False) -> Path:
        return self.get_config_dir(cli_portable) / self.config_filename

    def load_config(self, cli_portable: bool = False) -> Dict[str, Any]:
        """Load configuration merged over :data:`DEFAULT_CONFIG`."""
        cfg_path = self.get_config_path(cli_portable)
        try:
            data = _load_json(cfg_path)
        except (OSError, json.JSONDecodeError) as exc:
            print(f"Warning: could not read {cfg_path}: {exc}. Falling back to defaults.")
            return dict(DEFAULT_CONFIG)
        if data is None:
            return dict(DEFAULT_CONFIG)
        try:
            _validate_json(data, self.schema_path)
        except ValueError as exc:
            print(f"Warning: {exc}. Falling back to defaults.")
            return dict(DEFAULT_CONFIG)
        return with_defaults(data)

    def save_config(self, config: Dict[str, Any], cli_portable: bool = False) -> None:
        """Write configuration to disk, validating against the schema first."""
        _validate_json(config, self.schema_path)
        _save_json(config, self.get_config_path(cli_portable))
