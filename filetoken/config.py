# filetoken/config.py
"""
Configuration for the registry server and CLI.

Settings come from three layers, later ones winning:
  1. Defaults below
  2. An optional YAML file
  3. FILETOKEN_<FIELD> environment variables

Example config.yaml:
    data_dir: /var/lib/filetoken
    port: 8545
    require_auth: true
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .hashing import DEFAULT_ALGORITHM, SUPPORTED_ALGORITHMS

ENV_PREFIX = "FILETOKEN_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """Runtime settings."""
    data_dir: Path = Path("~/.filetoken")
    host: str = "127.0.0.1"
    port: int = 8545
    log_level: str = "INFO"
    hash_algorithm: str = DEFAULT_ALGORITHM
    require_auth: bool = False

    def __post_init__(self):
        self.data_dir = Path(self.data_dir).expanduser()
        self.port = int(self.port)
        self.log_level = str(self.log_level).upper()
        if self.hash_algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported hash_algorithm: {self.hash_algorithm}")

    @property
    def registry_dir(self) -> Path:
        return self.data_dir / "registry"

    @property
    def accounts_dir(self) -> Path:
        return self.data_dir / "accounts"


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def _coerce(name: str, value: Any) -> Any:
    if name == "require_auth":
        return _parse_bool(value)
    if name == "port":
        return int(value)
    return value


def load_settings(
    path: Path | str = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> Settings:
    """
    Build settings from a YAML file and the environment.

    Args:
        path: Optional YAML config file
        environ: Environment mapping (defaults to os.environ)
        **overrides: Explicit values (e.g. from CLI flags); None is ignored

    Returns:
        Settings

    Raises:
        ValueError: unknown keys or invalid values
        FileNotFoundError: path given but missing
    """
    known = {f.name for f in fields(Settings)}
    values: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid config file {path}: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        values.update(data)

    environ = os.environ if environ is None else environ
    for name in known:
        env_value = environ.get(ENV_PREFIX + name.upper())
        if env_value is not None:
            values[name] = env_value

    for name, value in overrides.items():
        if name not in known:
            raise ValueError(f"Unknown setting: {name}")
        if value is not None:
            values[name] = value

    return Settings(**{name: _coerce(name, value) for name, value in values.items()})
