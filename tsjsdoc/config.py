"""Configuration loading for tsjsdoc (.tsjsdoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".tsjsdoc.yml"
DEFAULT_EXTENSIONS = (".js",)
DEFAULT_INDEX_FILENAME = "index"
DEFAULT_RETRY_LIMIT = 100


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or is invalid."""


@dataclass
class TsJsDocConfig:
    """Represents the settings defined in .tsjsdoc.yml."""

    root: Path
    module_root: Optional[Path] = None
    source_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    index_filename: str = DEFAULT_INDEX_FILENAME
    retry_limit: int = DEFAULT_RETRY_LIMIT
    exclude_paths: List[str] = field(default_factory=list)

    def validate(self) -> "TsJsDocConfig":
        """Fail fast on settings that would make every later step meaningless."""
        if self.module_root is not None and not self.module_root.is_dir():
            raise ConfigError(
                f'Directory "{self.module_root}" does not exist. '
                "Check the module_root option."
            )
        if not self.source_extensions:
            raise ConfigError("source_extensions must list at least one extension")
        if not self.index_filename:
            raise ConfigError("index_filename must not be empty")
        if self.retry_limit < 1:
            raise ConfigError("retry_limit must be a positive integer")
        return self


def load_config(config_path: Path, *, module_root: Optional[str] = None) -> TsJsDocConfig:
    """Load configuration from disk, applying an optional module root override."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = TsJsDocConfig(root=root)

    # A command-line override is relative to the working directory, the file
    # setting to the directory holding the config file.
    if module_root is not None:
        config.module_root = Path(module_root).expanduser().resolve()
    else:
        root_value = _as_str(data.get("module_root"))
        if root_value:
            config.module_root = (root / Path(root_value).expanduser()).resolve()

    extensions = _as_str_list(data.get("source_extensions"))
    if extensions:
        config.source_extensions = [_normalise_extension(ext) for ext in extensions]
    elif "source_extensions" in data:
        config.source_extensions = []

    index_filename = _as_str(data.get("index_filename"))
    if index_filename is not None:
        config.index_filename = index_filename

    retry_limit = data.get("retry_limit")
    if retry_limit is not None:
        if isinstance(retry_limit, bool) or not isinstance(retry_limit, int):
            raise ConfigError("retry_limit must be an integer")
        config.retry_limit = retry_limit

    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip()
    return value if value.startswith(".") else f".{value}"


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["ConfigError", "TsJsDocConfig", "load_config", "CONFIG_FILENAME"]
