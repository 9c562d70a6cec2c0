"""Configuration loading for tauria-tsgen (.tauria-tsgen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import TsGenError
from .logging import get_logger

DEFAULT_CONFIG_NAME = ".tauria-tsgen.yml"

logger = get_logger("config")


class ConfigError(TsGenError):
    """Raised when the configuration is missing, unreadable or invalid."""


@dataclass
class TsGenConfig:
    """Resolved settings for one generation run."""

    input_path: Path
    output_path: Path
    mock_api: bool = False
    workers: int = field(default_factory=lambda: min(8, os.cpu_count() or 1))
    exclude_paths: List[str] = field(default_factory=list)
    fail_on_warnings: bool = False
    templates_dir: Optional[Path] = None
    config_file: Optional[Path] = None


def load_config(
    config_path: Optional[Path] = None,
    *,
    input_path: Optional[str] = None,
    output_path: Optional[str] = None,
    mock_api: Optional[bool] = None,
    workers: Optional[int] = None,
    search_dir: Optional[Path] = None,
) -> TsGenConfig:
    """Merge the config file (if any) with command-line overrides.

    Without an explicit ``config_path`` the default file is looked up in the
    input directory, then in ``search_dir`` (the working directory). Paths from
    the file are relative to the file's directory.
    """
    config_file = _resolve_config_path(config_path, input_path, search_dir)
    data: Dict[str, Any] = {}
    base = Path.cwd()
    if config_file is not None:
        data = _read_config(config_file)
        base = config_file.parent
        logger.debug("Loaded configuration from %s", config_file)

    file_input = _as_str(data.get("input_path"))
    file_output = _as_str(data.get("output_path"))
    resolved_input = _as_path(input_path, Path.cwd()) or _as_path(file_input, base)
    resolved_output = _as_path(output_path, Path.cwd()) or _as_path(file_output, base)
    if resolved_input is None or resolved_output is None:
        raise ConfigError(
            "Either --config or both --input-path and --output-path must be provided"
        )

    file_workers = data.get("workers")
    if file_workers is not None and _as_int(file_workers) is None:
        raise ConfigError("workers must be an integer")
    worker_count = workers if workers is not None else _as_int(file_workers)
    if worker_count is not None and worker_count < 1:
        raise ConfigError("workers must be at least 1")

    templates = _as_str(data.get("templates_dir"))
    config = TsGenConfig(
        input_path=resolved_input,
        output_path=resolved_output,
        mock_api=mock_api if mock_api else bool(_as_bool(data.get("mock_api"))),
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        fail_on_warnings=bool(_as_bool(data.get("fail_on_warnings"))),
        templates_dir=_as_path(templates, base),
        config_file=config_file,
    )
    if worker_count is not None:
        config.workers = worker_count
    return config


def _resolve_config_path(
    config_path: Optional[Path], input_path: Optional[str], search_dir: Optional[Path]
) -> Optional[Path]:
    if config_path is not None:
        candidate = Path(config_path).expanduser()
        if candidate.is_dir():
            candidate = candidate / DEFAULT_CONFIG_NAME
        if not candidate.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        return candidate.resolve()

    directories = []
    if input_path:
        directories.append(Path(input_path).expanduser())
    directories.append(search_dir or Path.cwd())
    for directory in directories:
        candidate = directory / DEFAULT_CONFIG_NAME
        if candidate.is_file():
            return candidate.resolve()
    return None


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_path(value: Optional[str], base: Path) -> Optional[Path]:
    if not value:
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["ConfigError", "DEFAULT_CONFIG_NAME", "TsGenConfig", "load_config"]
