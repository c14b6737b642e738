"""Load the directory list from a config file or the environment."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import DirectoryConfig

DEFAULT_CONFIG_FILENAME = "ccrl.config.json"
_YAML_SUFFIXES = {".yaml", ".yml"}


class DirectoryConfigError(RuntimeError):
    """Raised when the directory configuration cannot be parsed."""


def _parse_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise DirectoryConfigError(f"Failed to parse YAML in {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DirectoryConfigError(f"Failed to parse JSON in {path}: {exc}") from exc


def load_config(path: Path | None = None, dirs_env: str | None = None) -> DirectoryConfig:
    """Return the configured directories.

    The config file wins when it exists; otherwise ``dirs_env`` (the raw
    ``CCRL_DIRS`` value, a JSON list of ``{label, path}`` objects) is used.
    With neither, the directory list is empty.
    """

    config_path = Path(path) if path is not None else Path.cwd() / DEFAULT_CONFIG_FILENAME

    if config_path.exists():
        document = _parse_document(config_path)
        try:
            return DirectoryConfig.model_validate(document or {})
        except ValidationError as exc:
            raise DirectoryConfigError(f"Directory config validation error in {config_path}: {exc}") from exc

    if dirs_env:
        try:
            entries = json.loads(dirs_env)
        except json.JSONDecodeError as exc:
            raise DirectoryConfigError(f"CCRL_DIRS is not valid JSON: {exc}") from exc
        try:
            return DirectoryConfig.model_validate({"directories": entries})
        except ValidationError as exc:
            raise DirectoryConfigError(f"CCRL_DIRS validation error: {exc}") from exc

    return DirectoryConfig()


__all__ = ["DEFAULT_CONFIG_FILENAME", "DirectoryConfigError", "load_config"]
