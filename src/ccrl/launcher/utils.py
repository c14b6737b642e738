"""Utility helpers for launcher subprocesses."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Mapping

from .errors import CcrlError

_SANITIZED_VARS = {
    "PYTHONHOME",
    "PYTHONPATH",
    "VIRTUAL_ENV",
    "PIP_RESPECT_VIRTUALENV",
    "SLACK_BOT_TOKEN",
    "SLACK_APP_TOKEN",
}


def resolve_executable(name: str, explicit: Path | None, error_cls: type[CcrlError]) -> Path:
    """Return ``explicit`` if it names a file, else ``name`` looked up on PATH.

    Raises ``error_cls`` when neither yields an executable.
    """

    if explicit is not None:
        candidate = Path(explicit)
        if not candidate.is_file():
            raise error_cls(f"{name} executable not found at {candidate}")
        return candidate

    found = shutil.which(name)
    if found is None:
        raise error_cls(f"{name} executable not found on PATH")
    return Path(found)


def sanitize_environment(additional: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return the bot's environment without interpreter and Slack credential variables."""

    env = dict(os.environ)
    for key in _SANITIZED_VARS:
        env.pop(key, None)
    if additional:
        env.update(additional)
    return env
