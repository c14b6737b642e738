"""Worktree naming and path validation helpers."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Iterable, Protocol

WORKTREES_DIRNAME = ".cc-slack-worktrees"
BRANCH_PREFIX = "claude-session-"


class HasPath(Protocol):
    path: str


def worktrees_root(repo_path: str) -> str:
    """Return the directory holding managed worktrees for ``repo_path``."""

    return f"{repo_path}/{WORKTREES_DIRNAME}"


def generate_branch_name(now: datetime | None = None) -> str:
    """Return a branch name derived from ``now`` in UTC.

    Naive datetimes are treated as UTC. Fractional seconds are dropped and
    the separators git and most filesystems dislike are replaced by dashes.

    Example:
        >>> generate_branch_name(datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc))
        'claude-session-2026-01-15T12-30-45'
    """

    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return BRANCH_PREFIX + moment.strftime("%Y-%m-%dT%H-%M-%S")


def is_valid_worktree_path(
    directories: Iterable[HasPath],
    repo_path: str,
    worktree_path: str,
) -> bool:
    """Return True when ``worktree_path`` is a managed worktree of ``repo_path``.

    ``repo_path`` must match a configured directory verbatim. The worktree
    path is normalized before the prefix check so ``..`` segments cannot
    escape the worktrees directory.
    """

    if not any(entry.path == repo_path for entry in directories):
        return False
    normalized = os.path.abspath(worktree_path)
    return normalized.startswith(worktrees_root(repo_path) + "/")


__all__ = [
    "BRANCH_PREFIX",
    "WORKTREES_DIRNAME",
    "generate_branch_name",
    "is_valid_worktree_path",
    "worktrees_root",
]
