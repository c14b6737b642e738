from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from ccrl.directories import DirectoryEntry
from ccrl.launcher.paths import generate_branch_name, is_valid_worktree_path, worktrees_root

BRANCH_RE = re.compile(r"^claude-session-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}$")

DIRECTORIES = [
    DirectoryEntry(label="my-app", path="/home/user/my-app"),
    DirectoryEntry(label="other", path="/home/user/other"),
]


def test_branch_name_uses_provided_timestamp() -> None:
    moment = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
    assert generate_branch_name(moment) == "claude-session-2026-01-15T12-30-45"


def test_branch_name_drops_fractional_seconds() -> None:
    name = generate_branch_name(datetime(2026, 2, 28, 5, 36, 37, 123000, tzinfo=timezone.utc))

    assert BRANCH_RE.match(name)
    assert ":" not in name
    assert "." not in name


def test_branch_name_converts_to_utc() -> None:
    tokyo = timezone(timedelta(hours=9))
    moment = datetime(2026, 1, 15, 21, 30, 45, tzinfo=tokyo)
    assert generate_branch_name(moment) == "claude-session-2026-01-15T12-30-45"


def test_branch_name_treats_naive_as_utc() -> None:
    assert generate_branch_name(datetime(2026, 1, 15, 12, 30, 45)) == "claude-session-2026-01-15T12-30-45"


def test_branch_name_defaults_to_now() -> None:
    assert BRANCH_RE.match(generate_branch_name())


def test_valid_worktree_path() -> None:
    assert is_valid_worktree_path(
        DIRECTORIES,
        "/home/user/my-app",
        "/home/user/my-app/.cc-slack-worktrees/claude-session-2026-01-01T00-00-00",
    )


def test_rejects_unconfigured_repo() -> None:
    assert not is_valid_worktree_path(
        DIRECTORIES,
        "/home/user/unknown-repo",
        "/home/user/unknown-repo/.cc-slack-worktrees/claude-session-2026-01-01T00-00-00",
    )


def test_repo_path_must_match_verbatim() -> None:
    assert not is_valid_worktree_path(
        DIRECTORIES,
        "/home/user/my-app/",
        "/home/user/my-app/.cc-slack-worktrees/claude-session-2026-01-01T00-00-00",
    )


def test_rejects_path_outside_worktrees_dir() -> None:
    assert not is_valid_worktree_path(DIRECTORIES, "/home/user/my-app", "/home/user/my-app/other-dir/x")


def test_rejects_traversal() -> None:
    assert not is_valid_worktree_path(
        DIRECTORIES,
        "/home/user/my-app",
        "/home/user/my-app/.cc-slack-worktrees/../../etc/passwd",
    )


def test_rejects_worktrees_dir_itself() -> None:
    assert not is_valid_worktree_path(DIRECTORIES, "/home/user/my-app", "/home/user/my-app/.cc-slack-worktrees/")


def test_rejects_sibling_prefix_directory() -> None:
    assert not is_valid_worktree_path(
        DIRECTORIES,
        "/home/user/my-app",
        "/home/user/my-app/.cc-slack-worktrees-evil/claude-session-2026-01-01T00-00-00",
    )


def test_empty_directories_always_invalid() -> None:
    assert not is_valid_worktree_path([], "/home/user/my-app", "/home/user/my-app/.cc-slack-worktrees/session")


def test_worktrees_root() -> None:
    assert worktrees_root("/srv/repo") == "/srv/repo/.cc-slack-worktrees"
