"""Worktree lifecycle and remote-control session launching."""

from .errors import (
    AuthorizationError,
    CcrlError,
    ClaudeNotFoundError,
    ConfigurationError,
    DeleteRequestError,
    GitNotFoundError,
    InvalidPathError,
    LaunchError,
    LaunchExitError,
    LaunchTimeoutError,
    PayloadDecodingError,
    WorktreeCreationError,
    WorktreeError,
    WorktreeRemovalError,
)
from .paths import WORKTREES_DIRNAME, generate_branch_name, is_valid_worktree_path
from .session import SessionLauncher, extract_remote_control_url, launch_remote_control
from .worktree import GitExecutionResult, GitRunner, WorktreeManager, create_worktree, remove_worktree

__all__ = [
    "AuthorizationError",
    "CcrlError",
    "ClaudeNotFoundError",
    "ConfigurationError",
    "DeleteRequestError",
    "GitExecutionResult",
    "GitNotFoundError",
    "GitRunner",
    "InvalidPathError",
    "LaunchError",
    "LaunchExitError",
    "LaunchTimeoutError",
    "PayloadDecodingError",
    "SessionLauncher",
    "WORKTREES_DIRNAME",
    "WorktreeCreationError",
    "WorktreeError",
    "WorktreeManager",
    "WorktreeRemovalError",
    "create_worktree",
    "extract_remote_control_url",
    "generate_branch_name",
    "is_valid_worktree_path",
    "launch_remote_control",
    "remove_worktree",
]
