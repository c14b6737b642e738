"""Error taxonomy for worktree and session launches."""

from __future__ import annotations


class CcrlError(RuntimeError):
    """Base class for launcher errors."""


class ConfigurationError(CcrlError):
    """Raised when required credentials or settings are missing."""


class GitNotFoundError(CcrlError):
    """Raised when the git executable cannot be located."""


class ClaudeNotFoundError(CcrlError):
    """Raised when the claude executable cannot be located."""


class WorktreeError(CcrlError):
    """Base class for failed git worktree commands."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class WorktreeCreationError(WorktreeError):
    """Raised when ``git worktree add`` fails."""


class WorktreeRemovalError(WorktreeError):
    """Raised when removing a worktree or its branch fails."""


class LaunchError(CcrlError):
    """Base class for failed remote-control launches."""


class LaunchTimeoutError(LaunchError):
    """Raised when no remote-control URL appears before the deadline."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Timed out waiting for Remote Control URL after {timeout:g}s")
        self.timeout = timeout


class LaunchExitError(LaunchError):
    """Raised when claude exits or fails to start before printing a URL."""

    def __init__(
        self,
        *,
        returncode: int | None = None,
        spawn_error: BaseException | None = None,
    ) -> None:
        if spawn_error is not None:
            message = f"Failed to start claude: {spawn_error}"
        else:
            message = f"claude exited with code {returncode} before URL was found"
        super().__init__(message)
        self.returncode = returncode
        self.spawn_error = spawn_error


class DeleteRequestError(CcrlError):
    """Base class for rejected worktree deletion requests."""


class AuthorizationError(DeleteRequestError):
    """Raised when someone other than the creator asks to delete a worktree."""


class InvalidPathError(DeleteRequestError):
    """Raised when a deletion target is not a managed worktree path."""


class PayloadDecodingError(DeleteRequestError):
    """Raised when a deletion token cannot be parsed."""


__all__ = [
    "AuthorizationError",
    "CcrlError",
    "ClaudeNotFoundError",
    "ConfigurationError",
    "DeleteRequestError",
    "GitNotFoundError",
    "InvalidPathError",
    "LaunchError",
    "LaunchExitError",
    "LaunchTimeoutError",
    "PayloadDecodingError",
    "WorktreeCreationError",
    "WorktreeError",
    "WorktreeRemovalError",
]
