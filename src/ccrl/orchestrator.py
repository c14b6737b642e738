"""Compose worktree creation and session launching into user actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .directories import DirectoryEntry
from .launcher import (
    AuthorizationError,
    InvalidPathError,
    LaunchError,
    PayloadDecodingError,
    SessionLauncher,
    WorktreeCreationError,
    WorktreeManager,
    is_valid_worktree_path,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LaunchRequest:
    """A single launch attempt submitted by a user."""

    repo_path: str | None
    requesting_user_id: str
    create_worktree: bool = False
    session_name: str | None = None


@dataclass(slots=True)
class LaunchOutcome:
    """What a launch produced, for callers that need more than the notifications."""

    target_dir: str
    url: str | None = None
    worktree_path: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.url is not None


class DeleteRequest(BaseModel):
    """The deletion token round-tripped through the chat UI.

    Serialized with camelCase keys, the format the delete button value uses.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    repo_path: str = Field(alias="repoPath", min_length=1)
    worktree_path: str = Field(alias="worktreePath", min_length=1)
    user_id: str = Field(alias="userId", min_length=1)

    def encode(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def decode(cls, token: str) -> "DeleteRequest":
        try:
            return cls.model_validate_json(token)
        except ValidationError as exc:
            raise PayloadDecodingError(f"invalid action payload: {exc.error_count()} validation error(s)") from exc


class Notifier(Protocol):
    """Receives progress of a launch, usually by posting into a chat thread."""

    async def worktree_created(self, worktree_path: str, delete_token: str) -> None:
        ...

    async def launch_ready(self, url: str) -> None:
        ...

    async def launch_failed(self, error: Exception) -> None:
        ...


class LaunchOrchestrator:
    """Run the launch and teardown use cases against the configured directories."""

    def __init__(
        self,
        directories: Callable[[], Sequence[DirectoryEntry]],
        *,
        worktrees: WorktreeManager,
        launcher: SessionLauncher,
    ) -> None:
        self._directories = directories
        self._worktrees = worktrees
        self._launcher = launcher

    @property
    def launcher(self) -> SessionLauncher:
        return self._launcher

    async def launch(self, request: LaunchRequest, notifier: Notifier) -> LaunchOutcome | None:
        if not request.repo_path:
            return None

        outcome = LaunchOutcome(target_dir=request.repo_path)
        log_extra = {
            "repo_path": request.repo_path,
            "user_id": request.requesting_user_id,
            "session_name": request.session_name,
            "create_worktree": request.create_worktree,
        }
        logger.info("Launch requested", extra=log_extra)

        if request.create_worktree:
            try:
                worktree_path = await self._worktrees.create_worktree(request.repo_path)
            except WorktreeCreationError as exc:
                logger.warning("Worktree creation failed", extra={**log_extra, "error": str(exc)})
                outcome.error = exc
                await notifier.launch_failed(exc)
                return outcome

            outcome.worktree_path = worktree_path
            outcome.target_dir = worktree_path
            token = DeleteRequest(
                repo_path=request.repo_path,
                worktree_path=worktree_path,
                user_id=request.requesting_user_id,
            ).encode()
            await notifier.worktree_created(worktree_path, token)

        try:
            outcome.url = await self._launcher.launch(outcome.target_dir)
        except LaunchError as exc:
            logger.warning("Launch failed", extra={**log_extra, "target_dir": outcome.target_dir, "error": str(exc)})
            outcome.error = exc
            await notifier.launch_failed(exc)
            return outcome

        await notifier.launch_ready(outcome.url)
        return outcome

    async def delete(self, token: str, requesting_user_id: str) -> DeleteRequest:
        """Remove the worktree named by ``token`` on behalf of ``requesting_user_id``.

        Raises :class:`PayloadDecodingError`, :class:`AuthorizationError` or
        :class:`InvalidPathError` before touching git; git failures propagate
        as :class:`~ccrl.launcher.WorktreeRemovalError`.
        """

        request = self.authorize_delete(token, requesting_user_id)
        await self.remove(request)
        return request

    def authorize_delete(self, token: str, requesting_user_id: str) -> DeleteRequest:
        """Decode ``token`` and check the requester may delete what it names."""

        request = DeleteRequest.decode(token)

        if requesting_user_id != request.user_id:
            logger.warning(
                "Unauthorized worktree deletion attempt",
                extra={"user_id": requesting_user_id, "owner_id": request.user_id, "worktree_path": request.worktree_path},
            )
            raise AuthorizationError("You are not authorized to delete this worktree.")

        if not is_valid_worktree_path(self._directories(), request.repo_path, request.worktree_path):
            logger.warning(
                "Rejected invalid worktree path",
                extra={"repo_path": request.repo_path, "worktree_path": request.worktree_path},
            )
            raise InvalidPathError("Invalid worktree path.")

        return request

    async def remove(self, request: DeleteRequest) -> None:
        await self._worktrees.remove_worktree(request.repo_path, request.worktree_path)
        logger.info(
            "Worktree deleted",
            extra={"repo_path": request.repo_path, "worktree_path": request.worktree_path, "user_id": request.user_id},
        )


__all__ = ["DeleteRequest", "LaunchOrchestrator", "LaunchOutcome", "LaunchRequest", "Notifier"]
