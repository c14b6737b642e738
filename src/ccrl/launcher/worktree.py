"""Create and remove git worktrees for launched sessions."""

from __future__ import annotations

import asyncio
import logging
import re
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

from .errors import GitNotFoundError, WorktreeCreationError, WorktreeError, WorktreeRemovalError
from .paths import generate_branch_name, worktrees_root
from .utils import resolve_executable

logger = logging.getLogger(__name__)

_BRANCH_NOT_FOUND_RE = re.compile(r"branch '[^']*' not found")


@dataclass(slots=True)
class GitExecutionResult:
    """Holds the outcome of a git invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def is_branch_not_found(stderr: str) -> bool:
    """Return True when git reports the branch to delete does not exist."""

    return _BRANCH_NOT_FOUND_RE.search(stderr) is not None


class GitRunner:
    """Execute git commands asynchronously against a repository."""

    def __init__(self, executable: Path | None = None) -> None:
        self._executable_path = resolve_executable("git", executable, GitNotFoundError)

    @property
    def executable(self) -> Path:
        return self._executable_path

    async def run(self, repo_path: str, *args: str) -> GitExecutionResult:
        return await self._invoke("-C", repo_path, *args)

    async def _invoke(self, *args: str) -> GitExecutionResult:
        cmd = [str(self._executable_path), *args]
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        return GitExecutionResult(args=tuple(cmd), returncode=process.returncode, stdout=stdout, stderr=stderr)


class FakeGitRunner(GitRunner):
    """Replays scripted git results in call order; unscripted calls succeed.

    Every call is recorded in :attr:`invocations` as the argv after ``git``.
    """

    def __init__(self, responses: Iterable[GitExecutionResult] = ()) -> None:  # type: ignore[override]
        self._executable_path = Path("git")
        self._scripted = deque(responses)
        self.invocations: list[tuple[str, ...]] = []

    async def run(self, repo_path: str, *args: str) -> GitExecutionResult:
        argv = ("-C", repo_path, *args)
        self.invocations.append(argv)
        if not self._scripted:
            return GitExecutionResult(args=argv, returncode=0, stdout="", stderr="")
        return self._scripted.popleft()


@dataclass(slots=True)
class WorktreeInfo:
    """A worktree entry parsed from ``git worktree list --porcelain``."""

    path: str
    branch: str | None
    head: str | None


def parse_worktree_list(output: str) -> list[WorktreeInfo]:
    """Parse porcelain worktree listing output."""

    entries: list[WorktreeInfo] = []
    for block in output.strip().split("\n\n"):
        fields: dict[str, str] = {}
        for line in block.splitlines():
            key, _, value = line.partition(" ")
            fields[key] = value
        if "worktree" not in fields:
            continue
        branch = fields.get("branch")
        if branch and branch.startswith("refs/heads/"):
            branch = branch[len("refs/heads/") :]
        entries.append(WorktreeInfo(path=fields["worktree"], branch=branch, head=fields.get("HEAD")))
    return entries


class WorktreeManager:
    """Create and tear down timestamp-named worktrees.

    Calls against the same repository are serialized; different repositories
    proceed independently. Paths handed to :meth:`remove_worktree` are trusted,
    callers validate them with :func:`~ccrl.launcher.paths.is_valid_worktree_path`.
    """

    def __init__(
        self,
        runner: GitRunner | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._runner = runner or GitRunner()
        self._clock = clock
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def runner(self) -> GitRunner:
        return self._runner

    async def create_worktree(self, repo_path: str) -> str:
        branch_name = generate_branch_name(self._clock() if self._clock else None)
        worktree_path = f"{worktrees_root(repo_path)}/{branch_name}"

        async with self._locks[repo_path]:
            result = await self._runner.run(repo_path, "worktree", "add", "-b", branch_name, worktree_path)
        if not result.ok:
            raise WorktreeCreationError(
                f"git worktree add failed: {result.stderr.strip() or f'exit code {result.returncode}'}",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        logger.info(
            "Created worktree",
            extra={"repo_path": repo_path, "worktree_path": worktree_path, "branch": branch_name},
        )
        return worktree_path

    async def remove_worktree(self, repo_path: str, worktree_path: str) -> None:
        branch_name = worktree_path.rstrip("/").split("/")[-1]

        async with self._locks[repo_path]:
            result = await self._runner.run(repo_path, "worktree", "remove", "--force", worktree_path)
            if not result.ok:
                raise WorktreeRemovalError(
                    f"git worktree remove failed: {result.stderr.strip() or f'exit code {result.returncode}'}",
                    returncode=result.returncode,
                    stderr=result.stderr,
                )

            if not branch_name:
                return
            branch_result = await self._runner.run(repo_path, "branch", "-D", branch_name)

        if not branch_result.ok:
            if is_branch_not_found(branch_result.stderr):
                logger.info(
                    "Branch already deleted",
                    extra={"repo_path": repo_path, "branch": branch_name},
                )
            else:
                raise WorktreeRemovalError(
                    f"git branch -D failed: {branch_result.stderr.strip() or f'exit code {branch_result.returncode}'}",
                    returncode=branch_result.returncode,
                    stderr=branch_result.stderr,
                )

        logger.info(
            "Removed worktree",
            extra={"repo_path": repo_path, "worktree_path": worktree_path, "branch": branch_name},
        )

    async def list_worktrees(self, repo_path: str) -> list[WorktreeInfo]:
        """Return the managed worktrees of ``repo_path``."""

        result = await self._runner.run(repo_path, "worktree", "list", "--porcelain")
        if not result.ok:
            raise WorktreeError(
                f"git worktree list failed: {result.stderr.strip() or f'exit code {result.returncode}'}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
        prefix = worktrees_root(repo_path) + "/"
        return [entry for entry in parse_worktree_list(result.stdout) if entry.path.startswith(prefix)]


async def create_worktree(repo_path: str) -> str:
    """Create a worktree with the default git runner."""

    return await WorktreeManager().create_worktree(repo_path)


async def remove_worktree(repo_path: str, worktree_path: str) -> None:
    """Remove a worktree and its branch with the default git runner."""

    await WorktreeManager().remove_worktree(repo_path, worktree_path)


__all__ = [
    "FakeGitRunner",
    "GitExecutionResult",
    "GitRunner",
    "WorktreeInfo",
    "WorktreeManager",
    "create_worktree",
    "is_branch_not_found",
    "parse_worktree_list",
    "remove_worktree",
]
