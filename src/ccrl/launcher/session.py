"""Launch ``claude remote-control`` and capture its connection URL."""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Callable, Sequence

from .errors import ClaudeNotFoundError, LaunchExitError, LaunchTimeoutError
from .utils import resolve_executable, sanitize_environment

logger = logging.getLogger(__name__)

LAUNCH_TIMEOUT = 30.0
TERMINATE_GRACE = 5.0
REMOTE_CONTROL_SUBCOMMAND: tuple[str, ...] = ("remote-control",)
# claude remote-control prints the session URL on stdout
REMOTE_CONTROL_URL_RE = re.compile(r"https://claude\.ai\S*")

_READ_CHUNK = 4096
_STREAM_LIMIT = 2**16
# How long output already written before exit may still settle the launch.
_EXIT_DRAIN_GRACE = 0.1


def extract_remote_control_url(text: str) -> str | None:
    """Return the first claude.ai URL in ``text``, stopping at whitespace."""

    match = REMOTE_CONTROL_URL_RE.search(text)
    return match.group(0) if match else None


class _SessionProtocol(asyncio.subprocess.SubprocessStreamProtocol):
    """Stream protocol whose ``exited`` future resolves when the child exits.

    ``Process.wait()`` may stay pending until every pipe is closed, which a
    backgrounded descendant holding stdout can postpone indefinitely.
    """

    def __init__(self, limit: int, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__(limit=limit, loop=loop)
        self.exited: asyncio.Future[None] = loop.create_future()

    def process_exited(self) -> None:
        super().process_exited()
        if not self.exited.done():
            self.exited.set_result(None)


class SessionLauncher:
    """Start remote-control sessions and wait for their connection URL.

    Each :meth:`launch` settles exactly once: with the first URL seen on
    stdout, with :class:`LaunchTimeoutError` once ``timeout`` seconds pass,
    or with :class:`LaunchExitError` if the process fails to start or exits
    first. Whatever happens after settlement is ignored. Sessions that
    produced a URL keep running; their remaining output is drained until
    they exit.
    """

    def __init__(
        self,
        executable: Path | None = None,
        *,
        timeout: float = LAUNCH_TIMEOUT,
        subcommand: Sequence[str] = REMOTE_CONTROL_SUBCOMMAND,
    ) -> None:
        self._executable_path = resolve_executable("claude", executable, ClaudeNotFoundError)
        self._timeout = timeout
        self._subcommand = tuple(subcommand)
        self._sessions: dict[asyncio.Task[None], asyncio.subprocess.Process] = {}
        self._readers: set[asyncio.Task[None]] = set()

    @property
    def executable(self) -> Path:
        return self._executable_path

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def active_sessions(self) -> list[int]:
        """Return the pids of sessions whose process is still running."""

        return [process.pid for process in self._sessions.values() if process.returncode is None]

    async def launch(self, directory: str) -> str:
        loop = asyncio.get_running_loop()
        settled: asyncio.Future[str] = loop.create_future()

        def resolve(url: str) -> None:
            if not settled.done():
                settled.set_result(url)

        def reject(exc: BaseException) -> None:
            if not settled.done():
                settled.set_exception(exc)

        try:
            transport, protocol = await loop.subprocess_exec(
                lambda: _SessionProtocol(_STREAM_LIMIT, loop),
                str(self._executable_path),
                *self._subcommand,
                cwd=directory,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=None,
                env=sanitize_environment(),
            )
        except OSError as exc:
            raise LaunchExitError(spawn_error=exc) from exc

        process = asyncio.subprocess.Process(transport, protocol, loop)
        logger.info("Started remote-control session", extra={"directory": directory, "pid": process.pid})

        timer = loop.call_later(self._timeout, reject, LaunchTimeoutError(self._timeout))
        reader = asyncio.create_task(self._read_output(process, resolve, settled))
        self._readers.add(reader)
        reader.add_done_callback(self._readers.discard)
        watcher = asyncio.create_task(self._watch_exit(process, protocol, reader, reject))
        self._sessions[watcher] = process
        watcher.add_done_callback(self._forget)

        try:
            url = await settled
        except LaunchTimeoutError:
            logger.warning(
                "Timed out waiting for remote-control URL",
                extra={"directory": directory, "pid": process.pid, "timeout": self._timeout},
            )
            reader.cancel()
            await self._terminate(process, protocol)
            transport.close()
            raise
        except LaunchExitError:
            reader.cancel()
            transport.close()
            raise
        finally:
            timer.cancel()

        logger.info("Remote-control session ready", extra={"directory": directory, "pid": process.pid, "url": url})
        return url

    async def wait_closed(self) -> None:
        """Wait for every launched process to exit."""

        if self._sessions:
            await asyncio.gather(*self._sessions, return_exceptions=True)

    @staticmethod
    async def _read_output(
        process: asyncio.subprocess.Process,
        resolve: Callable[[str], None],
        settled: asyncio.Future[str],
    ) -> None:
        assert process.stdout is not None
        while True:
            chunk = await process.stdout.read(_READ_CHUNK)
            if not chunk:
                return
            if settled.done():
                continue
            url = extract_remote_control_url(chunk.decode("utf-8", errors="replace"))
            if url is not None:
                resolve(url)

    @staticmethod
    async def _watch_exit(
        process: asyncio.subprocess.Process,
        protocol: _SessionProtocol,
        reader: asyncio.Task[None],
        reject: Callable[[BaseException], None],
    ) -> None:
        await protocol.exited
        await asyncio.wait({reader}, timeout=_EXIT_DRAIN_GRACE)
        logger.debug("Remote-control process exited", extra={"pid": process.pid, "returncode": process.returncode})
        reject(LaunchExitError(returncode=process.returncode))

    def _forget(self, task: asyncio.Task[None]) -> None:
        self._sessions.pop(task, None)

    @staticmethod
    async def _terminate(process: asyncio.subprocess.Process, protocol: _SessionProtocol) -> None:
        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(asyncio.shield(protocol.exited), TERMINATE_GRACE)
        except asyncio.TimeoutError:
            process.kill()
            await protocol.exited


async def launch_remote_control(directory: str, *, timeout: float = LAUNCH_TIMEOUT) -> str:
    """Launch a session in ``directory`` with the claude executable on PATH.

    The process outlives this call; keep a :class:`SessionLauncher` around
    instead when the caller needs to track or await running sessions.
    """

    return await SessionLauncher(timeout=timeout).launch(directory)


__all__ = [
    "LAUNCH_TIMEOUT",
    "REMOTE_CONTROL_URL_RE",
    "SessionLauncher",
    "extract_remote_control_url",
    "launch_remote_control",
]
