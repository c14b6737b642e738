"""Keep the directory list current while the bot runs."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from watchfiles import awatch

from .loader import DirectoryConfigError, load_config
from .models import DirectoryConfig, DirectoryEntry

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 200


class ConfigHolder:
    """Holds the last good directory config and reloads it on file changes.

    A reload that fails to parse or validate is logged and the previous
    config is kept. Changes arriving within ``debounce_ms`` of each other
    trigger a single reload.
    """

    def __init__(
        self,
        path: Path,
        dirs_env: str | None = None,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        force_polling: bool = False,
    ) -> None:
        self._path = Path(path).expanduser().resolve()
        self._dirs_env = dirs_env
        self._debounce_ms = debounce_ms
        self._force_polling = force_polling
        self._stop_event = asyncio.Event()
        self._current = load_config(self._path, dirs_env)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def current(self) -> DirectoryConfig:
        return self._current

    def directories(self) -> tuple[DirectoryEntry, ...]:
        return self._current.directories

    def reload(self) -> bool:
        """Re-read the config; return False when the new content is rejected."""

        try:
            config = load_config(self._path, self._dirs_env)
        except (DirectoryConfigError, OSError) as exc:
            logger.error(
                "Failed to reload directory config, keeping previous",
                extra={"path": str(self._path), "error": str(exc)},
            )
            return False
        self._current = config
        logger.info(
            "Reloaded directory config",
            extra={"path": str(self._path), "directories": len(config.directories)},
        )
        return True

    async def watch(self) -> None:
        """Reload on every change to the config file until :meth:`close` is called."""

        if not self._path.exists():
            logger.info("No directory config file to watch", extra={"path": str(self._path)})
            return

        target = self._path

        def _is_config_file(_change, changed_path: str) -> bool:
            return Path(changed_path) == target

        async for _changes in awatch(
            target.parent,
            watch_filter=_is_config_file,
            debounce=self._debounce_ms,
            stop_event=self._stop_event,
            force_polling=self._force_polling,
        ):
            self.reload()

    def close(self) -> None:
        self._stop_event.set()


__all__ = ["ConfigHolder", "DEFAULT_DEBOUNCE_MS"]
