"""Socket Mode bootstrap for CCRL."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from . import __version__
from .config import CcrlSettings, get_settings
from .directories import ConfigHolder, DirectoryConfigError
from .launcher import CcrlError, GitRunner, SessionLauncher, WorktreeManager
from .orchestrator import LaunchOrchestrator
from .slack import register_handlers

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the CCRL bot."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def create_orchestrator(settings: CcrlSettings, config_holder: ConfigHolder) -> LaunchOrchestrator:
    """Build the orchestrator from the configured git and claude executables."""

    git_runner = GitRunner(Path(settings.git_path) if settings.git_path else None)
    launcher = SessionLauncher(
        Path(settings.claude_path) if settings.claude_path else None,
        timeout=settings.launch_timeout,
    )
    return LaunchOrchestrator(
        config_holder.directories,
        worktrees=WorktreeManager(git_runner),
        launcher=launcher,
    )


def create_app(
    settings: Optional[CcrlSettings] = None,
    *,
    config_holder: ConfigHolder | None = None,
    orchestrator: LaunchOrchestrator | None = None,
) -> AsyncApp:
    """Instantiate the Bolt app with the launcher's handlers registered."""

    settings = settings or get_settings()
    bot_token, _app_token = settings.require_slack_tokens()

    config_holder = config_holder or ConfigHolder(
        settings.config_path,
        settings.dirs,
        debounce_ms=settings.config_reload_debounce_ms,
    )
    orchestrator = orchestrator or create_orchestrator(settings, config_holder)

    app = AsyncApp(token=bot_token)
    launch_tasks = register_handlers(app, orchestrator, config_holder)

    setattr(app, "config_holder", config_holder)
    setattr(app, "orchestrator", orchestrator)
    setattr(app, "launch_tasks", launch_tasks)
    return app


async def serve(settings: CcrlSettings) -> None:
    """Run the bot until the Socket Mode connection is closed."""

    _bot_token, app_token = settings.require_slack_tokens()
    app = create_app(settings)
    config_holder: ConfigHolder = getattr(app, "config_holder")

    watcher = asyncio.create_task(config_holder.watch())
    handler = AsyncSocketModeHandler(app, app_token)
    logger.info(
        "CCRL running",
        extra={
            "version": __version__,
            "config_path": str(config_holder.path),
            "directories": len(config_holder.directories()),
        },
    )
    try:
        await handler.start_async()
    finally:
        config_holder.close()
        await watcher


def main() -> None:
    """Entry point for running the CCRL bot via CLI."""

    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging("INFO")
        logger.error("Failed to start CCRL: %s", exc)
        raise SystemExit(1) from exc

    configure_logging(settings.log_level)
    try:
        asyncio.run(serve(settings))
    except (CcrlError, DirectoryConfigError) as exc:
        logger.error("Failed to start CCRL: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
