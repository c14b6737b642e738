"""Slack handlers wiring the launcher into Bolt."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

from ..directories import ConfigHolder
from ..launcher import (
    AuthorizationError,
    InvalidPathError,
    PayloadDecodingError,
    WorktreeError,
)
from ..orchestrator import LaunchOrchestrator, LaunchRequest
from .blocks import (
    DELETE_WORKTREE_ACTION_ID,
    LAUNCH_ACTION_ID,
    LAUNCH_VIEW_CALLBACK_ID,
    build_delete_worktree_blocks,
    build_home_view,
    build_launch_modal,
    format_error_message,
    mrkdwn_section,
    parse_launch_submission,
)

logger = logging.getLogger(__name__)

NO_DIRECTORIES_TEXT = "No directories configured. Create `ccrl.config.json` first."


class SlackThreadNotifier:
    """Posts launch progress as replies in a Slack thread."""

    def __init__(self, client: AsyncWebClient, channel_id: str, thread_ts: str | None) -> None:
        self._client = client
        self._channel_id = channel_id
        self._thread_ts = thread_ts

    async def worktree_created(self, worktree_path: str, delete_token: str) -> None:
        await self._client.chat_postMessage(
            channel=self._channel_id,
            thread_ts=self._thread_ts,
            text=f"🌿 Worktree created: `{worktree_path}`",
            blocks=build_delete_worktree_blocks(worktree_path, delete_token),
        )

    async def launch_ready(self, url: str) -> None:
        await self._client.chat_postMessage(
            channel=self._channel_id,
            thread_ts=self._thread_ts,
            text=f"✅ Claude Code is ready!\n{url}",
        )

    async def launch_failed(self, error: Exception) -> None:
        await self._client.chat_postMessage(
            channel=self._channel_id,
            thread_ts=self._thread_ts,
            text=f"❌ Launch failed: {format_error_message(error)}",
        )


def _launch_announcement(label: str, session_name: str | None, create_worktree: bool) -> str:
    text = f"🚀 Launching Claude Code in *{label}*"
    if session_name:
        text += f" for _{session_name}_"
    if create_worktree:
        text += " (new worktree)"
    return text + "..."


def register_handlers(
    app: AsyncApp,
    orchestrator: LaunchOrchestrator,
    config_holder: ConfigHolder,
) -> set[asyncio.Task[Any]]:
    """Register the launcher's command, view and action handlers on ``app``.

    Returns the set holding in-flight launch tasks.
    """

    launch_tasks: set[asyncio.Task[Any]] = set()

    async def _open_launch_modal(client: AsyncWebClient, trigger_id: str, channel_id: str) -> None:
        await client.views_open(
            trigger_id=trigger_id,
            view=build_launch_modal(config_holder.directories(), channel_id),
        )

    @app.command("/ccrl")
    async def handle_ccrl_command(ack, command, client: AsyncWebClient) -> None:
        await ack()

        if not config_holder.directories():
            await client.chat_postMessage(channel=command["channel_id"], text=NO_DIRECTORIES_TEXT)
            return

        await _open_launch_modal(client, command["trigger_id"], command["channel_id"])

    @app.event("app_home_opened")
    async def handle_app_home_opened(event, client: AsyncWebClient) -> None:
        if event.get("tab") not in (None, "home"):
            return
        await client.views_publish(user_id=event["user"], view=build_home_view(config_holder.directories()))

    @app.action(LAUNCH_ACTION_ID)
    async def handle_launch_button(ack, body, client: AsyncWebClient) -> None:
        await ack()
        if not config_holder.directories():
            return
        # Launched from the App Home tab, replies go to the user's DM with the app.
        await _open_launch_modal(client, body["trigger_id"], body["user"]["id"])

    async def _run_launch(request: LaunchRequest, notifier: SlackThreadNotifier) -> None:
        try:
            await orchestrator.launch(request, notifier)
        except Exception as exc:
            logger.exception("Unexpected launch failure", extra={"repo_path": request.repo_path})
            await notifier.launch_failed(exc)

    @app.view(LAUNCH_VIEW_CALLBACK_ID)
    async def handle_launch_submission(ack, body, view, client: AsyncWebClient) -> None:
        await ack()

        submission = parse_launch_submission(view)
        if not submission.selected_path:
            return

        entry = config_holder.current.find(submission.selected_path)
        label = entry.label if entry else submission.selected_path

        response = await client.chat_postMessage(
            channel=submission.channel_id,
            text=_launch_announcement(label, submission.session_name, submission.create_worktree),
        )
        notifier = SlackThreadNotifier(client, submission.channel_id, response.get("ts"))
        request = LaunchRequest(
            repo_path=submission.selected_path,
            requesting_user_id=body["user"]["id"],
            create_worktree=submission.create_worktree,
            session_name=submission.session_name,
        )

        task = asyncio.create_task(_run_launch(request, notifier))
        launch_tasks.add(task)
        task.add_done_callback(launch_tasks.discard)

    @app.action(DELETE_WORKTREE_ACTION_ID)
    async def handle_delete_worktree(ack, body, action, client: AsyncWebClient) -> None:
        await ack()

        channel = (body.get("channel") or {}).get("id")
        message = body.get("message") or {}
        ts = message.get("ts")
        thread_ts = message.get("thread_ts")
        user_id = body["user"]["id"]
        if not channel or not ts:
            return

        async def _update(text: str) -> None:
            await client.chat_update(channel=channel, ts=ts, text=text, blocks=[mrkdwn_section(text)])

        try:
            request = orchestrator.authorize_delete(action.get("value") or "", user_id)
        except PayloadDecodingError:
            await _update("❌ Failed to delete worktree: invalid action payload")
            return
        except (AuthorizationError, InvalidPathError) as exc:
            await client.chat_postEphemeral(channel=channel, user=user_id, text=str(exc))
            return

        try:
            await orchestrator.remove(request)
        except WorktreeError as exc:
            logger.warning(
                "Worktree deletion failed",
                extra={"worktree_path": request.worktree_path, "error": str(exc)},
            )
            await _update(f"❌ Failed to delete worktree: `{request.worktree_path}`")
            if thread_ts:
                await client.chat_postMessage(
                    channel=channel,
                    thread_ts=thread_ts,
                    text=f"❌ Failed to delete worktree:\n```{format_error_message(exc)}```",
                )
            return
        except Exception:
            logger.exception("Unexpected worktree deletion failure", extra={"worktree_path": request.worktree_path})
            await _update(f"❌ Failed to delete worktree: `{request.worktree_path}`")
            return

        await _update(f"✅ Worktree deleted: `{request.worktree_path}`")

    return launch_tasks


__all__ = ["NO_DIRECTORIES_TEXT", "SlackThreadNotifier", "register_handlers"]
