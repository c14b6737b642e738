"""Block Kit builders for the launcher's Slack surfaces."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

from ..directories import DirectoryEntry

LAUNCH_VIEW_CALLBACK_ID = "ccrl_launch"
LAUNCH_ACTION_ID = "launch_ccrl"
DELETE_WORKTREE_ACTION_ID = "delete_worktree"
CREATE_WORKTREE_OPTION = "create_worktree"
HOME_TITLE = "CCRL - Claude Code Remote Launcher"

# Slack rejects plain_text option labels longer than 75 characters.
_MAX_OPTION_TEXT = 75
_MAX_SELECT_OPTIONS = 100


@dataclass(slots=True)
class LaunchSubmission:
    channel_id: str
    selected_path: str | None
    session_name: str | None
    create_worktree: bool


def plain_text(text: str) -> dict[str, Any]:
    return {"type": "plain_text", "text": text}


def mrkdwn_section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def format_error_message(err: object) -> str:
    if isinstance(err, BaseException):
        return str(err) or type(err).__name__
    return str(err)


def build_home_view(directories: Sequence[DirectoryEntry]) -> dict[str, Any]:
    header = {"type": "header", "text": plain_text(HOME_TITLE)}
    if not directories:
        return {
            "type": "home",
            "blocks": [
                header,
                mrkdwn_section(
                    "⚠️ No directories configured. Set the `CCRL_DIRS` env var or create `ccrl.config.json` first."
                ),
            ],
        }

    return {
        "type": "home",
        "blocks": [
            header,
            mrkdwn_section("Launch a Claude Code remote session from here."),
            {
                "type": "actions",
                "elements": [
                    {
                        "type": "button",
                        "action_id": LAUNCH_ACTION_ID,
                        "text": plain_text("🚀 Launch Claude Code"),
                        "style": "primary",
                    }
                ],
            },
        ],
    }


def _directory_option(entry: DirectoryEntry) -> dict[str, Any]:
    label = entry.label
    if len(label) > _MAX_OPTION_TEXT:
        label = label[: _MAX_OPTION_TEXT - 1] + "…"
    return {"text": plain_text(label), "value": entry.path}


def build_launch_modal(directories: Sequence[DirectoryEntry], channel_id: str) -> dict[str, Any]:
    """Return the modal asking for directory, optional session name and worktree flag."""

    return {
        "type": "modal",
        "callback_id": LAUNCH_VIEW_CALLBACK_ID,
        "private_metadata": json.dumps({"channelId": channel_id}),
        "title": plain_text("Launch Claude Code"),
        "submit": plain_text("Launch"),
        "close": plain_text("Cancel"),
        "blocks": [
            {
                "type": "input",
                "block_id": "directory",
                "label": plain_text("Directory"),
                "element": {
                    "type": "static_select",
                    "action_id": "directory_select",
                    "placeholder": plain_text("Select a directory"),
                    "options": [_directory_option(entry) for entry in directories[:_MAX_SELECT_OPTIONS]],
                },
            },
            {
                "type": "input",
                "block_id": "session_name",
                "optional": True,
                "label": plain_text("Session name"),
                "element": {
                    "type": "plain_text_input",
                    "action_id": "session_name_input",
                    "placeholder": plain_text("e.g. fix flaky login test"),
                },
            },
            {
                "type": "input",
                "block_id": "worktree",
                "optional": True,
                "label": plain_text("Options"),
                "element": {
                    "type": "checkboxes",
                    "action_id": "worktree_checkbox",
                    "options": [
                        {
                            "text": plain_text("Create worktree"),
                            "description": plain_text("New branch in .cc-slack-worktrees/"),
                            "value": CREATE_WORKTREE_OPTION,
                        }
                    ],
                },
            },
        ],
    }


def parse_launch_submission(view: dict[str, Any]) -> LaunchSubmission:
    """Extract the launch choices from a submitted ``ccrl_launch`` view."""

    metadata = json.loads(view.get("private_metadata") or "{}")
    values = view.get("state", {}).get("values", {})

    selected = (
        values.get("directory", {}).get("directory_select", {}).get("selected_option") or {}
    ).get("value")
    session_name = (values.get("session_name", {}).get("session_name_input", {}).get("value") or "").strip()
    checked = values.get("worktree", {}).get("worktree_checkbox", {}).get("selected_options") or []

    return LaunchSubmission(
        channel_id=metadata.get("channelId", ""),
        selected_path=selected or None,
        session_name=session_name or None,
        create_worktree=any(option.get("value") == CREATE_WORKTREE_OPTION for option in checked),
    )


def build_delete_worktree_blocks(worktree_path: str, delete_token: str) -> list[dict[str, Any]]:
    """Return the worktree-created notice with a confirmed delete button."""

    return [
        mrkdwn_section(f"🌿 Worktree created: `{worktree_path}`"),
        {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": plain_text("Delete worktree"),
                    "style": "danger",
                    "action_id": DELETE_WORKTREE_ACTION_ID,
                    "value": delete_token,
                    "confirm": {
                        "title": plain_text("Delete worktree?"),
                        "text": plain_text(f"Remove {worktree_path}?"),
                        "confirm": plain_text("Delete"),
                        "deny": plain_text("Cancel"),
                    },
                }
            ],
        },
    ]


__all__ = [
    "CREATE_WORKTREE_OPTION",
    "DELETE_WORKTREE_ACTION_ID",
    "LAUNCH_ACTION_ID",
    "LAUNCH_VIEW_CALLBACK_ID",
    "LaunchSubmission",
    "build_delete_worktree_blocks",
    "build_home_view",
    "build_launch_modal",
    "format_error_message",
    "mrkdwn_section",
    "parse_launch_submission",
]
