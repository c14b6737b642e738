"""Slack front-end for the launcher."""

from .app import SlackThreadNotifier, register_handlers
from .blocks import build_delete_worktree_blocks, build_home_view, build_launch_modal

__all__ = [
    "SlackThreadNotifier",
    "build_delete_worktree_blocks",
    "build_home_view",
    "build_launch_modal",
    "register_handlers",
]
