"""Inspect and clean up worktrees created by the CCRL bot."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from ccrl.config import CcrlSettings
from ccrl.directories import ConfigHolder, DirectoryConfigError
from ccrl.launcher import CcrlError, GitRunner, WorktreeManager, is_valid_worktree_path


def load_holder(settings: CcrlSettings) -> ConfigHolder:
    try:
        return ConfigHolder(settings.config_path, settings.dirs)
    except DirectoryConfigError as exc:
        print(f"Directory config invalid: {exc}")
        raise SystemExit(1)


def load_manager(settings: CcrlSettings) -> WorktreeManager:
    try:
        return WorktreeManager(GitRunner(Path(settings.git_path) if settings.git_path else None))
    except CcrlError as exc:
        print(f"git unavailable: {exc}")
        raise SystemExit(1)


def cmd_list(args: argparse.Namespace) -> None:
    settings = CcrlSettings()
    holder = load_holder(settings)
    manager = load_manager(settings)

    async def _collect() -> list[dict[str, object]]:
        rows: list[dict[str, object]] = []
        for entry in holder.directories():
            try:
                worktrees = await manager.list_worktrees(entry.path)
            except CcrlError as exc:
                rows.append({"label": entry.label, "repo_path": entry.path, "error": str(exc)})
                continue
            for worktree in worktrees:
                rows.append(
                    {
                        "label": entry.label,
                        "repo_path": entry.path,
                        "worktree_path": worktree.path,
                        "branch": worktree.branch,
                    }
                )
        return rows

    rows = asyncio.run(_collect())
    if args.json:
        print(json.dumps(rows, indent=2))
        return
    for row in rows:
        if "error" in row:
            print(f"{row['label']} [{row['repo_path']}] -> error: {row['error']}")
        else:
            print(f"{row['label']} [{row['repo_path']}] -> {row['worktree_path']} ({row['branch']})")


def cmd_remove(args: argparse.Namespace) -> None:
    settings = CcrlSettings()
    holder = load_holder(settings)
    if not is_valid_worktree_path(holder.directories(), args.repo, args.worktree):
        print(f"Invalid worktree path: {args.worktree}")
        raise SystemExit(1)

    manager = load_manager(settings)
    try:
        asyncio.run(manager.remove_worktree(args.repo, args.worktree))
    except CcrlError as exc:
        print(f"Failed to delete worktree: {exc}")
        raise SystemExit(1)
    print(f"Worktree deleted: {args.worktree}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage worktrees created by the CCRL bot.")
    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="List bot-created worktrees for every configured directory")
    list_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    list_parser.set_defaults(func=cmd_list)

    remove_parser = sub.add_parser("remove", help="Force-remove a bot-created worktree and its branch")
    remove_parser.add_argument("repo", help="Configured repository path")
    remove_parser.add_argument("worktree", help="Worktree path under .cc-slack-worktrees/")
    remove_parser.set_defaults(func=cmd_remove)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
