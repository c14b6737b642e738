from __future__ import annotations

import argparse
import importlib.util
import json
from pathlib import Path

import pytest

from ccrl.launcher.worktree import FakeGitRunner, GitExecutionResult, WorktreeManager

REPO = "/home/user/my-app"
WORKTREE = "/home/user/my-app/.cc-slack-worktrees/claude-session-2026-01-15T12-30-45"


def _load_module():
    module_path = Path(__file__).resolve().parents[1] / "scripts" / "ccrl_worktrees.py"
    spec = importlib.util.spec_from_file_location("ccrl_worktrees_test_module", module_path)
    assert spec and spec.loader
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def configured(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "ccrl.config.json"
    config_path.write_text(json.dumps({"directories": [{"label": "my-app", "path": REPO}]}), encoding="utf-8")
    monkeypatch.setenv("CCRL_CONFIG_PATH", str(config_path))
    monkeypatch.delenv("CCRL_DIRS", raising=False)


def porcelain() -> str:
    return (
        f"worktree {REPO}\nHEAD abc\nbranch refs/heads/main\n\n"
        f"worktree {WORKTREE}\nHEAD def\nbranch refs/heads/claude-session-2026-01-15T12-30-45\n"
    )


def test_list_prints_json(configured, monkeypatch, capsys) -> None:
    module = _load_module()
    fake = FakeGitRunner([GitExecutionResult(args=("git",), returncode=0, stdout=porcelain(), stderr="")])
    monkeypatch.setattr(module, "load_manager", lambda _settings: WorktreeManager(fake))

    module.cmd_list(argparse.Namespace(json=True))

    payload = json.loads(capsys.readouterr().out)
    assert payload == [
        {
            "label": "my-app",
            "repo_path": REPO,
            "worktree_path": WORKTREE,
            "branch": "claude-session-2026-01-15T12-30-45",
        }
    ]


def test_list_reports_git_errors(configured, monkeypatch, capsys) -> None:
    module = _load_module()
    fake = FakeGitRunner([GitExecutionResult(args=("git",), returncode=128, stdout="", stderr="fatal: nope")])
    monkeypatch.setattr(module, "load_manager", lambda _settings: WorktreeManager(fake))

    module.cmd_list(argparse.Namespace(json=False))

    assert "error: git worktree list failed: fatal: nope" in capsys.readouterr().out


def test_remove_validates_path(configured, monkeypatch, capsys) -> None:
    module = _load_module()
    fake = FakeGitRunner()
    monkeypatch.setattr(module, "load_manager", lambda _settings: WorktreeManager(fake))

    with pytest.raises(SystemExit) as excinfo:
        module.cmd_remove(argparse.Namespace(repo=REPO, worktree=f"{REPO}/src"))

    assert excinfo.value.code == 1
    assert "Invalid worktree path" in capsys.readouterr().out
    assert fake.invocations == []


def test_remove_deletes_worktree(configured, monkeypatch, capsys) -> None:
    module = _load_module()
    fake = FakeGitRunner()
    monkeypatch.setattr(module, "load_manager", lambda _settings: WorktreeManager(fake))

    module.cmd_remove(argparse.Namespace(repo=REPO, worktree=WORKTREE))

    assert "Worktree deleted" in capsys.readouterr().out
    assert fake.invocations[0] == ("-C", REPO, "worktree", "remove", "--force", WORKTREE)


def test_parser_requires_subcommand() -> None:
    module = _load_module()

    with pytest.raises(SystemExit):
        module.build_parser().parse_args([])
