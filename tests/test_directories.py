from __future__ import annotations

import asyncio
import json
import logging
import textwrap
from pathlib import Path

import pytest

from ccrl.directories import ConfigHolder, DirectoryConfig, DirectoryConfigError, DirectoryEntry, load_config

INITIAL = {"directories": [{"label": "my-app", "path": "/home/user/my-app"}]}
UPDATED = {
    "directories": [
        {"label": "my-app", "path": "/home/user/my-app"},
        {"label": "other", "path": "/home/user/other"},
    ]
}


def write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_load_config_reads_json_file(tmp_path: Path) -> None:
    config_path = tmp_path / "ccrl.config.json"
    write_json(config_path, INITIAL)

    config = load_config(config_path)

    assert config.directories == (DirectoryEntry(label="my-app", path="/home/user/my-app"),)


def test_load_config_reads_yaml_file(tmp_path: Path) -> None:
    config_path = tmp_path / "ccrl.config.yaml"
    config_path.write_text(
        textwrap.dedent(
            """
            directories:
              - label: my-app
                path: /home/user/my-app
            """
        ),
        encoding="utf-8",
    )

    assert load_config(config_path).directories[0].label == "my-app"


def test_file_wins_over_env(tmp_path: Path) -> None:
    config_path = tmp_path / "ccrl.config.json"
    write_json(config_path, INITIAL)

    config = load_config(config_path, json.dumps(UPDATED["directories"]))

    assert len(config.directories) == 1


def test_falls_back_to_env(tmp_path: Path) -> None:
    config = load_config(tmp_path / "missing.json", json.dumps(UPDATED["directories"]))

    assert [entry.label for entry in config.directories] == ["my-app", "other"]


def test_empty_without_file_or_env(tmp_path: Path) -> None:
    assert load_config(tmp_path / "missing.json") == DirectoryConfig()


@pytest.mark.parametrize(
    "content",
    [
        "{ bad json",
        json.dumps({"directories": "not-an-array"}),
        json.dumps({"directories": [{"label": "relative", "path": "repo"}]}),
        json.dumps({"directories": [{"label": "no-path"}]}),
    ],
)
def test_invalid_file_raises(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "ccrl.config.json"
    config_path.write_text(content, encoding="utf-8")

    with pytest.raises(DirectoryConfigError):
        load_config(config_path)


def test_invalid_env_raises(tmp_path: Path) -> None:
    with pytest.raises(DirectoryConfigError):
        load_config(tmp_path / "missing.json", "[not json")


def test_find_entry() -> None:
    config = DirectoryConfig.model_validate(UPDATED)

    assert config.find("/home/user/other").label == "other"
    assert config.find("/home/user/nope") is None


def test_holder_reload_picks_up_changes(tmp_path: Path) -> None:
    config_path = tmp_path / "ccrl.config.json"
    write_json(config_path, INITIAL)
    holder = ConfigHolder(config_path)

    write_json(config_path, UPDATED)

    assert holder.reload() is True
    assert len(holder.directories()) == 2


def test_holder_keeps_previous_config_on_bad_reload(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config_path = tmp_path / "ccrl.config.json"
    write_json(config_path, INITIAL)
    holder = ConfigHolder(config_path)

    config_path.write_text("{ bad json", encoding="utf-8")
    with caplog.at_level(logging.ERROR):
        assert holder.reload() is False

    assert holder.current == DirectoryConfig.model_validate(INITIAL)
    assert "Failed to reload directory config" in caplog.text


def test_holder_without_file_does_not_watch(tmp_path: Path) -> None:
    holder = ConfigHolder(tmp_path / "missing.json")

    asyncio.run(asyncio.wait_for(holder.watch(), 1))

    assert holder.directories() == ()


def test_holder_watch_reloads_on_change(tmp_path: Path) -> None:
    config_path = tmp_path / "ccrl.config.json"
    write_json(config_path, INITIAL)
    holder = ConfigHolder(config_path, debounce_ms=50, force_polling=True)

    async def scenario() -> None:
        watcher = asyncio.create_task(holder.watch())
        await asyncio.sleep(0.5)
        write_json(config_path, UPDATED)
        for _ in range(100):
            if len(holder.directories()) == 2:
                break
            await asyncio.sleep(0.05)
        holder.close()
        await asyncio.wait_for(watcher, 5)

    asyncio.run(scenario())

    assert len(holder.directories()) == 2
