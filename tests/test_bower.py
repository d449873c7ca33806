"""
Tests for Bower manifest merging and the Bower session.
"""

import json
from pathlib import Path

import pytest

from gitworkspace import bower
from gitworkspace.bower import (
    BowerSession,
    merge_bower_configs,
    read_bower_config,
)


def test_merge_unions_dependencies_and_dev_dependencies() -> None:
    merged = merge_bower_configs(
        [
            {
                "dependencies": {"polymer": "Polymer/polymer#^2.0.0"},
                "devDependencies": {"web-component-tester": "^6.0.0"},
            },
            {"dependencies": {"iron-ajax": "PolymerElements/iron-ajax#^2.0.0"}},
        ]
    )

    assert merged["dependencies"] == {
        "polymer": "Polymer/polymer#^2.0.0",
        "web-component-tester": "^6.0.0",
        "iron-ajax": "PolymerElements/iron-ajax#^2.0.0",
    }
    assert merged["private"] is True


def test_merge_first_declaration_wins() -> None:
    merged = merge_bower_configs(
        [
            {"dependencies": {"polymer": "Polymer/polymer#^2.0.0"}},
            {"devDependencies": {"polymer": "Polymer/polymer#^1.9.0"}},
        ]
    )

    assert merged["dependencies"]["polymer"] == "Polymer/polymer#^2.0.0"


def test_merge_ignores_malformed_sections() -> None:
    merged = merge_bower_configs([{"dependencies": ["polymer"]}, {}])
    assert merged["dependencies"] == {}


def test_read_bower_config_missing_or_invalid(tmp_path: Path) -> None:
    assert read_bower_config(tmp_path) == {}

    (tmp_path / "bower.json").write_text("{not json")
    assert read_bower_config(tmp_path) == {}

    (tmp_path / "bower.json").write_text('["a list"]')
    assert read_bower_config(tmp_path) == {}


def test_read_bower_config(tmp_path: Path) -> None:
    (tmp_path / "bower.json").write_text(json.dumps({"name": "iron-ajax"}))
    assert read_bower_config(tmp_path) == {"name": "iron-ajax"}


def test_write_workspace_config_pins_workspace_repos(tmp_path: Path) -> None:
    session = BowerSession(tmp_path)
    config = merge_bower_configs(
        [{"dependencies": {"polymer": "Polymer/polymer#^2.0.0", "iron-ajax": "^2.0.0"}}]
    )

    manifest = session.write_workspace_config(
        config, {"iron-ajax": "./iron-ajax#abc123"}
    )

    written = json.loads(manifest.read_text())
    assert json.loads((tmp_path / ".bowerrc").read_text()) == {"directory": "."}
    assert written["dependencies"] == {
        "polymer": "Polymer/polymer#^2.0.0",
        "iron-ajax": "./iron-ajax#abc123",
    }
    assert written["resolutions"] == {"iron-ajax": "abc123"}
    # The merged config passed in is left untouched.
    assert config["dependencies"]["iron-ajax"] == "^2.0.0"


@pytest.mark.asyncio
async def test_install_runs_bower_in_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[Path, list[str]]] = []

    async def fake_run_command(cwd: Path, argv: list[str]) -> tuple[str, str]:
        calls.append((cwd, list(argv)))
        return "installed", ""

    monkeypatch.setattr(bower, "run_command", fake_run_command)

    output = await BowerSession(tmp_path).install()

    assert output == "installed"
    assert calls == [(tmp_path, ["bower", "install", "-F"])]
