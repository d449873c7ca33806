"""
Bower manifest merging and installation for a workspace.

The workspace root doubles as the Bower install directory, so each cloned
repository sits exactly where Bower would have installed it.
"""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from gitworkspace.logging import get_logger
from gitworkspace.process import run_command
from gitworkspace.types.workspace import WorkspaceRepo

BOWER_COMMAND = "bower"
BOWER_JSON = "bower.json"
BOWERRC = ".bowerrc"

logger = get_logger()


def read_bower_config(repo_dir: str | Path) -> dict[str, Any]:
    """
    Read a repository's ``bower.json``.

    Returns an empty dict when the file is missing or is not a JSON object,
    so repos without Bower metadata contribute nothing to the merge.
    """
    path = Path(repo_dir) / BOWER_JSON
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def merge_bower_configs(configs: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """
    Merge the dependency sections of several ``bower.json`` documents.

    ``dependencies`` and ``devDependencies`` of every config are folded into
    the merged ``dependencies`` (workspace repos are installed for testing,
    so their dev dependencies are needed too). The first declaration of a
    package wins.

    Args:
        configs: Parsed bower.json documents, in workspace order

    Returns:
        A bower.json document for the workspace root
    """
    dependencies: dict[str, str] = {}
    for config in configs:
        for section in ("dependencies", "devDependencies"):
            declared = config.get(section) or {}
            if not isinstance(declared, dict):
                continue
            for name, version in declared.items():
                dependencies.setdefault(name, version)

    return {
        "name": "gitworkspace",
        "private": True,
        "dependencies": dependencies,
        "resolutions": {},
    }


def merged_bower_config_from_repos(repos: Iterable[WorkspaceRepo]) -> dict[str, Any]:
    """Merge the bower.json files found in each workspace repo's directory."""
    return merge_bower_configs(read_bower_config(repo.dir) for repo in repos)


class BowerSession:
    """Runs bower commands in one directory."""

    command = BOWER_COMMAND

    def __init__(self, cwd: str | Path) -> None:
        self.cwd = Path(cwd)

    def write_workspace_config(
        self, config: dict[str, Any], pinned: dict[str, str]
    ) -> Path:
        """
        Write ``.bowerrc`` and ``bower.json`` into the workspace root.

        ``.bowerrc`` makes the root itself (``.``) the install directory.
        Each entry in ``pinned`` overrides whatever direct or transitive
        dependencies say about that package, and is also recorded as a
        resolution so Bower never prompts about it.

        Args:
            config: Merged bower.json document
            pinned: Package name to local ``./name#sha`` endpoint

        Returns:
            Path of the written bower.json
        """
        (self.cwd / BOWERRC).write_text(
            json.dumps({"directory": "."}), encoding="utf-8"
        )

        config = dict(config)
        config["dependencies"] = {**config.get("dependencies", {}), **pinned}
        resolutions = dict(config.get("resolutions") or {})
        for name, endpoint in pinned.items():
            resolutions[name] = endpoint.rsplit("#", 1)[-1]
        config["resolutions"] = resolutions

        manifest = self.cwd / BOWER_JSON
        manifest.write_text(json.dumps(config, indent=2), encoding="utf-8")
        return manifest

    async def install(self) -> str:
        """Install every dependency in bower.json, forcing latest resolutions."""
        stdout, _ = await run_command(self.cwd, [BOWER_COMMAND, "install", "-F"])
        return stdout
