#!/usr/bin/env python3
"""
Sync a workspace and run each repo's test suite.

Run with:
    GITHUB_TOKEN=... WORKSPACE_DIR=.workspace python examples/sync_workspace.py
"""

import asyncio
import logging

from gitworkspace import Workspace, WorkspaceRepo, configure_logging
from gitworkspace.process import run_command


async def run_tests(repo: WorkspaceRepo) -> None:
    await run_command(repo.dir, ["wct", "--npm"])


async def main() -> None:
    configure_logging(level=logging.INFO)

    async with Workspace.from_env() as ws:
        repos = await ws.init(
            ["Polymer/polymer#2.0-preview", "PolymerElements/iron-*"],
            exclude=["PolymerElements/iron-doc-viewer"],
            verbose=True,
        )
        print(f"Synchronized {len(repos)} repos")
        for failure in ws.resolution_failures + ws.sync_failures:
            print(f"  skipped: {failure}")

        succeeded, failed = await ws.run(run_tests)

    print(f"{len(succeeded)} passed, {len(failed)} failed")
    for repo, error in failed.items():
        print(f"  {repo.github.full_name}: {error}")


if __name__ == "__main__":
    asyncio.run(main())
