"""
Helpers for running external commands (git, bower) from asyncio code.
"""

import asyncio
import shutil
from collections.abc import Sequence
from pathlib import Path

from gitworkspace.exceptions import CommandFailedError
from gitworkspace.logging import log_command, mask_sensitive_data


async def run_command(cwd: str | Path, argv: Sequence[str]) -> tuple[str, str]:
    """
    Run a command in ``cwd`` and capture its output.

    Args:
        cwd: Working directory for the command
        argv: Command and arguments; no shell is involved

    Returns:
        Tuple of (stdout, stderr), both decoded and stripped

    Raises:
        CommandFailedError: If the command exits with a non-zero status
    """
    log_command(str(cwd), argv)
    process = await asyncio.create_subprocess_exec(
        *argv,
        cwd=str(cwd),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    out = stdout.decode("utf-8", errors="replace").strip()
    err = stderr.decode("utf-8", errors="replace").strip()

    if process.returncode != 0:
        raise CommandFailedError(
            mask_sensitive_data(" ".join(argv)),
            mask_sensitive_data(err),
            process.returncode,
        )

    return out, err


def check_command(name: str) -> bool:
    """Return True if ``name`` is an executable on PATH."""
    return shutil.which(name) is not None
