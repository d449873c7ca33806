"""
Git session for a single local working directory.

Every operation shells out to the ``git`` executable. The session holds no
state besides the directory path.
"""

from pathlib import Path

from gitworkspace.exceptions import CommandFailedError
from gitworkspace.process import run_command

GIT_COMMAND = "git"


class GitSession:
    """
    Runs git commands against one local directory.

    Example:
        ```python
        from gitworkspace.git import GitSession

        git = GitSession("./.workspace/polymer")
        if not git.is_git():
            await git.clone("https://github.com/Polymer/polymer.git")
        await git.checkout("master")
        sha = await git.get_head_sha()
        ```
    """

    def __init__(self, cwd: str | Path) -> None:
        """
        Initialize a session.

        Args:
            cwd: Working directory of the repository (may not exist yet)
        """
        self.cwd = Path(cwd)

    def __repr__(self) -> str:
        return f"GitSession({str(self.cwd)!r})"

    async def _git(self, *args: str) -> str:
        stdout, _ = await run_command(self.cwd, [GIT_COMMAND, *args])
        return stdout

    def is_git(self) -> bool:
        """Returns true if the directory exists and is its own git repo."""
        return (self.cwd / ".git").exists()

    async def get_head_sha(self) -> str:
        """Returns the git commit hash at HEAD."""
        return await self._git("rev-parse", "HEAD")

    async def get_current_ref(self) -> str:
        """
        Returns the checked-out branch name, or the HEAD commit hash when
        the working directory is detached (e.g. a tag or sha was checked out).
        """
        branch = await self._git("rev-parse", "--abbrev-ref", "HEAD")
        if branch == "HEAD":
            return await self.get_head_sha()
        return branch

    async def reset(self, target: str | None = None) -> None:
        """
        Resets the repo back to a clean state, optionally moving the
        current branch to ``target`` (e.g. ``origin/master``).

        Note that this deletes any untracked files in the repo directory,
        created through tooling or otherwise.
        """
        if target:
            await self._git("reset", "--hard", target)
        else:
            await self._git("reset", "--hard")
        await self._git("clean", "-fd")

    async def has_remote_branch(self, branch: str, remote_name: str = "origin") -> bool:
        """Returns true if ``remote_name`` has a fetched branch named ``branch``."""
        try:
            await self._git(
                "rev-parse", "--verify", "--quiet", f"refs/remotes/{remote_name}/{branch}"
            )
        except CommandFailedError:
            return False
        return True

    async def clone(self, url: str) -> str:
        """
        Clone ``url`` into this session's directory.

        Runs from the parent directory, which must already exist.
        """
        stdout, _ = await run_command(
            self.cwd.parent, [GIT_COMMAND, "clone", url, str(self.cwd)]
        )
        return stdout

    async def fetch(self, remote_name: str | None = None) -> str:
        if remote_name:
            return await self._git("fetch", remote_name)
        return await self._git("fetch")

    async def checkout(self, ref: str) -> str:
        return await self._git("checkout", ref)

    async def commit(self, message: str) -> str:
        return await self._git("commit", "-m", message)

    async def push(self, remote_name: str, branch_name: str) -> str:
        return await self._git("push", remote_name, branch_name)

    async def add_all_files(self) -> str:
        return await self._git("add", "-A")
