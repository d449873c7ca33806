"""gitworkspace exception classes."""


class WorkspaceError(Exception):
    """Base exception for all gitworkspace errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(WorkspaceError):
    """Raised when workspace configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class MalformedPatternError(WorkspaceError):
    """Raised when a repository pattern is not of the form owner/name[#ref]."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(
            "MALFORMED_PATTERN",
            f"Repo '{pattern}' is not in form user/repo or user/repo#ref",
        )


class HostingAPIError(WorkspaceError):
    """Base exception for errors reported by the GitHub API."""

    def __init__(
        self, code: str, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(code, message)
        self.status_code = status_code


class AuthenticationError(HostingAPIError):
    """Raised when the access token is rejected."""

    pass


class AuthorizationError(HostingAPIError):
    """Raised when access is denied."""

    pass


class RepositoryNotFoundError(HostingAPIError):
    """Raised when a repository or owner is not found."""

    pass


class RepositoryMovedError(HostingAPIError):
    """Raised when GitHub reports a repository has moved permanently."""

    def __init__(
        self,
        code: str,
        message: str,
        location: str | None = None,
        status_code: int | None = 301,
    ) -> None:
        super().__init__(code, message, status_code)
        self.location = location


class RateLimitedError(HostingAPIError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        status_code: int | None = 429,
    ) -> None:
        super().__init__(code, message, status_code)
        self.retry_after = retry_after


class ValidationError(HostingAPIError):
    """Raised on other client errors (4xx)."""

    pass


class ServerError(HostingAPIError):
    """Raised on server errors (5xx) and connection failures."""

    pass


class CommandFailedError(WorkspaceError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: str, stderr: str, returncode: int) -> None:
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(
            "COMMAND_FAILED",
            f"`{command}` exited with status {returncode}: {stderr}",
        )


class MissingDependencyError(WorkspaceError):
    """Raised when a required external command is not installed."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(
            "MISSING_DEPENDENCY",
            f'global "{tool}" command not found. '
            f"Install {tool} on your machine and then retry.",
        )


class AlreadyInitializedError(WorkspaceError):
    """Raised when init() is called on a workspace more than once."""

    def __init__(self) -> None:
        super().__init__(
            "ALREADY_INITIALIZED", "Workspace has already been initialized."
        )


class NotInitializedError(WorkspaceError):
    """Raised when a workspace is used before init()."""

    def __init__(self) -> None:
        super().__init__(
            "NOT_INITIALIZED",
            "Workspace has not been initialized, run init() first.",
        )


class DirectoryConflictError(WorkspaceError):
    """Raised when two repositories would be cloned into the same folder."""

    def __init__(self, full_name: str, directory: str, claimed_by: str) -> None:
        self.full_name = full_name
        self.directory = directory
        self.claimed_by = claimed_by
        super().__init__(
            "DIRECTORY_CONFLICT",
            f"{full_name} would share {directory} with {claimed_by}",
        )
