"""prrepost exception classes."""


class RepostError(Exception):
    """Base exception for all prrepost errors."""

    retryable = False

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(RepostError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class AuthenticationError(RepostError):
    """Raised when credentials are rejected."""

    pass


class AuthorizationError(RepostError):
    """Raised when access is denied."""

    pass


class NotFoundError(RepostError):
    """Raised when a resource is not found."""

    pass


class ValidationError(RepostError):
    """Raised on validation errors (e.g. head branch missing on the remote)."""

    pass


class RateLimitedError(RepostError):
    """Raised when rate limited."""

    retryable = True

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ServerError(RepostError):
    """Raised on server errors (5xx)."""

    retryable = True


class TransientNetworkError(RepostError):
    """Raised when the hosting API could not be reached."""

    retryable = True


class GitCommandError(RepostError):
    """Raised when a git command fails."""

    def __init__(
        self,
        code: str,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(code, message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class RemoteUnreachableError(GitCommandError):
    """Raised when a git remote cannot be reached."""

    retryable = True


class RemoteRejectedError(GitCommandError):
    """Raised when a git remote rejects a push."""

    pass
