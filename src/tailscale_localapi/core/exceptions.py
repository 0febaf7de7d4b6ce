"""Tailscale LocalAPI Exception Hierarchy.

All custom exceptions inherit from LocalAPIError, enabling consistent
error handling across the client.

Exception Categories:
- Discovery errors → raised while constructing the client, never recovered
- Connection errors → transport failures of a single request
- Request errors → non-success HTTP status, carry the response body
- Validation errors → rejected before or after I/O, never retried

Usage:
    from tailscale_localapi.core.exceptions import LocalAPIRequestError

    raise LocalAPIRequestError(
        operation="whois",
        status_code=404,
        body="no match for IP:port",
    )
"""

from typing import Any, Optional


class LocalAPIError(Exception):
    """Base exception for all LocalAPI client errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: Optional[str] = None) -> None:
        """Initialize LocalAPIError.

        Args:
            message: Optional custom message. Defaults to a generic message.
        """
        self.message = message or "A Tailscale LocalAPI error occurred."
        super().__init__(self.message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context dictionary for structured logging.

        Returns:
            dict: Key-value pairs of exception context.
        """
        return {}

    def __repr__(self) -> str:
        """Return debug representation."""
        return f"{self.__class__.__name__}({self.message!r})"


class CredentialDiscoveryError(LocalAPIError):
    """The sameuserproof credentials could not be read.

    Raised on macOS when the ipnport symlink or the matching
    sameuserproof file is missing, unreadable or malformed.

    Attributes:
        shared_dir: Directory the credential files were read from.
        reason: What went wrong.
    """

    def __init__(
        self,
        shared_dir: str,
        reason: str,
        message: Optional[str] = None,
    ) -> None:
        self.shared_dir = shared_dir
        self.reason = reason

        if message is None:
            message = f"Failed to read credentials: {reason}"

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for credential discovery failure."""
        return {
            "shared_dir": self.shared_dir,
            "reason": self.reason,
        }

    def __repr__(self) -> str:
        return (
            f"CredentialDiscoveryError(shared_dir={self.shared_dir!r}, "
            f"reason={self.reason!r})"
        )


class LocalAPIConnectionError(LocalAPIError):
    """A request could not reach the daemon.

    Wraps transport-level failures (socket missing, connection refused,
    connection reset) of a single request.

    Attributes:
        endpoint: Socket path or base URL the request was sent to.
        path: Request path.
    """

    def __init__(
        self,
        endpoint: str,
        path: str,
        message: Optional[str] = None,
    ) -> None:
        self.endpoint = endpoint
        self.path = path

        if message is None:
            message = f"Failed to reach tailscaled at {endpoint} for {path}"

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for the failed request."""
        return {
            "endpoint": self.endpoint,
            "path": self.path,
        }


class ConnectionExhaustedError(LocalAPIError):
    """The startup probe gave up after its retry budget.

    Raised from ConnectionProbe.wait_ready() once every attempt failed.
    The owning application decides whether this is fatal.

    Attributes:
        attempts: Number of probe attempts made.
        transport: Human-readable transport name.
        last_error: Message of the final failure, if any.
    """

    def __init__(
        self,
        attempts: int,
        transport: str,
        last_error: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.attempts = attempts
        self.transport = transport
        self.last_error = last_error

        if message is None:
            message = (
                f"Failed to connect to Tailscale with {transport} "
                f"after {attempts} attempts."
            )

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for probe exhaustion."""
        return {
            "attempts": self.attempts,
            "transport": self.transport,
            "last_error": self.last_error,
        }

    def __repr__(self) -> str:
        return (
            f"ConnectionExhaustedError(attempts={self.attempts!r}, "
            f"transport={self.transport!r})"
        )


class LocalAPIRequestError(LocalAPIError):
    """The daemon answered with a non-success status.

    Attributes:
        operation: Client operation that failed (e.g. 'whois').
        status_code: HTTP status returned by the daemon.
        body: Response body text, as sent by the daemon.
    """

    def __init__(
        self,
        operation: str,
        status_code: int,
        body: str = "",
        message: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body

        if message is None:
            message = f"Failed to {operation}: {status_code} {body}".rstrip()

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for the rejected request."""
        return {
            "operation": self.operation,
            "status_code": self.status_code,
            "body": self.body,
        }

    def __repr__(self) -> str:
        return (
            f"LocalAPIRequestError(operation={self.operation!r}, "
            f"status_code={self.status_code!r})"
        )


class LocalAPIValidationError(LocalAPIError):
    """Input or response failed a client-side check.

    Attributes:
        field: Name of the offending argument or header.
        value: The rejected value.
    """

    def __init__(
        self,
        field: str,
        value: Any = None,
        message: Optional[str] = None,
    ) -> None:
        self.field = field
        self.value = value

        if message is None:
            message = f"Invalid value for {field}: {value!r}"

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for the validation failure."""
        return {
            "field": self.field,
            "value": self.value,
        }


class ConfigurationError(LocalAPIError):
    """Configuration file or value is invalid.

    Attributes:
        config_path: Path to the configuration file.
        key: The configuration key that caused the error.
    """

    def __init__(
        self,
        config_path: str,
        key: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.config_path = config_path
        self.key = key

        if message is None:
            if key:
                message = f"Invalid configuration in '{config_path}': key '{key}'."
            else:
                message = f"Invalid configuration in '{config_path}'."

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for configuration error."""
        return {
            "config_path": self.config_path,
            "key": self.key,
        }
