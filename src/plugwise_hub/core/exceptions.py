"""Custom exceptions for the Plugwise hub toolkit."""


class PlugwiseHubError(Exception):
    """Base exception for all Plugwise hub errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class AuthenticationError(PlugwiseHubError):
    """Gateway rejected the credential (HTTP 401). Never retried."""

    pass


class ConnectionError(PlugwiseHubError):
    """Gateway unreachable, timed out, or answered with a bad HTTP status."""

    pass


class ParseError(PlugwiseHubError):
    """Malformed document or unexpected document shape."""

    pass


class DomainError(PlugwiseHubError):
    """Operation on a nonexistent id or an unsupported capability."""

    pass


class NotConnectedError(PlugwiseHubError):
    """Operation attempted before a successful connect()."""

    def __init__(self, operation: str):
        super().__init__(f"Not connected, call connect() before {operation}")
        self.operation = operation


class ValidationError(PlugwiseHubError):
    """Input validation error."""

    pass


class StorageError(PlugwiseHubError):
    """Hub records could not be written or removed."""

    pass
