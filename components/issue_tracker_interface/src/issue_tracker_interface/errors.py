"""Errors raised while fetching the status of an issue."""

__all__ = [
    "FetchError",
    "HttpStatusError",
    "BadContentTypeError",
    "BadJsonError",
    "TransportError",
]


class FetchError(Exception):
    """Base exception raised when an issue tracker cannot tell us whether an issue is open."""


class HttpStatusError(FetchError):
    """Raised when the tracker answers with a status code of 300 or above."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"request to {url} failed with status {status_code}")
        self.status_code = status_code
        self.url = url


class BadContentTypeError(FetchError):
    """Raised when the Content-Type header is present but cannot be parsed, or names a charset that is not a text encoding."""

    def __init__(self, content_type: str, reason: str = "") -> None:
        message = f"failed to parse content type: {content_type!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.content_type = content_type


class BadJsonError(FetchError):
    """Raised when the response body is not a JSON document."""


class TransportError(FetchError):
    """Raised when the request never produced a response (connection refused, DNS, bad URL)."""
