from __future__ import annotations

"""
Error taxonomy for the OFSC client.

Every error raised by the library derives from OFSCError so callers can
catch the whole family in one place.
"""


class OFSCError(Exception):
    """Base class for all errors raised by ofsc."""


class ValidationError(OFSCError, ValueError):
    """Malformed caller input, raised before any network call."""


class AuthError(OFSCError):
    """
    Credential exchange failed, or the backend kept answering 401 after a renewal.

    Attributes:
        status (int | None): HTTP status of the failing response, if any
        body (str | None): Response body text, if any
    """

    def __init__(
        self, message: str, status: int | None = None, body: str | None = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class RequestError(OFSCError):
    """
    Terminal failure of a request: a non-2xx answer or a transport error.

    Attributes:
        status (int | None): HTTP status code (None for transport failures)
        body (str): Response body text or the transport error message
        url (str): The URL that was requested
    """

    def __init__(self, status: int | None, body: str, url: str) -> None:
        self.status = status
        self.body = body
        self.url = url
        label = f"HTTP {status}" if status is not None else "Transport error"
        super().__init__(f"Request to {url} failed: {label}\n{body}")


class RateLimitExhausted(RequestError):
    """The retry budget ran out while the backend was still answering 429."""
