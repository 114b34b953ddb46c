"""Error taxonomy for the request/render pipeline.

Every error carries the process exit code the CLI uses when reporting it, so
each stage can fail independently while the entry point stays a single
``except`` clause.
"""

from __future__ import annotations


EXIT_USAGE = 2
EXIT_TRANSPORT = 3
EXIT_RENDER = 4


class HttpeekError(Exception):
    """Base class for expected, user-reportable failures."""

    exit_code = 1


class UsageError(HttpeekError):
    """Raised when command-line input is malformed."""

    exit_code = EXIT_USAGE


class InvalidUrlError(UsageError):
    """Raised when the request URL is not a well-formed absolute URI."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url


class InvalidBodyPairError(UsageError):
    """Raised when a body token is not of the form ``key=value``."""

    def __init__(self, token: str, reason: str) -> None:
        super().__init__(f"Invalid body item {token!r}: {reason}")
        self.token = token


class TransportError(HttpeekError):
    """Raised when the request could not be completed at the network layer."""

    exit_code = EXIT_TRANSPORT


class RenderError(HttpeekError):
    """Raised when a received response cannot be rendered."""

    exit_code = EXIT_RENDER


class BodyReadError(RenderError):
    """Raised when buffering the response body fails."""


class HighlightEngineError(RenderError):
    """Raised when a grammar or theme is missing from the highlighting engine."""
