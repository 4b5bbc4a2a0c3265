# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Exception hierarchy for VAST parsing, fetching and stitching.

Errors raised while handling the root document propagate to the caller.
Errors raised on any later hop of a wrapper chain are caught by the chain
walker and only remove that branch from the result.
"""

from typing import Optional


class VastError(Exception):
    """Base class for every error raised by vast_stitcher."""


class StructuralError(VastError):
    """The markup is not well-formed, ends early, or has no VAST root."""


class MissingFieldError(VastError):
    """A mandatory field is absent or empty."""

    def __init__(self, field: str):
        super().__init__(f"Missing required field: {field}")
        self.field = field


class UnsupportedFeatureError(VastError):
    """Reserved for VAST features the parser does not handle yet."""


class FetchError(VastError):
    """Content for a locator could not be retrieved."""

    def __init__(self, message: str, locator: Optional[str] = None):
        super().__init__(message)
        self.locator = locator


class ContentIOError(FetchError):
    """A local file could not be read."""


class NetworkError(FetchError):
    """A remote fetch failed or returned a non-2xx status."""

    def __init__(
        self,
        message: str,
        locator: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, locator=locator)
        self.status_code = status_code


class FetchTimeoutError(NetworkError):
    """A remote fetch did not complete within the configured timeout."""
