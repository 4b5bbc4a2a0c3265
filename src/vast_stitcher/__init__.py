# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Parse, unwrap and stitch VAST wrapper chains."""

from .api import (
    async_collect_tracking,
    async_parse,
    async_resolve_chain,
    async_stitch,
    async_stitch_document,
    collect_tracking,
    parse,
    resolve_chain,
    stitch,
    stitch_document,
)
from .errors import (
    ContentIOError,
    FetchError,
    FetchTimeoutError,
    MissingFieldError,
    NetworkError,
    StructuralError,
    UnsupportedFeatureError,
    VastError,
)
from .models import TrackingBundle, VastDocument

__version__ = "0.1.0"

__all__ = [
    # Blocking API
    "parse",
    "resolve_chain",
    "collect_tracking",
    "stitch_document",
    "stitch",
    # Suspending API
    "async_parse",
    "async_resolve_chain",
    "async_collect_tracking",
    "async_stitch_document",
    "async_stitch",
    # Results
    "TrackingBundle",
    "VastDocument",
    # Errors
    "VastError",
    "StructuralError",
    "MissingFieldError",
    "FetchError",
    "ContentIOError",
    "NetworkError",
    "FetchTimeoutError",
    "UnsupportedFeatureError",
]
