# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Content sources for local files and remote VAST ad servers."""

from .base import BaseAsyncContentSource, BaseContentSource
from .content_source import (
    AsyncContentSource,
    ContentSource,
    new_request_id,
    read_local,
    resolve_local_path,
)

__all__ = [
    "BaseContentSource",
    "BaseAsyncContentSource",
    "ContentSource",
    "AsyncContentSource",
    "new_request_id",
    "read_local",
    "resolve_local_path",
]
