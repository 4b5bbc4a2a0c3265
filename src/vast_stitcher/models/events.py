# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Structured events emitted while fetching content."""

from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel


class FetchPhase(str, Enum):
    """Lifecycle point of a content fetch."""

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class FetchEvent(BaseModel):
    """One observation of a remote or local content fetch."""

    request_id: str
    locator: str
    phase: FetchPhase
    elapsed_ms: Optional[float] = None
    status_code: Optional[int] = None
    detail: Optional[str] = None


FetchEventHook = Callable[[FetchEvent], None]
