# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Configuration module."""

from .settings import (
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    MAX_WRAPPER_DEPTH,
    Settings,
    get_settings,
)

__all__ = [
    "DEFAULT_FETCH_TIMEOUT_SECONDS",
    "MAX_WRAPPER_DEPTH",
    "Settings",
    "get_settings",
]
