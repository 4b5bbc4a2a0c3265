# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Data models for VAST documents, tracking bundles and fetch events."""

from .events import FetchEvent, FetchEventHook, FetchPhase
from .tracking import TrackingBundle
from .vast import (
    Ad,
    AdSystem,
    Companion,
    CompanionAds,
    Creative,
    Extension,
    Impression,
    InLine,
    Linear,
    MediaFile,
    NonLinear,
    NonLinearAds,
    Pricing,
    ResourceType,
    TrackingEvent,
    VastDocument,
    VideoClicks,
    Wrapper,
)

__all__ = [
    # Document model
    "Ad",
    "AdSystem",
    "Companion",
    "CompanionAds",
    "Creative",
    "Extension",
    "Impression",
    "InLine",
    "Linear",
    "MediaFile",
    "NonLinear",
    "NonLinearAds",
    "Pricing",
    "ResourceType",
    "TrackingEvent",
    "VastDocument",
    "VideoClicks",
    "Wrapper",
    # Chain tracking
    "TrackingBundle",
    # Observability
    "FetchEvent",
    "FetchEventHook",
    "FetchPhase",
]
