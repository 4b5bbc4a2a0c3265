# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Parsing, traversal, merging and rendering engines."""

from .chain_resolver import ChainResolver
from .chain_walker import ChainWalker, run_blocking, run_suspending
from .parser import VastParser, parse_vast
from .serializer import VastSerializer, render_vast
from .stitcher import VastStitcher
from .tracking_aggregator import TrackingAggregator

__all__ = [
    "ChainResolver",
    "ChainWalker",
    "TrackingAggregator",
    "VastParser",
    "VastSerializer",
    "VastStitcher",
    "parse_vast",
    "render_vast",
    "run_blocking",
    "run_suspending",
]
