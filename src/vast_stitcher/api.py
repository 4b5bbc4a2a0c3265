# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Public entry points, in blocking and suspending calling conventions.

Both conventions share the same contracts:
- ``parse`` turns VAST text into a VastDocument
- ``resolve_chain`` follows wrappers to the InLine ads
- ``collect_tracking`` gathers the tracking of every wrapper hop
- ``stitch_document`` merges that tracking into the InLine ads
- ``stitch`` renders the stitched document as VAST XML

When no content source is given, one is built from settings and closed
before returning.
"""

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Optional

from .clients.base import BaseAsyncContentSource, BaseContentSource
from .clients.content_source import AsyncContentSource, ContentSource
from .engines.chain_resolver import ChainResolver
from .engines.parser import parse_vast
from .engines.stitcher import VastStitcher
from .engines.tracking_aggregator import TrackingAggregator
from .models.tracking import TrackingBundle
from .models.vast import VastDocument


@contextmanager
def _blocking_source(source: Optional[BaseContentSource]) -> Iterator[BaseContentSource]:
    if source is not None:
        yield source
        return
    with ContentSource() as owned:
        yield owned


@asynccontextmanager
async def _suspending_source(
    source: Optional[BaseAsyncContentSource],
) -> AsyncIterator[BaseAsyncContentSource]:
    if source is not None:
        yield source
        return
    async with AsyncContentSource() as owned:
        yield owned


# =============================================================================
# Blocking
# =============================================================================


def parse(text: str) -> VastDocument:
    """Parse VAST XML text."""
    return parse_vast(text)


def resolve_chain(text: str, source: Optional[BaseContentSource] = None) -> VastDocument:
    """Follow the wrapper chain of ``text`` to its InLine ads."""
    with _blocking_source(source) as active:
        return ChainResolver().resolve(text, active)


def collect_tracking(
    text: str, source: Optional[BaseContentSource] = None
) -> TrackingBundle:
    """Collect the tracking of every wrapper reachable from ``text``."""
    with _blocking_source(source) as active:
        return TrackingAggregator().collect(text, active)


def stitch_document(
    text: str, source: Optional[BaseContentSource] = None
) -> VastDocument:
    """Resolve the chain and merge the wrapper tracking into its InLine ads."""
    with _blocking_source(source) as active:
        return VastStitcher().stitch_document(text, active)


def stitch(text: str, source: Optional[BaseContentSource] = None) -> str:
    """Stitch the chain of ``text`` and render it as VAST XML."""
    with _blocking_source(source) as active:
        return VastStitcher().stitch(text, active)


# =============================================================================
# Suspending
# =============================================================================


async def async_parse(text: str) -> VastDocument:
    """Parse VAST XML text. Parsing is CPU-bound, so this does not suspend."""
    return parse_vast(text)


async def async_resolve_chain(
    text: str, source: Optional[BaseAsyncContentSource] = None
) -> VastDocument:
    """Follow the wrapper chain of ``text`` to its InLine ads."""
    async with _suspending_source(source) as active:
        return await ChainResolver().resolve_async(text, active)


async def async_collect_tracking(
    text: str, source: Optional[BaseAsyncContentSource] = None
) -> TrackingBundle:
    """Collect the tracking of every wrapper reachable from ``text``."""
    async with _suspending_source(source) as active:
        return await TrackingAggregator().collect_async(text, active)


async def async_stitch_document(
    text: str, source: Optional[BaseAsyncContentSource] = None
) -> VastDocument:
    """Resolve the chain and merge the wrapper tracking into its InLine ads."""
    async with _suspending_source(source) as active:
        return await VastStitcher().stitch_document_async(text, active)


async def async_stitch(
    text: str, source: Optional[BaseAsyncContentSource] = None
) -> str:
    """Stitch the chain of ``text`` and render it as VAST XML."""
    async with _suspending_source(source) as active:
        return await VastStitcher().stitch_async(text, active)
