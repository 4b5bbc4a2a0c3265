# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Tracking Aggregator - gathers the tracking of every wrapper hop."""

import logging
from typing import Optional

from ..clients.base import BaseAsyncContentSource, BaseContentSource
from ..models.tracking import TrackingBundle
from ..models.vast import VastDocument
from .chain_walker import ChainSteps, ChainWalker, run_blocking, run_suspending

logger = logging.getLogger(__name__)


class TrackingAggregator:
    """Collects impressions, error, event and click URLs from wrapper hops.

    Every wrapper in every parsed hop contributes, including the root and
    wrappers whose target was already claimed by another branch. InLine
    content is ignored.
    """

    def __init__(self, walker: Optional[ChainWalker] = None) -> None:
        self.walker = walker or ChainWalker()

    def steps(self, root_text: str) -> ChainSteps[TrackingBundle]:
        """Traversal steps producing the tracking bundle."""
        bundle = TrackingBundle()

        def visit(document: VastDocument, depth: int) -> None:
            for ad in document.ads:
                if ad.wrapper is not None:
                    bundle.add_wrapper(ad.wrapper)

        yield from self.walker.walk(root_text, visit)

        logger.debug(
            f"Collected {len(bundle.impressions)} impression(s) and "
            f"{len(bundle.event_pairs())} tracking event(s) from wrappers"
        )
        return bundle

    def collect(self, root_text: str, source: BaseContentSource) -> TrackingBundle:
        """Collect wrapper tracking, blocking on each fetch."""
        return run_blocking(self.steps(root_text), source)

    async def collect_async(
        self, root_text: str, source: BaseAsyncContentSource
    ) -> TrackingBundle:
        """Collect wrapper tracking, awaiting each fetch."""
        return await run_suspending(self.steps(root_text), source)
