# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Stitcher - merges wrapper tracking into the resolved InLine ads.

Stitching runs two independent traversals of the same wrapper chain: the
Chain Resolver finds the InLine ads and the Tracking Aggregator gathers the
tracking of every wrapper hop. The bundle is then appended to every InLine
ad of the resolved document:

- Wrapper impressions follow the InLine's own impressions
- The first wrapper error URL fills an InLine that has none
- Every (event, url) pair is appended to every Linear creative, without
  deduplication against existing events
- Wrapper click URLs extend the Linear's VideoClicks, created when missing
"""

import asyncio
import logging
from typing import Optional

from ..clients.base import BaseAsyncContentSource, BaseContentSource
from ..models.tracking import TrackingBundle
from ..models.vast import InLine, Linear, TrackingEvent, VastDocument, VideoClicks
from .chain_resolver import ChainResolver
from .serializer import VastSerializer
from .tracking_aggregator import TrackingAggregator

logger = logging.getLogger(__name__)


class VastStitcher:
    """Produces a single VAST document with the tracking of its whole chain.

    Example:
        stitcher = VastStitcher()
        with ContentSource() as source:
            xml = stitcher.stitch(root_xml, source)
    """

    def __init__(
        self,
        resolver: Optional[ChainResolver] = None,
        aggregator: Optional[TrackingAggregator] = None,
        serializer: Optional[VastSerializer] = None,
    ) -> None:
        """Initialize the stitcher.

        Args:
            resolver: Chain resolver for the terminal ads
            aggregator: Tracking aggregator for the wrapper hops
            serializer: Serializer used by ``stitch``
        """
        self.resolver = resolver or ChainResolver()
        self.aggregator = aggregator or TrackingAggregator(walker=self.resolver.walker)
        self.serializer = serializer or VastSerializer()

    def merge(self, document: VastDocument, bundle: TrackingBundle) -> VastDocument:
        """Return a copy of ``document`` with the bundle merged into its InLine ads."""
        merged = document.model_copy(deep=True)
        for ad in merged.ads:
            if ad.inline is not None:
                self._merge_inline(ad.inline, bundle)
        return merged

    def _merge_inline(self, inline: InLine, bundle: TrackingBundle) -> None:
        inline.impressions.extend(imp.model_copy() for imp in bundle.impressions)

        if inline.error is None and bundle.error_urls:
            inline.error = bundle.error_urls[0]

        for creative in inline.creatives:
            if creative.linear is not None:
                self._merge_linear(creative.linear, bundle)

    def _merge_linear(self, linear: Linear, bundle: TrackingBundle) -> None:
        for event, url in bundle.event_pairs():
            linear.tracking_events.append(TrackingEvent(event=event, url=url))

        if linear.video_clicks is not None:
            linear.video_clicks.click_tracking.extend(bundle.click_tracking)
            linear.video_clicks.custom_click.extend(bundle.custom_click)
        elif bundle.has_clicks:
            linear.video_clicks = VideoClicks(
                click_through=None,
                click_tracking=list(bundle.click_tracking),
                custom_click=list(bundle.custom_click),
            )

    # =========================================================================
    # Blocking
    # =========================================================================

    def stitch_document(self, root_text: str, source: BaseContentSource) -> VastDocument:
        """Resolve, collect and merge, blocking on each fetch."""
        bundle = self.aggregator.collect(root_text, source)
        resolved = self.resolver.resolve(root_text, source)
        return self.merge(resolved, bundle)

    def stitch(self, root_text: str, source: BaseContentSource) -> str:
        """Stitch the chain and render it as VAST XML."""
        return self.serializer.render(self.stitch_document(root_text, source))

    # =========================================================================
    # Suspending
    # =========================================================================

    async def stitch_document_async(
        self, root_text: str, source: BaseAsyncContentSource
    ) -> VastDocument:
        """Resolve, collect and merge, running both traversals concurrently."""
        results = await asyncio.gather(
            self.aggregator.collect_async(root_text, source),
            self.resolver.resolve_async(root_text, source),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        bundle, resolved = results
        return self.merge(resolved, bundle)

    async def stitch_async(self, root_text: str, source: BaseAsyncContentSource) -> str:
        """Stitch the chain and render it as VAST XML."""
        document = await self.stitch_document_async(root_text, source)
        return self.serializer.render(document)
