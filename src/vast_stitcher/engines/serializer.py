# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""VAST serializer.

Renders a VastDocument as canonical VAST XML. Element and attribute order is
fixed, optional fields are omitted when absent and URL-bearing text is written
as CDATA, the way ad servers emit it.
"""

from typing import Optional

from lxml import etree

from ..models.vast import (
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
    NonLinearAds,
    TrackingEvent,
    VastDocument,
    VideoClicks,
    Wrapper,
)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _attr(element: etree._Element, name: str, value: object) -> None:
    """Set an attribute unless the value is absent."""
    if value is None:
        return
    if isinstance(value, bool):
        value = "true" if value else "false"
    element.set(name, str(value))


def _text(parent: etree._Element, tag: str, text: Optional[str]) -> Optional[etree._Element]:
    """Append a child with escaped text, skipped when text is None."""
    if text is None:
        return None
    child = etree.SubElement(parent, tag)
    child.text = text
    return child


def _cdata(parent: etree._Element, tag: str, text: Optional[str]) -> Optional[etree._Element]:
    """Append a child whose text is a CDATA section, skipped when text is None.

    A value that cannot live inside a single CDATA section is escaped instead.
    """
    if text is None:
        return None
    child = etree.SubElement(parent, tag)
    child.text = etree.CDATA(text) if "]]>" not in text else text
    return child


class VastSerializer:
    """Renders VastDocument models as VAST XML text."""

    def render(self, document: VastDocument) -> str:
        """Render a document, including the XML declaration."""
        root = etree.Element("VAST")
        _attr(root, "version", document.version)
        _cdata(root, "Error", document.error)
        for ad in document.ads:
            self._ad(root, ad)

        body = etree.tostring(root, encoding="unicode", pretty_print=True)
        return XML_DECLARATION + body

    # =========================================================================
    # Ads
    # =========================================================================

    def _ad(self, parent: etree._Element, ad: Ad) -> None:
        element = etree.SubElement(parent, "Ad")
        _attr(element, "id", ad.id)
        _attr(element, "sequence", ad.sequence)
        _attr(element, "conditionalAd", ad.conditional_ad)

        if ad.inline is not None:
            self._inline(element, ad.inline)
        elif ad.wrapper is not None:
            self._wrapper(element, ad.wrapper)

    def _inline(self, parent: etree._Element, inline: InLine) -> None:
        element = etree.SubElement(parent, "InLine")
        self._ad_system(element, inline.ad_system)
        _text(element, "AdTitle", inline.ad_title)
        _text(element, "Description", inline.description)
        _text(element, "Advertiser", inline.advertiser)
        _cdata(element, "Survey", inline.survey)
        self._impressions(element, inline.impressions)
        _cdata(element, "Error", inline.error)

        if inline.pricing is not None:
            pricing = _text(element, "Pricing", inline.pricing.value)
            _attr(pricing, "model", inline.pricing.model)
            _attr(pricing, "currency", inline.pricing.currency)

        self._extensions(element, inline.extensions)
        self._creatives(element, inline.creatives)

    def _wrapper(self, parent: etree._Element, wrapper: Wrapper) -> None:
        element = etree.SubElement(parent, "Wrapper")
        self._ad_system(element, wrapper.ad_system)
        _cdata(element, "VASTAdTagURI", wrapper.vast_ad_tag_uri)
        self._impressions(element, wrapper.impressions)
        _cdata(element, "Error", wrapper.error)
        self._extensions(element, wrapper.extensions)
        self._creatives(element, wrapper.creatives)

    def _ad_system(self, parent: etree._Element, ad_system: AdSystem) -> None:
        element = _text(parent, "AdSystem", ad_system.name)
        _attr(element, "version", ad_system.version)

    def _impressions(self, parent: etree._Element, impressions: list[Impression]) -> None:
        for impression in impressions:
            element = _cdata(parent, "Impression", impression.url)
            _attr(element, "id", impression.id)

    def _extensions(self, parent: etree._Element, extensions: list[Extension]) -> None:
        if not extensions:
            return
        container = etree.SubElement(parent, "Extensions")
        for extension in extensions:
            element = _text(container, "Extension", extension.content)
            _attr(element, "type", extension.type)

    # =========================================================================
    # Creatives
    # =========================================================================

    def _creatives(self, parent: etree._Element, creatives: list[Creative]) -> None:
        if not creatives:
            return
        container = etree.SubElement(parent, "Creatives")
        for creative in creatives:
            element = etree.SubElement(container, "Creative")
            _attr(element, "id", creative.id)
            _attr(element, "sequence", creative.sequence)
            _attr(element, "adId", creative.ad_id)
            _attr(element, "apiFramework", creative.api_framework)

            if creative.linear is not None:
                self._linear(element, creative.linear)
            elif creative.companion_ads is not None:
                self._companion_ads(element, creative.companion_ads)
            elif creative.non_linear_ads is not None:
                self._non_linear_ads(element, creative.non_linear_ads)

    def _linear(self, parent: etree._Element, linear: Linear) -> None:
        element = etree.SubElement(parent, "Linear")
        _text(element, "Duration", linear.duration)
        self._tracking_events(element, linear.tracking_events)
        if linear.video_clicks is not None:
            self._video_clicks(element, linear.video_clicks)
        self._media_files(element, linear.media_files)

    def _tracking_events(
        self, parent: etree._Element, tracking_events: list[TrackingEvent]
    ) -> None:
        if not tracking_events:
            return
        container = etree.SubElement(parent, "TrackingEvents")
        for event in tracking_events:
            element = _cdata(container, "Tracking", event.url)
            _attr(element, "event", event.event)

    def _video_clicks(self, parent: etree._Element, video_clicks: VideoClicks) -> None:
        element = etree.SubElement(parent, "VideoClicks")
        _cdata(element, "ClickThrough", video_clicks.click_through)
        for url in video_clicks.click_tracking:
            _cdata(element, "ClickTracking", url)
        for url in video_clicks.custom_click:
            _cdata(element, "CustomClick", url)

    def _media_files(self, parent: etree._Element, media_files: list[MediaFile]) -> None:
        if not media_files:
            return
        container = etree.SubElement(parent, "MediaFiles")
        for media_file in media_files:
            element = _cdata(container, "MediaFile", media_file.url)
            _attr(element, "type", media_file.mime_type)
            _attr(element, "delivery", media_file.delivery)
            _attr(element, "width", media_file.width)
            _attr(element, "height", media_file.height)
            _attr(element, "codec", media_file.codec)
            _attr(element, "bitrate", media_file.bitrate)
            _attr(element, "mediaType", media_file.media_type)

    def _companion_ads(self, parent: etree._Element, companion_ads: CompanionAds) -> None:
        element = etree.SubElement(parent, "CompanionAds")
        for companion in companion_ads.companions:
            self._companion(element, companion)

    def _companion(self, parent: etree._Element, companion: Companion) -> None:
        element = etree.SubElement(parent, "Companion")
        _attr(element, "id", companion.id)
        _attr(element, "width", companion.width)
        _attr(element, "height", companion.height)
        _cdata(element, companion.resource_type.value, companion.resource)
        _cdata(element, "CompanionClickThrough", companion.click_through)
        self._tracking_events(element, companion.tracking_events)

    def _non_linear_ads(self, parent: etree._Element, non_linear_ads: NonLinearAds) -> None:
        element = etree.SubElement(parent, "NonLinearAds")
        for non_linear in non_linear_ads.non_linears:
            child = etree.SubElement(element, "NonLinear")
            _attr(child, "id", non_linear.id)
            _attr(child, "width", non_linear.width)
            _attr(child, "height", non_linear.height)
            _attr(child, "expandedWidth", non_linear.expand_width)
            _attr(child, "expandedHeight", non_linear.expand_height)
            _attr(child, "scalable", non_linear.scalable)
            _attr(child, "maintainAspectRatio", non_linear.maintain_aspect_ratio)
            _cdata(child, non_linear.resource_type.value, non_linear.resource)
            _cdata(child, "NonLinearClickThrough", non_linear.click_through)


def render_vast(document: VastDocument) -> str:
    """Render a VastDocument as VAST XML text."""
    return VastSerializer().render(document)
