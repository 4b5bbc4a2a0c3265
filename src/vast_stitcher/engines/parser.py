# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Streaming VAST parser.

Decodes a VAST document in a single forward pass over lxml ``iterparse``
start/end events. Each nesting level recognises a fixed vocabulary of element
names; any other element is skipped as a whole subtree. Elements are cleared
as soon as they have been consumed, so the full document tree is never held
in memory.

Text content is the last non-blank text or CDATA run found directly inside an
element. Runs are never concatenated, whether a child element or a CDATA
boundary separates them.
"""

import io
import logging
import re
from collections.abc import Iterator
from typing import Optional

from lxml import etree

from ..errors import MissingFieldError, StructuralError
from ..models.vast import (
    Ad,
    AdSystem,
    CompanionAds,
    Creative,
    Extension,
    Impression,
    InLine,
    Linear,
    MediaFile,
    NonLinearAds,
    Pricing,
    TrackingEvent,
    VastDocument,
    VideoClicks,
    Wrapper,
)

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "VAST"

_XML_DECLARATION = re.compile(r"^\ufeff?\s*<\?xml[^>]*\?>")
_UINT = re.compile(r"\+?[0-9]+")
_UINT_MAX = 0xFFFFFFFF


def _local_name(element: etree._Element) -> str:
    """Tag name without any namespace prefix."""
    tag = element.tag
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _parse_uint(value: Optional[str]) -> Optional[int]:
    """Parse an unsigned 32-bit attribute value, None if it does not parse."""
    if value is None or not _UINT.fullmatch(value):
        return None
    number = int(value)
    return number if number <= _UINT_MAX else None


class _EventCursor:
    """Forward-only cursor over the start/end events of one document."""

    def __init__(self, text: str):
        # The declaration may name an encoding other than the UTF-8 we feed.
        data = _XML_DECLARATION.sub("", text, count=1).encode("utf-8")
        self._events = etree.iterparse(
            io.BytesIO(data),
            events=("start", "end"),
            remove_comments=True,
            remove_pis=True,
            strip_cdata=False,
            resolve_entities=False,
            no_network=True,
        )

    def next(self) -> tuple[str, etree._Element]:
        try:
            return next(self._events)
        except StopIteration:
            raise StructuralError("Unexpected end of document") from None
        except etree.XMLSyntaxError as exc:
            raise StructuralError(f"Failed to parse XML: {exc}") from exc

    def drain(self) -> None:
        """Consume trailing events so malformed trailing content is reported."""
        try:
            for _ in self._events:
                pass
        except etree.XMLSyntaxError as exc:
            raise StructuralError(f"Failed to parse XML: {exc}") from exc

    def children(self, parent: etree._Element) -> Iterator[etree._Element]:
        """Yield the direct children of ``parent`` as their start tags arrive.

        The caller must consume each child's subtree (parse it, read its text
        or skip it) before asking for the next one. Iteration ends at the
        parent's end tag.
        """
        while True:
            event, element = self.next()
            if event == "start":
                yield element
            else:
                return

    def skip(self, start: etree._Element) -> None:
        """Skip the subtree opened by ``start``.

        Only start/end tags with the skipped element's own name move the depth
        counter, which is enough to find the matching end tag even when the
        subtree nests elements of the same name.
        """
        name = start.tag
        depth = 1
        while depth:
            event, element = self.next()
            if element.tag == name:
                depth += 1 if event == "start" else -1
        self.release(start)

    def read_text(self, start: etree._Element) -> str:
        """Consume the subtree opened by ``start`` and return its text."""
        depth = 1
        while depth:
            event, _ = self.next()
            depth += 1 if event == "start" else -1

        # with CDATA kept, each text or CDATA run is its own node
        fragments = start.xpath("text()")
        text = ""
        for fragment in fragments:
            if fragment and fragment.strip():
                text = fragment.strip()
        self.release(start)
        return text

    @staticmethod
    def release(element: etree._Element) -> None:
        """Drop a consumed element and its already-consumed siblings."""
        element.clear(keep_tail=True)
        parent = element.getparent()
        if parent is not None:
            while element.getprevious() is not None:
                del parent[0]


class VastParser:
    """Parser for VAST XML documents.

    The parser is stateless; every call to ``parse`` builds a new document.

    Example:
        parser = VastParser()
        document = parser.parse(xml_text)
        for ad in document.inline_ads:
            print(ad.inline.ad_title)
    """

    def parse(self, text: str) -> VastDocument:
        """Parse VAST XML text.

        Args:
            text: Raw VAST XML

        Returns:
            The parsed document

        Raises:
            StructuralError: If the XML is malformed, truncated or its root
                element is not VAST
            MissingFieldError: If the root has no (or an empty) version
        """
        if not text or not text.strip():
            raise StructuralError("Empty document")

        cursor = _EventCursor(text)
        _, root = cursor.next()
        if _local_name(root) != ROOT_ELEMENT:
            raise StructuralError(
                f"Expected root element {ROOT_ELEMENT}, found {_local_name(root)}"
            )

        version = root.get("version")
        if not version:
            raise MissingFieldError("VAST version")

        ads: list[Ad] = []
        error: Optional[str] = None
        for child in cursor.children(root):
            name = _local_name(child)
            if name == "Ad":
                ads.append(self._parse_ad(cursor, child))
            elif name == "Error":
                error = cursor.read_text(child)
            else:
                cursor.skip(child)

        cursor.drain()
        return VastDocument(version=version, ads=ads, error=error)

    # =========================================================================
    # Ads
    # =========================================================================

    def _parse_ad(self, cursor: _EventCursor, start: etree._Element) -> Ad:
        conditional = start.get("conditionalAd")
        ad = Ad(
            id=start.get("id"),
            sequence=_parse_uint(start.get("sequence")),
            conditional_ad=conditional.lower() == "true" if conditional is not None else None,
        )

        for child in cursor.children(start):
            name = _local_name(child)
            if name == "InLine":
                # InLine wins over any Wrapper in the same Ad
                ad.content = self._parse_inline(cursor, child)
            elif name == "Wrapper" and ad.inline is None:
                ad.content = self._parse_wrapper(cursor, child)
            else:
                if name == "Wrapper":
                    logger.debug(f"Ad {ad.id!r} already has InLine content, skipping Wrapper")
                cursor.skip(child)

        cursor.release(start)
        return ad

    def _parse_inline(self, cursor: _EventCursor, start: etree._Element) -> InLine:
        inline = InLine()

        for child in cursor.children(start):
            name = _local_name(child)
            if name == "AdSystem":
                inline.ad_system = self._parse_ad_system(cursor, child)
            elif name == "AdTitle":
                inline.ad_title = cursor.read_text(child)
            elif name == "Impression":
                inline.impressions.append(self._parse_impression(cursor, child))
            elif name == "Description":
                inline.description = cursor.read_text(child)
            elif name == "Advertiser":
                inline.advertiser = cursor.read_text(child)
            elif name == "Survey":
                inline.survey = cursor.read_text(child)
            elif name == "Error":
                inline.error = cursor.read_text(child)
            elif name == "Pricing":
                inline.pricing = self._parse_pricing(cursor, child)
            elif name == "Extensions":
                inline.extensions = self._parse_extensions(cursor, child)
            elif name == "Creatives":
                inline.creatives = self._parse_creatives(cursor, child)
            else:
                cursor.skip(child)

        cursor.release(start)
        return inline

    def _parse_wrapper(self, cursor: _EventCursor, start: etree._Element) -> Wrapper:
        wrapper = Wrapper()

        for child in cursor.children(start):
            name = _local_name(child)
            if name == "AdSystem":
                wrapper.ad_system = self._parse_ad_system(cursor, child)
            elif name == "VASTAdTagURI":
                wrapper.vast_ad_tag_uri = cursor.read_text(child)
            elif name == "Impression":
                wrapper.impressions.append(self._parse_impression(cursor, child))
            elif name == "Error":
                wrapper.error = cursor.read_text(child)
            elif name == "Extensions":
                wrapper.extensions = self._parse_extensions(cursor, child)
            elif name == "Creatives":
                wrapper.creatives = self._parse_creatives(cursor, child)
            else:
                cursor.skip(child)

        cursor.release(start)
        return wrapper

    # =========================================================================
    # Leaf Elements
    # =========================================================================

    def _parse_ad_system(self, cursor: _EventCursor, start: etree._Element) -> AdSystem:
        version = start.get("version")
        return AdSystem(name=cursor.read_text(start), version=version)

    def _parse_impression(self, cursor: _EventCursor, start: etree._Element) -> Impression:
        impression_id = start.get("id")
        return Impression(id=impression_id, url=cursor.read_text(start))

    def _parse_pricing(self, cursor: _EventCursor, start: etree._Element) -> Pricing:
        model = start.get("model", "")
        currency = start.get("currency", "")
        return Pricing(model=model, currency=currency, value=cursor.read_text(start))

    def _parse_extensions(
        self, cursor: _EventCursor, start: etree._Element
    ) -> list[Extension]:
        extensions = []
        for child in cursor.children(start):
            if _local_name(child) == "Extension":
                extension_type = child.get("type")
                extensions.append(
                    Extension(type=extension_type, content=cursor.read_text(child))
                )
            else:
                cursor.skip(child)
        cursor.release(start)
        return extensions

    # =========================================================================
    # Creatives
    # =========================================================================

    def _parse_creatives(
        self, cursor: _EventCursor, start: etree._Element
    ) -> list[Creative]:
        creatives = []
        for child in cursor.children(start):
            if _local_name(child) == "Creative":
                creatives.append(self._parse_creative(cursor, child))
            else:
                cursor.skip(child)
        cursor.release(start)
        return creatives

    def _parse_creative(self, cursor: _EventCursor, start: etree._Element) -> Creative:
        creative = Creative(
            id=start.get("id"),
            sequence=_parse_uint(start.get("sequence")),
            ad_id=start.get("adId"),
            api_framework=start.get("apiFramework"),
        )

        for child in cursor.children(start):
            name = _local_name(child)
            if creative.content is not None:
                cursor.skip(child)
            elif name == "Linear":
                creative.content = self._parse_linear(cursor, child)
            elif name == "CompanionAds":
                # Companion assets are not read
                cursor.skip(child)
                creative.content = CompanionAds()
            elif name == "NonLinearAds":
                cursor.skip(child)
                creative.content = NonLinearAds()
            else:
                cursor.skip(child)

        cursor.release(start)
        return creative

    def _parse_linear(self, cursor: _EventCursor, start: etree._Element) -> Linear:
        linear = Linear()

        for child in cursor.children(start):
            name = _local_name(child)
            if name == "Duration":
                linear.duration = cursor.read_text(child)
            elif name == "MediaFiles":
                linear.media_files = self._parse_media_files(cursor, child)
            elif name == "VideoClicks":
                linear.video_clicks = self._parse_video_clicks(cursor, child)
            elif name == "TrackingEvents":
                linear.tracking_events = self._parse_tracking_events(cursor, child)
            else:
                cursor.skip(child)

        cursor.release(start)
        return linear

    def _parse_media_files(
        self, cursor: _EventCursor, start: etree._Element
    ) -> list[MediaFile]:
        media_files = []
        for child in cursor.children(start):
            if _local_name(child) != "MediaFile":
                cursor.skip(child)
                continue

            attributes = dict(child.attrib)
            media_files.append(
                MediaFile(
                    url=cursor.read_text(child),
                    mime_type=attributes.get("type", ""),
                    codec=attributes.get("codec"),
                    bitrate=_parse_uint(attributes.get("bitrate")),
                    width=_parse_uint(attributes.get("width")),
                    height=_parse_uint(attributes.get("height")),
                    delivery=attributes.get("delivery"),
                    media_type=attributes.get("mediaType"),
                )
            )
        cursor.release(start)
        return media_files

    def _parse_video_clicks(
        self, cursor: _EventCursor, start: etree._Element
    ) -> VideoClicks:
        video_clicks = VideoClicks()
        for child in cursor.children(start):
            name = _local_name(child)
            if name == "ClickThrough":
                video_clicks.click_through = cursor.read_text(child)
            elif name == "ClickTracking":
                video_clicks.click_tracking.append(cursor.read_text(child))
            elif name == "CustomClick":
                video_clicks.custom_click.append(cursor.read_text(child))
            else:
                cursor.skip(child)
        cursor.release(start)
        return video_clicks

    def _parse_tracking_events(
        self, cursor: _EventCursor, start: etree._Element
    ) -> list[TrackingEvent]:
        tracking_events = []
        for child in cursor.children(start):
            if _local_name(child) == "Tracking":
                event = child.get("event", "")
                tracking_events.append(
                    TrackingEvent(event=event, url=cursor.read_text(child))
                )
            else:
                cursor.skip(child)
        cursor.release(start)
        return tracking_events


def parse_vast(text: str) -> VastDocument:
    """Parse VAST XML text into a VastDocument."""
    return VastParser().parse(text)
