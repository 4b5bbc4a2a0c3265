# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Unit tests for the VAST stitcher."""

import pytest

from vast_stitcher.engines.parser import parse_vast
from vast_stitcher.engines.stitcher import VastStitcher
from vast_stitcher.errors import StructuralError
from vast_stitcher.models.tracking import TrackingBundle
from vast_stitcher.models.vast import (
    Ad,
    CompanionAds,
    Creative,
    Impression,
    InLine,
    Linear,
    TrackingEvent,
    VastDocument,
    Wrapper,
)


@pytest.fixture
def bundle() -> TrackingBundle:
    return TrackingBundle(
        impressions=[Impression(url="https://w.example.com/imp")],
        error_urls=["https://w.example.com/err1", "https://w.example.com/err2"],
        tracking_events={"start": ["https://w.example.com/start"]},
        click_tracking=["https://w.example.com/click"],
        custom_click=["https://w.example.com/custom"],
    )


class TestMerge:
    """Tests for merging a tracking bundle into resolved ads."""

    def test_merge_inline(self, bundle):
        """Test merging a bundle into an InLine."""
        document = VastDocument(
            version="4.0",
            ads=[
                Ad(
                    content=InLine(
                        impressions=[Impression(url="https://i.example.com/imp")],
                        creatives=[
                            Creative(
                                content=Linear(
                                    tracking_events=[
                                        TrackingEvent(event="start", url="https://w.example.com/start")
                                    ]
                                )
                            ),
                            Creative(content=CompanionAds()),
                        ],
                    )
                )
            ],
        )
        merged = VastStitcher().merge(document, bundle)
        inline = merged.ads[0].inline

        assert [imp.url for imp in inline.impressions] == [
            "https://i.example.com/imp",
            "https://w.example.com/imp",
        ]
        assert inline.error == "https://w.example.com/err1"

        linear = inline.creatives[0].linear
        # Appended without deduplication
        assert [(e.event, e.url) for e in linear.tracking_events] == [
            ("start", "https://w.example.com/start"),
            ("start", "https://w.example.com/start"),
        ]
        assert linear.video_clicks.click_through is None
        assert linear.video_clicks.click_tracking == ["https://w.example.com/click"]
        assert linear.video_clicks.custom_click == ["https://w.example.com/custom"]
        assert inline.creatives[1].companion_ads.companions == []

    def test_merge_does_not_touch_input(self, bundle):
        """Test merge leaves its input untouched."""
        document = VastDocument(version="4.0", ads=[Ad(content=InLine(creatives=[Creative(content=Linear())]))])
        snapshot = document.model_copy(deep=True)
        VastStitcher().merge(document, bundle)
        assert document == snapshot

    def test_existing_error_is_kept(self, bundle):
        """Test an existing InLine error is kept."""
        document = VastDocument(version="4.0", ads=[Ad(content=InLine(error="https://i.example.com/err"))])
        merged = VastStitcher().merge(document, bundle)
        assert merged.ads[0].inline.error == "https://i.example.com/err"

    def test_no_clicks_leaves_video_clicks_absent(self):
        """Test VideoClicks stay absent without clicks."""
        document = VastDocument(version="4.0", ads=[Ad(content=InLine(creatives=[Creative(content=Linear())]))])
        bundle = TrackingBundle(tracking_events={"complete": ["https://w.example.com/complete"]})
        merged = VastStitcher().merge(document, bundle)
        linear = merged.ads[0].inline.creatives[0].linear
        assert linear.video_clicks is None
        assert linear.tracking_events[0].event == "complete"

    def test_wrapper_ads_are_untouched(self, bundle):
        """Test Wrapper ads are not merged."""
        wrapper = Wrapper(vast_ad_tag_uri="https://ads.example.com/next")
        document = VastDocument(version="4.0", ads=[Ad(content=wrapper)])
        merged = VastStitcher().merge(document, bundle)
        assert merged.ads[0].wrapper == wrapper

    def test_every_inline_ad_in_pod_is_merged(self, bundle):
        """Test every InLine in a pod is merged."""
        document = VastDocument(version="4.0", ads=[Ad(content=InLine()), Ad(content=InLine())])
        merged = VastStitcher().merge(document, bundle)
        for ad in merged.ads:
            assert [imp.url for imp in ad.inline.impressions] == ["https://w.example.com/imp"]


class TestStitch:
    """Tests for end-to-end stitching."""

    def test_two_hop_chain(self, two_hop_chain, source_factory):
        """Test stitching a two hop chain."""
        document = VastStitcher().stitch_document(
            two_hop_chain["root"], source_factory(two_hop_chain["documents"])
        )
        assert document.version == "3.0"
        inline = document.ads[0].inline

        assert [imp.url for imp in inline.impressions] == [
            "https://inline.example.com/imp",
            "https://w1.example.com/imp",
            "https://w2.example.com/imp",
        ]
        assert inline.error == "https://w1.example.com/error"

        linear = inline.creatives[0].linear
        starts = [e.url for e in linear.tracking_events if e.event == "start"]
        assert starts == [
            "https://inline.example.com/start",
            "https://w1.example.com/start",
            "https://w2.example.com/start",
        ]
        assert linear.video_clicks.click_through == "https://advertiser.example.com"
        assert linear.video_clicks.click_tracking == ["https://w1.example.com/click"]
        assert linear.video_clicks.custom_click == ["https://w2.example.com/custom"]

    def test_stitch_renders_parsable_xml(self, two_hop_chain, source_factory):
        """Test stitched XML parses back to the stitched document."""
        stitcher = VastStitcher()
        xml = stitcher.stitch(two_hop_chain["root"], source_factory(two_hop_chain["documents"]))
        document = stitcher.stitch_document(
            two_hop_chain["root"], source_factory(two_hop_chain["documents"])
        )
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert parse_vast(xml) == document

    def test_unresolved_chain_returns_fallback(self, vast, source_factory):
        """Test an unresolved chain returns the fallback document."""
        root = vast.document(vast.wrapper("https://ads.example.com/missing", impression="https://w.example.com/imp"))
        document = VastStitcher().stitch_document(root, source_factory({}))
        assert document.inline_ads == []
        assert document.ads[0].wrapper.vast_ad_tag_uri == "https://ads.example.com/missing"

    def test_empty_wrapper_error_fills_inline(self, vast, source_factory):
        """Test an empty wrapper Error still fills an InLine without one."""
        root = (
            '<VAST version="4.0"><Ad><Wrapper>'
            "<VASTAdTagURI>https://ads.example.com/inline</VASTAdTagURI><Error/>"
            "</Wrapper></Ad></VAST>"
        )
        source = source_factory({"https://ads.example.com/inline": vast.document(vast.inline())})
        document = VastStitcher().stitch_document(root, source)
        assert document.ads[0].inline.error == ""

    def test_malformed_root_raises(self, source_factory):
        """Test a malformed root raises."""
        with pytest.raises(StructuralError):
            VastStitcher().stitch("<VAST version=\"4.0\"><Ad>", source_factory({}))

    @pytest.mark.asyncio
    async def test_async_matches_blocking(self, two_hop_chain, source_factory, async_source_factory):
        """Test async stitching matches blocking."""
        blocking = VastStitcher().stitch(
            two_hop_chain["root"], source_factory(two_hop_chain["documents"])
        )
        suspending = await VastStitcher().stitch_async(
            two_hop_chain["root"], async_source_factory(two_hop_chain["documents"])
        )
        assert suspending == blocking

    @pytest.mark.asyncio
    async def test_async_malformed_root_raises(self, async_source_factory):
        """Test a malformed root raises in async mode."""
        with pytest.raises(StructuralError):
            await VastStitcher().stitch_document_async("not xml", async_source_factory({}))
