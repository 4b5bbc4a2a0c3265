"""Pytest configuration and fixtures for VAST Stitcher tests."""

import pytest
from typing import Optional, Union

from vast_stitcher.clients.base import BaseAsyncContentSource, BaseContentSource
from vast_stitcher.config import get_settings
from vast_stitcher.errors import NetworkError


class VastBuilder:
    """Builds small VAST documents for tests."""

    def document(self, *ads: str, version: Optional[str] = "4.0", error: Optional[str] = None) -> str:
        version_attr = f' version="{version}"' if version is not None else ""
        error_xml = f"<Error><![CDATA[{error}]]></Error>" if error else ""
        return f'<?xml version="1.0" encoding="UTF-8"?><VAST{version_attr}>{error_xml}{"".join(ads)}</VAST>'

    def tracking(self, events: list[tuple[str, str]]) -> str:
        if not events:
            return ""
        items = "".join(
            f'<Tracking event="{event}"><![CDATA[{url}]]></Tracking>' for event, url in events
        )
        return f"<TrackingEvents>{items}</TrackingEvents>"

    def clicks(
        self,
        click_through: Optional[str] = None,
        click_tracking: tuple[str, ...] = (),
        custom_click: tuple[str, ...] = (),
    ) -> str:
        if click_through is None and not click_tracking and not custom_click:
            return ""
        parts = []
        if click_through:
            parts.append(f"<ClickThrough><![CDATA[{click_through}]]></ClickThrough>")
        parts.extend(f"<ClickTracking><![CDATA[{url}]]></ClickTracking>" for url in click_tracking)
        parts.extend(f"<CustomClick><![CDATA[{url}]]></CustomClick>" for url in custom_click)
        return f"<VideoClicks>{''.join(parts)}</VideoClicks>"

    def wrapper(
        self,
        target: str,
        impression: Optional[str] = None,
        error: Optional[str] = None,
        events: Optional[list[tuple[str, str]]] = None,
        click_tracking: tuple[str, ...] = (),
        custom_click: tuple[str, ...] = (),
        ad_id: str = "wrapper",
    ) -> str:
        impression_xml = f"<Impression><![CDATA[{impression}]]></Impression>" if impression else ""
        error_xml = f"<Error><![CDATA[{error}]]></Error>" if error else ""
        linear_body = self.tracking(events or []) + self.clicks(
            click_tracking=click_tracking, custom_click=custom_click
        )
        creatives = (
            f"<Creatives><Creative><Linear>{linear_body}</Linear></Creative></Creatives>"
            if linear_body
            else ""
        )
        return (
            f'<Ad id="{ad_id}"><Wrapper>'
            f"<AdSystem>Wrapper System</AdSystem>"
            f"<VASTAdTagURI><![CDATA[{target}]]></VASTAdTagURI>"
            f"{impression_xml}{error_xml}{creatives}"
            f"</Wrapper></Ad>"
        )

    def inline(
        self,
        title: str = "Inline Ad",
        impression: Optional[str] = "https://inline.example.com/imp",
        error: Optional[str] = None,
        events: Optional[list[tuple[str, str]]] = None,
        click_through: Optional[str] = None,
        click_tracking: tuple[str, ...] = (),
        ad_id: str = "inline",
    ) -> str:
        impression_xml = f"<Impression><![CDATA[{impression}]]></Impression>" if impression else ""
        error_xml = f"<Error><![CDATA[{error}]]></Error>" if error else ""
        linear_body = (
            "<Duration>00:00:30</Duration>"
            + self.tracking(events or [])
            + self.clicks(click_through=click_through, click_tracking=click_tracking)
            + '<MediaFiles><MediaFile type="video/mp4" width="640" height="360">'
            "<![CDATA[https://cdn.example.com/video.mp4]]></MediaFile></MediaFiles>"
        )
        return (
            f'<Ad id="{ad_id}"><InLine>'
            f'<AdSystem version="1.0">Inline System</AdSystem>'
            f"<AdTitle>{title}</AdTitle>{impression_xml}{error_xml}"
            f"<Creatives><Creative><Linear>{linear_body}</Linear></Creative></Creatives>"
            f"</InLine></Ad>"
        )


class FakeContentSource(BaseContentSource):
    """In-memory redirect graph: locator -> text, or an exception to raise."""

    def __init__(self, documents: dict[str, Union[str, Exception]]):
        self.documents = documents
        self.calls: list[str] = []

    def fetch(self, locator: str) -> str:
        self.calls.append(locator)
        entry = self.documents.get(locator)
        if entry is None:
            raise NetworkError("Failed to fetch URL: HTTP status 404", locator=locator, status_code=404)
        if isinstance(entry, Exception):
            raise entry
        return entry


class FakeAsyncContentSource(BaseAsyncContentSource):
    """Async twin of FakeContentSource."""

    def __init__(self, documents: dict[str, Union[str, Exception]]):
        self.documents = documents
        self.calls: list[str] = []

    async def fetch(self, locator: str) -> str:
        self.calls.append(locator)
        entry = self.documents.get(locator)
        if entry is None:
            raise NetworkError("Failed to fetch URL: HTTP status 404", locator=locator, status_code=404)
        if isinstance(entry, Exception):
            raise entry
        return entry


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def vast() -> VastBuilder:
    """VAST document builder."""
    return VastBuilder()


@pytest.fixture
def source_factory():
    """Build a blocking fake source from a locator -> document mapping."""
    return FakeContentSource


@pytest.fixture
def async_source_factory():
    """Build an async fake source from a locator -> document mapping."""
    return FakeAsyncContentSource


@pytest.fixture
def two_hop_chain(vast: VastBuilder) -> dict:
    """Root wrapper W1 -> wrapper W2 -> InLine, each hop with tracking."""
    w1 = vast.document(
        vast.wrapper(
            "https://ads.example.com/w2",
            impression="https://w1.example.com/imp",
            error="https://w1.example.com/error",
            events=[("start", "https://w1.example.com/start")],
            click_tracking=("https://w1.example.com/click",),
        ),
        version="3.0",
    )
    w2 = vast.document(
        vast.wrapper(
            "https://ads.example.com/inline",
            impression="https://w2.example.com/imp",
            error="https://w2.example.com/error",
            events=[
                ("start", "https://w2.example.com/start"),
                ("complete", "https://w2.example.com/complete"),
            ],
            custom_click=("https://w2.example.com/custom",),
        )
    )
    inline = vast.document(
        vast.inline(
            events=[("start", "https://inline.example.com/start")],
            click_through="https://advertiser.example.com",
        )
    )
    return {
        "root": w1,
        "documents": {
            "https://ads.example.com/w2": w2,
            "https://ads.example.com/inline": inline,
        },
    }
