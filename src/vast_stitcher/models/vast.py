# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Typed document model for VAST (Video Ad Serving Template) responses.

The model covers the subset of VAST that matters for unwrapping and
stitching wrapper chains:
- The document root with its version and ad pod
- InLine ads (terminal, playable) and Wrapper ads (pointers to another document)
- Creatives with Linear, CompanionAds or NonLinearAds payloads
- Impression, error, click and event tracking URLs

Payloads that are "one of" several kinds are tagged unions keyed on ``kind``,
so an Ad or Creative holds at most one payload and may hold none.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================


class ResourceType(str, Enum):
    """Asset container used by companion and non-linear creatives."""

    STATIC = "StaticResource"
    IFRAME = "IFrameResource"
    HTML = "HTMLResource"


# =============================================================================
# Shared Elements
# =============================================================================


class AdSystem(BaseModel):
    """Name and optional version of the ad server that returned the ad."""

    name: str = ""
    version: Optional[str] = None


class Impression(BaseModel):
    """Impression tracking URL."""

    id: Optional[str] = None
    url: str


class Pricing(BaseModel):
    """Price of the ad, e.g. model="CPM" currency="USD"."""

    model: str = ""
    currency: str = ""
    value: str = ""


class Extension(BaseModel):
    """Vendor extension. Only the flattened text content is kept."""

    type: Optional[str] = None
    content: str = ""


class TrackingEvent(BaseModel):
    """Tracking URL fired for a playback event such as "start" or "complete"."""

    event: str
    url: str


# =============================================================================
# Creative Payloads
# =============================================================================


class MediaFile(BaseModel):
    """A playable rendition of a linear creative."""

    url: str
    mime_type: str = ""
    codec: Optional[str] = None
    bitrate: Optional[int] = Field(default=None, ge=0)
    width: Optional[int] = Field(default=None, ge=0)
    height: Optional[int] = Field(default=None, ge=0)
    delivery: Optional[str] = None  # progressive or streaming
    media_type: Optional[str] = None


class VideoClicks(BaseModel):
    """Click-through and click tracking URLs of a linear creative."""

    click_through: Optional[str] = None
    click_tracking: list[str] = Field(default_factory=list)
    custom_click: list[str] = Field(default_factory=list)


class Linear(BaseModel):
    """Linear (in-stream) video creative."""

    kind: Literal["linear"] = "linear"
    duration: Optional[str] = None
    media_files: list[MediaFile] = Field(default_factory=list)
    video_clicks: Optional[VideoClicks] = None
    tracking_events: list[TrackingEvent] = Field(default_factory=list)


class Companion(BaseModel):
    """Companion banner displayed alongside the video."""

    id: Optional[str] = None
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    resource_type: ResourceType
    resource: str
    click_through: Optional[str] = None
    tracking_events: list[TrackingEvent] = Field(default_factory=list)


class CompanionAds(BaseModel):
    """Companion creatives.

    The parser recognises the element but does not read its assets, so
    parsed documents always carry an empty list here.
    """

    kind: Literal["companion_ads"] = "companion_ads"
    companions: list[Companion] = Field(default_factory=list)


class NonLinear(BaseModel):
    """Overlay creative displayed over the video content."""

    id: Optional[str] = None
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    expand_width: Optional[int] = Field(default=None, ge=0)
    expand_height: Optional[int] = Field(default=None, ge=0)
    scalable: Optional[bool] = None
    maintain_aspect_ratio: Optional[bool] = None
    resource_type: ResourceType
    resource: str
    click_through: Optional[str] = None


class NonLinearAds(BaseModel):
    """Non-linear creatives. Assets are not populated by the parser."""

    kind: Literal["non_linear_ads"] = "non_linear_ads"
    non_linears: list[NonLinear] = Field(default_factory=list)


CreativeContent = Annotated[
    Union[Linear, CompanionAds, NonLinearAds],
    Field(discriminator="kind"),
]


class Creative(BaseModel):
    """A creative with at most one payload."""

    id: Optional[str] = None
    sequence: Optional[int] = Field(default=None, ge=0)
    ad_id: Optional[str] = None
    api_framework: Optional[str] = None
    content: Optional[CreativeContent] = None

    @property
    def linear(self) -> Optional[Linear]:
        return self.content if isinstance(self.content, Linear) else None

    @property
    def companion_ads(self) -> Optional[CompanionAds]:
        return self.content if isinstance(self.content, CompanionAds) else None

    @property
    def non_linear_ads(self) -> Optional[NonLinearAds]:
        return self.content if isinstance(self.content, NonLinearAds) else None


# =============================================================================
# Ads
# =============================================================================


class InLine(BaseModel):
    """Terminal ad carrying playable creatives and tracking."""

    kind: Literal["inline"] = "inline"
    ad_system: AdSystem = Field(default_factory=AdSystem)
    ad_title: str = ""
    impressions: list[Impression] = Field(default_factory=list)
    description: Optional[str] = None
    advertiser: Optional[str] = None
    survey: Optional[str] = None
    error: Optional[str] = None
    pricing: Optional[Pricing] = None
    extensions: list[Extension] = Field(default_factory=list)
    creatives: list[Creative] = Field(default_factory=list)


class Wrapper(BaseModel):
    """Pointer to another VAST document plus supplemental tracking.

    Wrapper creatives normally carry only tracking, but nothing enforces it.
    """

    kind: Literal["wrapper"] = "wrapper"
    ad_system: AdSystem = Field(default_factory=AdSystem)
    vast_ad_tag_uri: str = ""
    impressions: list[Impression] = Field(default_factory=list)
    error: Optional[str] = None
    extensions: list[Extension] = Field(default_factory=list)
    creatives: list[Creative] = Field(default_factory=list)


AdContent = Annotated[Union[InLine, Wrapper], Field(discriminator="kind")]


class Ad(BaseModel):
    """An ad in the pod. ``content`` is None for malformed or unknown ads."""

    id: Optional[str] = None
    sequence: Optional[int] = Field(default=None, ge=0)
    conditional_ad: Optional[bool] = None
    content: Optional[AdContent] = None

    @property
    def inline(self) -> Optional[InLine]:
        return self.content if isinstance(self.content, InLine) else None

    @property
    def wrapper(self) -> Optional[Wrapper]:
        return self.content if isinstance(self.content, Wrapper) else None


class VastDocument(BaseModel):
    """A parsed VAST response."""

    version: str = Field(min_length=1)
    ads: list[Ad] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def inline_ads(self) -> list[Ad]:
        """Ads that carry terminal InLine content."""
        return [ad for ad in self.ads if ad.inline is not None]
