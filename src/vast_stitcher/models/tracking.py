# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Tracking obligations collected from the wrapper hops of a chain."""

from pydantic import BaseModel, Field

from .vast import Impression, Wrapper


class TrackingBundle(BaseModel):
    """Tracking URLs gathered across every wrapper hop, in visitation order.

    ``tracking_events`` maps an event tag to its URLs; tags keep the order in
    which they were first seen.
    """

    impressions: list[Impression] = Field(default_factory=list)
    error_urls: list[str] = Field(default_factory=list)
    tracking_events: dict[str, list[str]] = Field(default_factory=dict)
    click_tracking: list[str] = Field(default_factory=list)
    custom_click: list[str] = Field(default_factory=list)

    @property
    def has_clicks(self) -> bool:
        return bool(self.click_tracking or self.custom_click)

    def event_pairs(self) -> list[tuple[str, str]]:
        """Flatten the event mapping into (tag, url) pairs."""
        return [(tag, url) for tag, urls in self.tracking_events.items() for url in urls]

    def add_wrapper(self, wrapper: Wrapper) -> None:
        """Record the tracking carried by one wrapper."""
        self.impressions.extend(imp.model_copy() for imp in wrapper.impressions)

        if wrapper.error is not None:
            self.error_urls.append(wrapper.error)

        for creative in wrapper.creatives:
            linear = creative.linear
            if linear is None:
                continue

            for event in linear.tracking_events:
                self.tracking_events.setdefault(event.event, []).append(event.url)

            if linear.video_clicks:
                self.click_tracking.extend(linear.video_clicks.click_tracking)
                self.custom_click.extend(linear.video_clicks.custom_click)
