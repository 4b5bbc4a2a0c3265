# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Base content source interfaces."""

from abc import ABC, abstractmethod


class BaseContentSource(ABC):
    """Blocking source of raw VAST text."""

    @abstractmethod
    def fetch(self, locator: str) -> str:
        """Return the text behind a locator.

        Raises:
            FetchError: If the content cannot be retrieved
        """
        pass


class BaseAsyncContentSource(ABC):
    """Suspending source of raw VAST text."""

    @abstractmethod
    async def fetch(self, locator: str) -> str:
        """Return the text behind a locator.

        Raises:
            FetchError: If the content cannot be retrieved
        """
        pass
