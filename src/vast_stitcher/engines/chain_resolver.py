# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Chain Resolver - follows wrappers until InLine ads are found."""

import logging
from typing import Optional

from ..clients.base import BaseAsyncContentSource, BaseContentSource
from ..config import get_settings
from ..models.vast import Ad, VastDocument
from .chain_walker import ChainSteps, ChainWalker, run_blocking, run_suspending

logger = logging.getLogger(__name__)

NO_DOCUMENT_ERROR = "No VAST document could be parsed from the wrapper chain"


class ChainResolver:
    """Resolves a VAST document to the InLine ads its wrapper chain leads to.

    Result rules:
    - If any InLine ads were found, they are returned under the root
      document's version with no top-level error
    - Otherwise the last document that parsed is returned as-is
    - Otherwise an empty document with a descriptive error is returned

    Only a malformed root raises; failures on later hops just drop that branch.

    Example:
        resolver = ChainResolver()
        with ContentSource() as source:
            document = resolver.resolve(root_xml, source)
    """

    def __init__(
        self,
        walker: Optional[ChainWalker] = None,
        default_version: Optional[str] = None,
    ) -> None:
        """Initialize the chain resolver.

        Args:
            walker: Traversal to use (defaults to a walker built from settings)
            default_version: Version of the synthetic empty result
        """
        settings = get_settings()
        self.walker = walker or ChainWalker()
        self.default_version = default_version or settings.default_vast_version

    def steps(self, root_text: str) -> ChainSteps[VastDocument]:
        """Traversal steps producing the resolved document."""
        terminal_ads: list[Ad] = []
        root_version: Optional[str] = None
        fallback: Optional[VastDocument] = None

        def visit(document: VastDocument, depth: int) -> None:
            nonlocal root_version, fallback
            if depth == 0:
                root_version = document.version
            fallback = document
            terminal_ads.extend(document.inline_ads)

        yield from self.walker.walk(root_text, visit)

        if terminal_ads and root_version is not None:
            logger.info(f"Resolved {len(terminal_ads)} InLine ad(s)")
            return VastDocument(version=root_version, ads=terminal_ads)

        if fallback is not None:
            logger.info("No InLine ads found, returning last parsed document")
            return fallback

        logger.info("No VAST document parsed, returning empty document")
        return VastDocument(version=self.default_version, ads=[], error=NO_DOCUMENT_ERROR)

    def resolve(self, root_text: str, source: BaseContentSource) -> VastDocument:
        """Resolve the chain, blocking on each fetch."""
        return run_blocking(self.steps(root_text), source)

    async def resolve_async(
        self, root_text: str, source: BaseAsyncContentSource
    ) -> VastDocument:
        """Resolve the chain, awaiting each fetch."""
        return await run_suspending(self.steps(root_text), source)
