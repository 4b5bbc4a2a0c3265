# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Bounded traversal of VAST wrapper chains.

The traversal is written once, without any I/O. ``ChainWalker.walk`` is a
generator: whenever it needs the content behind a wrapper's VASTAdTagURI it
yields the locator, and the driver sends back the fetched text (or None when
the fetch failed). Two drivers run the same generator:

- ``run_blocking`` fetches through a blocking content source
- ``run_suspending`` awaits an async content source

so both calling conventions share identical merge semantics.
"""

import logging
from collections import deque
from collections.abc import Callable, Generator
from typing import Optional, TypeVar

from ..clients.base import BaseAsyncContentSource, BaseContentSource
from ..config import get_settings
from ..errors import FetchError, VastError
from ..models.vast import VastDocument
from .parser import VastParser

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Yields locators to fetch, receives fetched text (None on failure),
# returns the traversal result.
ChainSteps = Generator[str, Optional[str], T]

HopVisitor = Callable[[VastDocument, int], None]


class ChainWalker:
    """Breadth-first walk over the documents reachable from a root document.

    - Hops at ``depth >= max_depth`` are dropped without being parsed.
    - A hop that fails to parse is dropped; only the root's failure propagates.
    - Every VASTAdTagURI is followed at most once per walk. The visited set is
      flat and shared across all branches, so the first branch to reach a
      target claims it and later references to it are dropped.
    """

    def __init__(
        self,
        parser: Optional[VastParser] = None,
        max_depth: Optional[int] = None,
    ):
        """Initialize the walker.

        Args:
            parser: Parser used for every hop
            max_depth: Depth at which hops are dropped (defaults to settings)
        """
        settings = get_settings()
        self.parser = parser or VastParser()
        self.max_depth = max_depth if max_depth is not None else settings.max_wrapper_depth

    def walk(self, root_text: str, visit: HopVisitor) -> ChainSteps[None]:
        """Walk the chain, calling ``visit`` for every parsed hop in order.

        Raises:
            StructuralError: If the root document is malformed
            MissingFieldError: If the root document has no version
        """
        queue: deque[tuple[str, int]] = deque([(root_text, 0)])
        visited: set[str] = set()

        while queue:
            text, depth = queue.popleft()

            if depth >= self.max_depth:
                logger.info(f"Maximum wrapper depth {self.max_depth} reached, dropping hop")
                continue

            try:
                document = self.parser.parse(text)
            except VastError as exc:
                if depth == 0:
                    raise
                logger.warning(f"Dropping unparsable hop at depth {depth}: {exc}")
                continue

            visit(document, depth)

            for ad in document.ads:
                wrapper = ad.wrapper
                if wrapper is None:
                    continue

                target = wrapper.vast_ad_tag_uri
                if target in visited:
                    logger.info(f"Wrapper target already visited, skipping: {target}")
                    continue
                visited.add(target)

                logger.debug(f"Following wrapper at depth {depth}: {target}")
                fetched = yield target
                if fetched is not None:
                    queue.append((fetched, depth + 1))


def run_blocking(steps: ChainSteps[T], source: BaseContentSource) -> T:
    """Drive a traversal to completion, blocking on every fetch."""
    try:
        locator = next(steps)
        while True:
            try:
                fetched: Optional[str] = source.fetch(locator)
            except FetchError as exc:
                logger.warning(f"Dropping wrapper branch {locator}: {exc}")
                fetched = None
            locator = steps.send(fetched)
    except StopIteration as stop:
        return stop.value


async def run_suspending(steps: ChainSteps[T], source: BaseAsyncContentSource) -> T:
    """Drive a traversal to completion, awaiting every fetch."""
    try:
        locator = next(steps)
        while True:
            try:
                fetched: Optional[str] = await source.fetch(locator)
            except FetchError as exc:
                logger.warning(f"Dropping wrapper branch {locator}: {exc}")
                fetched = None
            locator = steps.send(fetched)
    except StopIteration as stop:
        return stop.value
