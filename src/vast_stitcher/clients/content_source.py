# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Content sources that turn a locator into raw VAST text.

A locator is one of:
- a ``file://`` URI, looked up again under the samples directory when the literal
  path does not exist
- an existing local file path
- an HTTP(S) URL, fetched with GET; the timeout bounds the whole fetch,
  body included

Remote fetches are tagged with a short random request id that is logged with
timings and reported to an optional ``on_event`` hook as ``FetchEvent``s.
"""

import asyncio
import logging
import random
import string
import time
from pathlib import Path
from typing import Any, Optional

import httpx

from ..config import get_settings
from ..errors import ContentIOError, FetchError, FetchTimeoutError, NetworkError
from ..models.events import FetchEvent, FetchEventHook, FetchPhase
from .base import BaseAsyncContentSource, BaseContentSource

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"
REMOTE_SCHEMES = ("http", "https")


def new_request_id() -> str:
    """Six random alphanumerics identifying one fetch in the logs."""
    return "".join(random.choices(string.ascii_letters + string.digits, k=6))


def resolve_local_path(locator: str, samples_dir: str) -> Optional[Path]:
    """Map a locator to a local path, or None if it should be fetched remotely."""
    if locator.startswith(FILE_SCHEME):
        path = Path(locator[len(FILE_SCHEME):])
        try:
            if path.exists():
                return path
            candidate = Path(samples_dir) / path
            if candidate.exists():
                return candidate
        except OSError as exc:
            # e.g. ENAMETOOLONG; reading the literal path reports it as ContentIOError
            logger.debug(f"Could not stat {locator!r}: {exc}")
        return path

    try:
        path = Path(locator)
        if path.is_file():
            return path
    except OSError:
        pass
    return None


def read_local(path: Path) -> str:
    """Read a local VAST file."""
    logger.info(f"Reading from local file: {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentIOError(f"Failed to read file {path}: {exc}", locator=str(path)) from exc


class _RemoteFetchMixin:
    """Request bookkeeping shared by the blocking and suspending sources."""

    timeout: float
    user_agent: str
    on_event: Optional[FetchEventHook]

    def _client_options(self) -> dict[str, Any]:
        return {
            "timeout": self.timeout,
            "follow_redirects": True,
            "headers": {"User-Agent": self.user_agent},
        }

    def _validate_url(self, locator: str) -> httpx.URL:
        try:
            url = httpx.URL(locator)
        except httpx.InvalidURL as exc:
            raise NetworkError(f"Invalid URL {locator!r}: {exc}", locator=locator) from exc
        if url.scheme not in REMOTE_SCHEMES:
            raise NetworkError(f"Unsupported locator: {locator!r}", locator=locator)
        return url

    def _emit(self, event: FetchEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)

    def _started(self, request_id: str, locator: str) -> float:
        logger.info(f"[{request_id}] Fetching from URL: {locator}")
        self._emit(FetchEvent(request_id=request_id, locator=locator, phase=FetchPhase.STARTED))
        return time.perf_counter()

    def _elapsed_ms(self, started_at: float) -> float:
        return round((time.perf_counter() - started_at) * 1000, 3)

    def _check_status(
        self, request_id: str, locator: str, started_at: float, response: httpx.Response
    ) -> None:
        if not response.is_success:
            raise self._failed(
                request_id,
                locator,
                started_at,
                NetworkError(
                    f"Failed to fetch URL: HTTP status {response.status_code}",
                    locator=locator,
                    status_code=response.status_code,
                ),
            )

    def _check_deadline(self, request_id: str, locator: str, started_at: float) -> None:
        """Fail once the whole fetch has run past the timeout."""
        if time.perf_counter() - started_at > self.timeout:
            raise self._failed(request_id, locator, started_at, self._timed_out(locator))

    def _timed_out(self, locator: str) -> FetchTimeoutError:
        return FetchTimeoutError(
            f"Timed out after {self.timeout}s fetching {locator}", locator=locator
        )

    def _completed(
        self, request_id: str, locator: str, started_at: float, status_code: int, text: str
    ) -> str:
        elapsed = self._elapsed_ms(started_at)
        logger.info(f"[{request_id}] Total request completed in {elapsed}ms")
        self._emit(
            FetchEvent(
                request_id=request_id,
                locator=locator,
                phase=FetchPhase.COMPLETED,
                elapsed_ms=elapsed,
                status_code=status_code,
            )
        )
        return text

    def _failed(
        self, request_id: str, locator: str, started_at: float, error: NetworkError
    ) -> NetworkError:
        elapsed = self._elapsed_ms(started_at)
        logger.warning(f"[{request_id}] Request failed after {elapsed}ms: {error}")
        self._emit(
            FetchEvent(
                request_id=request_id,
                locator=locator,
                phase=FetchPhase.FAILED,
                elapsed_ms=elapsed,
                status_code=error.status_code,
                detail=str(error),
            )
        )
        return error

    def _translate(self, locator: str, exc: httpx.HTTPError) -> NetworkError:
        if isinstance(exc, httpx.TimeoutException):
            return self._timed_out(locator)
        return NetworkError(f"Failed to fetch URL: {exc}", locator=locator)


class ContentSource(_RemoteFetchMixin, BaseContentSource):
    """Blocking content source backed by ``httpx.Client``.

    Usage:
        with ContentSource() as source:
            xml = source.fetch("https://ads.example.com/vast.xml")
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        samples_dir: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        on_event: Optional[FetchEventHook] = None,
    ):
        """Initialize the content source.

        Args:
            timeout: Remote fetch timeout in seconds (defaults to settings)
            samples_dir: Fallback directory for file:// locators
            client: Pre-built HTTP client; the source closes only clients it created
            on_event: Hook receiving a FetchEvent for each fetch phase
        """
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self.samples_dir = samples_dir or settings.samples_dir
        self.user_agent = settings.user_agent
        self.on_event = on_event

        self._client = client
        self._owns_client = client is None

    def __enter__(self) -> "ContentSource":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(**self._client_options())
        return self._client

    def fetch(self, locator: str) -> str:
        """Fetch VAST content from a file path, file:// URI or URL."""
        if not locator:
            raise FetchError("Empty locator", locator=locator)

        path = resolve_local_path(locator, self.samples_dir)
        if path is not None:
            return read_local(path)

        url = self._validate_url(locator)
        request_id = new_request_id()
        started_at = self._started(request_id, locator)
        try:
            # httpx timeouts apply per read, so the total is bounded between chunks
            with self._get_client().stream("GET", url) as response:
                self._check_status(request_id, locator, started_at, response)
                chunks = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    self._check_deadline(request_id, locator, started_at)
                text = b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")
        except httpx.HTTPError as exc:
            raise self._failed(
                request_id, locator, started_at, self._translate(locator, exc)
            ) from exc
        return self._completed(request_id, locator, started_at, response.status_code, text)


class AsyncContentSource(_RemoteFetchMixin, BaseAsyncContentSource):
    """Suspending content source backed by ``httpx.AsyncClient``.

    Usage:
        async with AsyncContentSource() as source:
            xml = await source.fetch("https://ads.example.com/vast.xml")
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        samples_dir: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        on_event: Optional[FetchEventHook] = None,
    ):
        """Initialize the content source.

        Args:
            timeout: Remote fetch timeout in seconds (defaults to settings)
            samples_dir: Fallback directory for file:// locators
            client: Pre-built HTTP client; the source closes only clients it created
            on_event: Hook receiving a FetchEvent for each fetch phase
        """
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self.samples_dir = samples_dir or settings.samples_dir
        self.user_agent = settings.user_agent
        self.on_event = on_event

        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "AsyncContentSource":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_options())
        return self._client

    async def fetch(self, locator: str) -> str:
        """Fetch VAST content from a file path, file:// URI or URL."""
        if not locator:
            raise FetchError("Empty locator", locator=locator)

        path = resolve_local_path(locator, self.samples_dir)
        if path is not None:
            return await asyncio.to_thread(read_local, path)

        url = self._validate_url(locator)
        request_id = new_request_id()
        started_at = self._started(request_id, locator)
        try:
            response = await asyncio.wait_for(self._get_client().get(url), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise self._failed(request_id, locator, started_at, self._timed_out(locator)) from exc
        except httpx.HTTPError as exc:
            raise self._failed(
                request_id, locator, started_at, self._translate(locator, exc)
            ) from exc
        self._check_status(request_id, locator, started_at, response)
        return self._completed(
            request_id, locator, started_at, response.status_code, response.text
        )
