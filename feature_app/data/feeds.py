"""Feed transport: fetch JSON documents from the site root or over HTTP."""

import socket
from pathlib import Path
from typing import Any, Optional, Union
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin, urlparse
from urllib.request import Request, urlopen

import structlog

from ..config.defaults import FeedParams
from ..errors import FeedLoadError
from .parsers import ParseError, parse_json_payload

logger = structlog.get_logger(__name__)


def is_remote(source: str) -> bool:
    """True for http(s) URLs."""
    return urlparse(source).scheme in ("http", "https")


class FeedLoader:
    """
    Loads feed documents. No request is retried; the transport's own limits
    apply beyond the configured timeout.
    """

    def __init__(self, site_root: Union[str, Path, None] = None,
                 params: Optional[FeedParams] = None):
        """
        Initialize feed loader.

        Args:
            site_root: Directory or base URL that relative sources resolve against
            params: Transport parameters
        """
        self.site_root = site_root if site_root is not None else Path.cwd()
        self.params = params or FeedParams()

    def resolve(self, source: str) -> str:
        """Absolute URL or path for a source."""
        if is_remote(source):
            return source
        if isinstance(self.site_root, str) and is_remote(self.site_root):
            return urljoin(self.site_root.rstrip("/") + "/", source)
        return str(Path(self.site_root) / source)

    def fetch(self, source: str) -> Any:
        """
        Fetch and decode one feed.

        Raises:
            FeedLoadError: On missing file, non-success status, network error or invalid JSON
        """
        location = self.resolve(source)

        if is_remote(location):
            body = self._fetch_remote(location)
        else:
            body = self._read_local(location)

        try:
            payload = parse_json_payload(body)
        except ParseError as e:
            raise FeedLoadError(
                f"Invalid JSON in feed: {e}",
                source=source,
                reason="invalid_json",
                degraded_functionality=source,
            ) from e

        logger.debug("Feed loaded", source=source, location=location)
        return payload

    def fetch_first_available(self, sources) -> tuple[Any, str]:
        """
        Fetch the first source that loads successfully.

        Returns:
            (payload, source) of the first successful candidate

        Raises:
            FeedLoadError: When every candidate fails
        """
        failures = []
        for source in sources:
            try:
                return self.fetch(source), source
            except FeedLoadError as e:
                logger.debug("Feed candidate failed", source=source, error=str(e))
                failures.append(f"{source}: {e}")

        raise FeedLoadError(
            "All feed paths failed",
            source=", ".join(sources),
            reason="exhausted",
            degraded_functionality="; ".join(failures),
        )

    def _fetch_remote(self, url: str) -> bytes:
        """Fetch a remote document."""
        request = Request(
            url,
            headers={
                "Accept": "application/json",
                "Cache-Control": "no-cache",
                "User-Agent": self.params.user_agent,
            },
            method="GET",
        )
        try:
            with urlopen(request, timeout=self.params.timeout_seconds) as response:
                status = getattr(response, "status", 200)
                if not 200 <= status < 300:
                    raise FeedLoadError(
                        f"HTTP {status}",
                        source=url,
                        status=status,
                        reason="status",
                    )
                return response.read()
        except HTTPError as e:
            raise FeedLoadError(
                f"HTTP {e.code}: {e.reason}",
                source=url,
                status=e.code,
                reason="status",
            ) from e
        except (URLError, socket.timeout, OSError) as e:
            raise FeedLoadError(
                f"Network error: {e}",
                source=url,
                reason="network",
            ) from e

    def _read_local(self, path: str) -> bytes:
        """Read a document below the site root."""
        try:
            return Path(path).read_bytes()
        except FileNotFoundError as e:
            raise FeedLoadError(
                f"Feed not found: {path}",
                source=path,
                status=404,
                reason="status",
            ) from e
        except OSError as e:
            raise FeedLoadError(
                f"Cannot read feed: {e}",
                source=path,
                reason="network",
            ) from e
