"""RSS feed client: fetch a remote feed and parse feed bodies."""

import io
import logging
from abc import ABC, abstractmethod

import feedparser
import requests

from .errors import from_http_error, from_parse_error
from .models import FeedDocument, Item

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class FeedParser(ABC):
    """Abstract base class for feed parsers."""

    @abstractmethod
    def parse(self, raw: bytes, source: str) -> FeedDocument:
        """
        Parse a raw feed body.

        Args:
            raw: The body bytes, kept verbatim on the returned document.
            source: Where the body came from (URL or path), for error messages.

        Raises:
            ParseError: If the body is not a well-formed feed.
        """
        pass


class HttpClient(ABC):
    """Abstract base class for HTTP clients."""

    @abstractmethod
    def get(self, url: str) -> bytes:
        """
        Retrieve ``url`` and return the full response body.

        Raises:
            NetworkError: On connection failure, timeout or non-success status.
        """
        pass


class FeedparserParser(FeedParser):
    """FeedParser backed by the ``feedparser`` library."""

    def parse(self, raw: bytes, source: str) -> FeedDocument:
        # BytesIO keeps feedparser from treating the body as a URL or path
        parsed = feedparser.parse(io.BytesIO(raw))

        if parsed.bozo and not isinstance(parsed.bozo_exception, feedparser.CharacterEncodingOverride):
            raise from_parse_error(parsed.bozo_exception, source) from parsed.bozo_exception
        if not parsed.version:
            raise from_parse_error(ValueError("unrecognised feed format"), source)

        items = tuple(
            Item(
                title=entry.get("title"),
                link=entry.get("link"),
                description=entry.get("description"),
                author=entry.get("author"),
                pub_date=entry.get("published"),
            )
            for entry in parsed.entries
        )
        return FeedDocument(items=items, raw=raw)


class RequestsHttpClient(HttpClient):
    """HttpClient backed by ``requests``."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def get(self, url: str) -> bytes:
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise from_http_error(e, url) from e
        return response.content


class FeedFetcher:
    """Retrieves the remote feed and parses it into a FeedDocument."""

    def __init__(self, http_client: HttpClient, parser: FeedParser):
        self.http_client = http_client
        self.parser = parser

    def fetch(self, url: str) -> FeedDocument:
        logger.info(f"Fetching RSS feed: {url}")
        raw = self.http_client.get(url)
        document = self.parser.parse(raw, url)
        logger.info(f"Fetched {len(document.items)} items from {url}")
        return document
