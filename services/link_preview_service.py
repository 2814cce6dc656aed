import logging
from functools import reduce
from typing import Iterator, Mapping, Optional, Tuple

from bs4 import BeautifulSoup

from models.schemas import LinkMetadata
from utils.http_client import FetchError, PageFetcher

logger = logging.getLogger(__name__)

OPEN_GRAPH_PREFIX = "og:"
TWITTER_PREFIX = "twitter:"

# Fields every record starts with, in output order
BASE_FIELDS = ("title", "description", "image", "siteName", "type")

TagPair = Tuple[str, Optional[str]]


class LinkPreviewService:

    @staticmethod
    def iter_meta_pairs(soup: BeautifulSoup, attribute: str, prefix: str) -> Iterator[TagPair]:
        """Yield ``(field, content)`` for each <meta> whose ``attribute`` starts with ``prefix``, in document order"""
        for element in soup.find_all("meta"):
            key = element.get(attribute)
            if isinstance(key, str) and key.startswith(prefix):
                yield key[len(prefix):], element.get("content")

    @staticmethod
    def merge_open_graph(record: Mapping[str, Optional[str]], pairs: Iterator[TagPair]) -> dict:
        """Open Graph values always overwrite, so the last tag for a field wins"""
        return reduce(lambda acc, pair: {**acc, pair[0]: pair[1]}, pairs, dict(record))

    @staticmethod
    def merge_twitter(record: Mapping[str, Optional[str]], pairs: Iterator[TagPair]) -> dict:
        """Twitter Card values only fill fields that are still empty"""
        return reduce(
            lambda acc, pair: acc if acc.get(pair[0]) else {**acc, pair[0]: pair[1]},
            pairs,
            dict(record),
        )

    @staticmethod
    def document_title(soup: BeautifulSoup) -> str:
        """Text of the first <title> only, so SVG titles further down the body are ignored"""
        title = soup.find("title")
        return title.get_text() if title else ""

    @staticmethod
    def meta_description(soup: BeautifulSoup) -> str:
        description = soup.find("meta", attrs={"name": "description"})
        if description is None:
            return ""
        return description.get("content") or ""

    @staticmethod
    def extract_metadata(html: str, url: str) -> LinkMetadata:
        """
        Build a link preview record from raw HTML.

        Open Graph tags are applied first, Twitter Card tags fill whatever is
        still empty, then <title> and <meta name="description"> serve as
        fallbacks. Empty fields are dropped from the result. ``url`` is always
        the requested URL.

        Args:
            html: Page markup, possibly malformed or partial
            url: The URL the markup was fetched from

        Returns:
            Mapping of field name to non-empty string value
        """
        soup = BeautifulSoup(html or "", "html.parser")

        record = {"url": url, **{name: "" for name in BASE_FIELDS}}
        record = LinkPreviewService.merge_open_graph(
            record, LinkPreviewService.iter_meta_pairs(soup, "property", OPEN_GRAPH_PREFIX)
        )
        record = LinkPreviewService.merge_twitter(
            record, LinkPreviewService.iter_meta_pairs(soup, "name", TWITTER_PREFIX)
        )

        if not record.get("title"):
            record["title"] = LinkPreviewService.document_title(soup)
        if not record.get("description"):
            record["description"] = LinkPreviewService.meta_description(soup)

        record["url"] = url
        return {key: value for key, value in record.items() if value}

    @staticmethod
    async def get_link_metadata(url: str, fetcher: PageFetcher) -> LinkMetadata:
        """Fetch ``url`` and extract its preview metadata"""
        try:
            html = await fetcher.fetch(url)
        except FetchError as e:
            logger.error(f"Error fetching metadata: {str(e)}")
            raise

        metadata = LinkPreviewService.extract_metadata(html, url)
        logger.info(f"Successfully generated preview for URL: {url}")
        logger.info(f"Fields: {', '.join(sorted(metadata))}")
        return metadata
