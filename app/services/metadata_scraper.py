"""
Page metadata scraper.

Fetches a shared URL and reads title, description and preview image from
Open Graph / standard / Twitter meta tags. Scraping is best-effort: any
failure leaves the corresponding fields empty and the import continues with
the URL alone.
"""
import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

import httpx
from bs4 import BeautifulSoup

from app.core.config import Settings
from app.domain.models import PageMetadata

logger = logging.getLogger(__name__)

# Some recipe sites and social platforms only serve meta tags to known crawlers
CRAWLER_USER_AGENT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"

# (attribute, value) pairs in priority order; None attribute means the <title> element
TITLE_TAGS: Sequence[Tuple[Optional[str], str]] = (
    ("property", "og:title"),
    ("name", "title"),
    (None, "title"),
)
DESCRIPTION_TAGS: Sequence[Tuple[Optional[str], str]] = (
    ("property", "og:description"),
    ("name", "description"),
    ("name", "twitter:description"),
)
IMAGE_TAGS: Sequence[Tuple[Optional[str], str]] = (
    ("property", "og:image"),
    ("property", "og:image:secure_url"),
    ("name", "twitter:image"),
)


class MetadataScraper:
    """Scrapes preview metadata from arbitrary web pages"""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            settings: Application settings (timeout)
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = settings.METADATA_TIMEOUT_SECONDS
        self._transport = transport

    async def scrape(self, url: str, trace: Optional[List[str]] = None) -> PageMetadata:
        """
        Fetch a page and extract its metadata. Never raises.

        Args:
            url: Page URL
            trace: Optional diagnostics trace to append outcomes to

        Returns:
            PageMetadata with whichever fields were found
        """
        trace = trace if trace is not None else []

        try:
            # httpx timeouts apply per connect/read; the deadline covers the whole fetch
            response = await asyncio.wait_for(self._fetch(url), timeout=self.timeout)

            if response.status_code != 200:
                logger.warning(f"Metadata fetch returned HTTP {response.status_code} for {url[:100]}")
                trace.append(f"Metadata fetch failed: HTTP {response.status_code}")
                return PageMetadata()

            metadata = self.parse(response.text)

        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning(f"Metadata fetch timed out after {self.timeout}s for {url[:100]}")
            trace.append(f"Metadata fetch timed out after {self.timeout:g}s")
            return PageMetadata()
        except Exception as e:
            logger.warning(f"Metadata scrape failed for {url[:100]}: {e}")
            trace.append(f"Metadata scrape failed: {e}")
            return PageMetadata()

        logger.info(f"Metadata found: title=\"{(metadata.title or '')[:20]}\"")
        trace.append(
            "Metadata: "
            f"title={'yes' if metadata.title else 'no'}, "
            f"description={'yes' if metadata.description else 'no'}, "
            f"image={'yes' if metadata.thumbnail_url else 'no'}"
        )
        return metadata

    async def _fetch(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True
        ) as client:
            return await client.get(url, headers={"User-Agent": CRAWLER_USER_AGENT})

    def parse(self, html: str) -> PageMetadata:
        """
        Extract metadata from an HTML document.

        The parser decodes HTML entities in attribute values, so an
        og:image written as "a?x=1&amp;y=2" comes back as "a?x=1&y=2".
        Signed CDN URLs break if the escaped form is kept.
        """
        soup = BeautifulSoup(html, "html.parser")
        return PageMetadata(
            title=self._first_match(soup, TITLE_TAGS),
            description=self._first_match(soup, DESCRIPTION_TAGS),
            thumbnail_url=self._first_match(soup, IMAGE_TAGS),
        )

    def _first_match(
        self,
        soup: BeautifulSoup,
        tags: Sequence[Tuple[Optional[str], str]]
    ) -> Optional[str]:
        for attribute, value in tags:
            if attribute is None:
                element = soup.find(value)
                text = element.get_text() if element else None
            else:
                element = soup.find("meta", attrs={attribute: value})
                text = element.get("content") if element else None

            if text and text.strip():
                return text.strip()

        return None
