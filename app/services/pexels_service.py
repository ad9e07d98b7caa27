import asyncio
import logging
import random
from typing import List, Optional

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)


class PexelsService:
    """Service for finding stock food photos for generated recipes."""

    PER_PAGE = 5  # pick randomly among the top results so similar queries vary
    SEARCH_TIMEOUT = 10.0  # seconds

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None
    ):
        """Initialize Pexels service.

        Args:
            settings: Application settings (API key and search URL)
            transport: Optional httpx transport (used by tests)
            rng: Optional random source for picking among results
        """
        self.api_key = settings.PEXELS_API_KEY
        self.search_url = settings.PEXELS_API_URL
        self._transport = transport
        self._rng = rng or random.Random()

        if not self.api_key:
            logger.warning("PEXELS_API_KEY not set - generated recipes will have no images")

    def is_enabled(self) -> bool:
        """Check if Pexels search is enabled (API key is set)."""
        return bool(self.api_key)

    async def search_photo(self, query: str) -> Optional[str]:
        """Search for a landscape photo matching the query.

        Args:
            query: Search text, e.g. "Pasta Primavera food"

        Returns:
            Photo URL (large2x, large or medium), or None if nothing was found or the search failed
        """
        if not self.is_enabled():
            return None

        try:
            logger.info(f"Searching Pexels for: {query}")
            async with httpx.AsyncClient(timeout=self.SEARCH_TIMEOUT, transport=self._transport) as client:
                response = await client.get(
                    self.search_url,
                    params={"query": query, "per_page": self.PER_PAGE, "orientation": "landscape"},
                    headers={"Authorization": self.api_key}
                )

            if response.status_code != 200:
                logger.error(f"Pexels API Error: {response.status_code} - {response.text}")
                return None

            photos = response.json().get("photos") or []
            if not photos:
                return None

            src = self._rng.choice(photos).get("src") or {}
            return src.get("large2x") or src.get("large") or src.get("medium")

        except Exception as e:
            logger.error(f"Pexels search exception: {e}")
            return None

    async def search_photos(self, queries: List[str]) -> List[Optional[str]]:
        """Run one search per query concurrently; results keep the query order."""
        tasks = [self.search_photo(query) for query in queries]
        return await asyncio.gather(*tasks)
