"""
Image Resolution Service

Turns a thumbnail URL from a third-party page into something the app can
always display. Origins frequently block hot-linking, geo-restrict, or hand
out short-lived signed URLs, so the image is materialized through an ordered
list of strategies and the first one that produces a value wins:

1. fetch the bytes with a crawler user agent
2. embed them inline as a base64 data URI
3. upload them to Supabase Storage and use the public URL
4. rewrite the original URL through the wsrv.nl resize/caching proxy

Every attempt and outcome is appended to the diagnostics trace.
"""
import asyncio
import base64
import logging
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple
from urllib.parse import quote

import httpx

from app.core.config import Settings
from app.domain.exceptions import ImageEncodingError
from app.services.metadata_scraper import CRAWLER_USER_AGENT

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"

# Must be a multiple of 3 so per-chunk base64 output concatenates into one valid payload
ENCODE_CHUNK_SIZE = 3 * 1024


@dataclass
class FetchedImage:
    """Image bytes plus the content type the origin reported"""
    data: bytes
    content_type: str


Attempt = Tuple[str, Callable[[], Awaitable[Optional[str]]]]


class ImageResolver:
    """Resolves thumbnail URLs into displayable image URLs"""

    def __init__(
        self,
        settings: Settings,
        storage_client=None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            settings: Application settings
            storage_client: Supabase client (or None when storage is not configured)
            transport: Optional httpx transport (used by tests)
        """
        self.supabase = storage_client
        self.bucket = settings.STORAGE_BUCKET
        self.prefix = settings.STORAGE_PREFIX.strip("/")
        self.proxy_url = settings.IMAGE_PROXY_URL
        self.fetch_timeout = settings.IMAGE_FETCH_TIMEOUT_SECONDS
        self.inline_max_bytes = settings.INLINE_IMAGE_MAX_BYTES
        self._transport = transport

    async def resolve(self, url: Optional[str], trace: Optional[List[str]] = None) -> Optional[str]:
        """
        Resolve a thumbnail URL.

        Args:
            url: Candidate thumbnail URL
            trace: Diagnostics trace to append to

        Returns:
            A data URI, a storage URL or a proxy URL for http(s) inputs;
            the input unchanged for anything else (including None)
        """
        trace = trace if trace is not None else []

        if not url or not url.startswith(("http://", "https://")):
            return url

        trace.append(f"Processing thumbnail: {url[:30]}")

        image = await self._fetch(url, trace)

        attempts: List[Attempt] = []
        if image is not None:
            attempts.append(("inline", lambda: self._encode_inline(image, trace)))
            attempts.append(("storage", lambda: self._upload_to_storage(image, trace)))
        attempts.append(("proxy", lambda: self._proxy(url, trace)))

        for name, attempt in attempts:
            try:
                result = await attempt()
            except Exception as e:
                logger.warning(f"Image {name} attempt failed: {e}")
                trace.append(f"{name.capitalize()} attempt error: {e}")
                continue
            if result:
                logger.info(f"Thumbnail resolved via {name}")
                return result

        trace.append("All image strategies failed; returning original URL")
        return url

    async def _fetch(self, url: str, trace: List[str]) -> Optional[FetchedImage]:
        """Download the image; some origins only serve recognized crawlers"""
        try:
            async with httpx.AsyncClient(
                timeout=self.fetch_timeout,
                transport=self._transport,
                follow_redirects=True
            ) as client:
                response = await client.get(url, headers={"User-Agent": CRAWLER_USER_AGENT})
        except Exception as e:
            logger.warning(f"Thumbnail fetch error for {url[:100]}: {e}")
            trace.append(f"Processing Error: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Thumbnail fetch failed: HTTP {response.status_code} from {url[:100]}")
            trace.append(f"Fetch failed: {response.status_code}")
            return None

        content_type = response.headers.get("content-type", "").split(";")[0].strip() or DEFAULT_CONTENT_TYPE
        image = FetchedImage(data=response.content, content_type=content_type)
        trace.append(f"Image fetched. Size: {len(image.data)}")
        return image

    async def _encode_inline(self, image: FetchedImage, trace: List[str]) -> Optional[str]:
        trace.append("Attempting Base64 Encoding...")
        try:
            data_uri = encode_data_uri(image.data, image.content_type, self.inline_max_bytes)
        except ImageEncodingError as e:
            trace.append(f"Base64 Failed: {e}")
            return None

        trace.append(f"Base64 Success. Len: {len(data_uri)}")
        return data_uri

    async def _upload_to_storage(self, image: FetchedImage, trace: List[str]) -> Optional[str]:
        if self.supabase is None:
            trace.append("No Supabase Keys for Storage")
            return None

        trace.append("Attempting Storage Upload...")
        storage_path = build_storage_path(self.prefix, image.content_type)

        def _upload() -> str:
            bucket = self.supabase.storage.from_(self.bucket)
            bucket.upload(
                path=storage_path,
                file=image.data,
                file_options={"content-type": image.content_type, "upsert": "true"}
            )
            return bucket.get_public_url(storage_path)

        try:
            public_url = await asyncio.to_thread(_upload)
        except Exception as e:
            logger.error(f"Storage upload failed for {storage_path}: {e}")
            trace.append(f"Storage Upload Failed: {e}")
            return None

        trace.append(f"Storage Upload Success: {public_url}")
        return public_url

    async def _proxy(self, url: str, trace: List[str]) -> str:
        trace.append("Using Weserv Fallback")
        return build_proxy_url(self.proxy_url, url)


def encode_data_uri(data: bytes, content_type: str, max_bytes: int = 0) -> str:
    """
    Base64-encode image bytes in fixed-size chunks and wrap them as a data URI.

    Args:
        data: Image bytes
        content_type: MIME type for the data URI
        max_bytes: Refuse images larger than this (0 = no limit)

    Raises:
        ImageEncodingError: If the image is empty, too large, or cannot be encoded
    """
    if not data:
        raise ImageEncodingError("empty image")
    if max_bytes and len(data) > max_bytes:
        raise ImageEncodingError(f"image is {len(data)} bytes, inline limit is {max_bytes}")

    try:
        encoded = "".join(
            base64.b64encode(data[i:i + ENCODE_CHUNK_SIZE]).decode("ascii")
            for i in range(0, len(data), ENCODE_CHUNK_SIZE)
        )
    except (TypeError, ValueError) as e:
        raise ImageEncodingError(str(e))

    return f"data:{content_type};base64,{encoded}"


def build_storage_path(prefix: str, content_type: str) -> str:
    """Fresh storage key: {prefix}/import_{uuid4}.{ext}"""
    subtype = content_type.split("/", 1)[1] if "/" in content_type else ""
    extension = subtype.split("+")[0] or "jpg"
    return f"{prefix}/import_{uuid.uuid4()}.{extension}"


def build_proxy_url(proxy_base: str, url: str) -> str:
    """Route an image URL through the resize/caching proxy (800px wide JPEG)"""
    return f"{proxy_base}?url={quote(url, safe='')}&output=jpg&w=800&q=80"
