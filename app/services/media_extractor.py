"""
Media extractor for video URLs.

Asks a Cobalt-compatible extraction service for an audio-only rendition of a
video post, then downloads it when it fits under the media ceiling. Audio is
small enough to send inline to the model; anything larger is dropped to keep
request payloads and cost bounded.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import Settings
from app.domain.models import MediaAsset, MEDIA_SIZE_CEILING
from app.services.video_url_parser import VideoURLParser

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_MIME_TYPE = "audio/mp3"


class MediaTooLargeError(Exception):
    """Raised while streaming when media passes the size ceiling"""


@dataclass
class MediaExtraction:
    """What the extraction service returned"""
    asset: Optional[MediaAsset] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None


class MediaExtractor:
    """Extracts audio tracks from video posts via a third-party service"""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_url = settings.COBALT_API_URL
        self.timeout = settings.MEDIA_EXTRACTION_TIMEOUT_SECONDS
        self.download_timeout = settings.MEDIA_DOWNLOAD_TIMEOUT_SECONDS
        self.max_bytes = min(settings.MAX_MEDIA_BYTES, MEDIA_SIZE_CEILING)
        self._transport = transport

    def supports(self, url: str) -> bool:
        """Check whether a URL is a video page worth extracting"""
        return VideoURLParser.is_video_url(url)

    async def extract(self, url: str, trace: Optional[List[str]] = None) -> MediaExtraction:
        """
        Request audio-only extraction for a video URL. Never raises.

        Args:
            url: Video page URL
            trace: Optional diagnostics trace

        Returns:
            MediaExtraction; every field is None when extraction failed
        """
        trace = trace if trace is not None else []
        trace.append("Video site detected. Attempting media extraction...")

        try:
            data = await asyncio.wait_for(self._request_extraction(url), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning(f"Media extraction timed out after {self.timeout}s for {url[:100]}")
            trace.append(f"Media extraction timed out after {self.timeout:g}s")
            return MediaExtraction()
        except Exception as e:
            logger.error(f"Media extraction failed for {url[:100]}: {e}")
            trace.append(f"Media extraction failed: {e}")
            return MediaExtraction()

        result = MediaExtraction(
            title=_text(data.get("title")),
            thumbnail_url=self._picker_thumbnail(data.get("picker")),
        )

        media_url = _text(data.get("url"))
        if not media_url:
            trace.append("Media extraction returned no media URL")
            return result

        try:
            result.asset = await asyncio.wait_for(self._download(media_url), timeout=self.download_timeout)
            trace.append(f"Media downloaded. Size: {result.asset.size_bytes}")
        except MediaTooLargeError as e:
            logger.info(f"Discarding media: {e}")
            trace.append(f"Media discarded: {e}")
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning(f"Media download timed out after {self.download_timeout}s")
            trace.append(f"Media download timed out after {self.download_timeout:g}s")
        except Exception as e:
            logger.warning(f"Media download failed: {e}")
            trace.append(f"Media download failed: {e}")

        return result

    async def _request_extraction(self, url: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.api_url,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                json={
                    "url": url,
                    "isAudioOnly": True,
                    "aFormat": "mp3",
                    "filenamePattern": "nerdy",
                },
            )

        if response.status_code != 200:
            raise RuntimeError(f"extraction service returned HTTP {response.status_code}")

        data = response.json()
        if not isinstance(data, dict):
            raise RuntimeError("extraction service returned a non-object body")
        return data

    async def _download(self, media_url: str) -> MediaAsset:
        """Stream media, stopping as soon as it passes the ceiling"""
        async with httpx.AsyncClient(
            timeout=self.download_timeout,
            transport=self._transport,
            follow_redirects=True
        ) as client:
            async with client.stream("GET", media_url) as response:
                if response.status_code != 200:
                    raise RuntimeError(f"HTTP {response.status_code}")

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) >= self.max_bytes:
                    raise MediaTooLargeError(f"{declared} bytes exceeds {self.max_bytes} byte limit")

                chunks = bytearray()
                async for chunk in response.aiter_bytes():
                    chunks.extend(chunk)
                    if len(chunks) >= self.max_bytes:
                        raise MediaTooLargeError(f"stream exceeds {self.max_bytes} byte limit")

                mime_type = response.headers.get("content-type", "").split(";")[0].strip()

        if not mime_type.startswith(("audio/", "video/")):
            mime_type = DEFAULT_AUDIO_MIME_TYPE

        data = bytes(chunks)
        return MediaAsset(data=data, mime_type=mime_type, size_bytes=len(data))

    def _picker_thumbnail(self, picker: Any) -> Optional[str]:
        """Read a thumbnail from the service's picker field (string or list of items)"""
        if isinstance(picker, list) and picker:
            picker = picker[0]
        if isinstance(picker, dict):
            return _text(picker.get("thumb")) or _text(picker.get("url"))
        return _text(picker)


def _text(value: Any) -> Optional[str]:
    """Non-blank string from the service's JSON, else None"""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
