"""
Video URL Parser
Recognizes short-form and watch-page video URLs (Instagram Reels, TikTok,
YouTube Shorts / watch pages) so the import pipeline knows when to ask the
media extraction service for an audio track.
"""

import re
from typing import Optional
from enum import Enum


class VideoPlatform(str, Enum):
    """Supported video platforms"""
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"


class VideoURLParser:
    """
    Detect video-hosting URLs.

    Supports:
    - TikTok: any tiktok.com URL, including vm./vt. short links
    - YouTube: youtube.com/shorts/ID, youtube.com/watch?v=ID, youtu.be/ID
    - Instagram Reels: instagram.com/reel/CODE
    """

    PATTERNS = {
        VideoPlatform.TIKTOK: [
            r'(?:^|[/.])tiktok\.com/',
        ],
        VideoPlatform.YOUTUBE: [
            r'youtube\.com/shorts/',
            r'youtube\.com/watch',
            r'youtu\.be/[A-Za-z0-9_-]+',
        ],
        VideoPlatform.INSTAGRAM: [
            r'instagram\.com/reels?/',
        ],
    }

    @classmethod
    def get_platform(cls, url: str) -> Optional[VideoPlatform]:
        """
        Get the video platform for a URL.

        Args:
            url: The URL to check

        Returns:
            VideoPlatform if the URL points at a video, None otherwise
        """
        if not url:
            return None

        candidate = url.strip()
        for platform, patterns in cls.PATTERNS.items():
            for pattern in patterns:
                if re.search(pattern, candidate, re.IGNORECASE):
                    return platform

        return None

    @classmethod
    def is_video_url(cls, url: str) -> bool:
        """Check if a URL is a supported video platform URL"""
        return cls.get_platform(url) is not None
