"""
Fridge analysis service.

Downloads a fridge photo the app uploaded to Supabase Storage and asks the
vision model to list the food items it can see.
"""
import logging
from typing import Optional

import httpx

from app.core.config import Settings
from app.domain.exceptions import ConfigurationError, InvalidRequestError
from app.domain.models import FridgeScanResult
from app.services.gemini_service import GeminiService
from app.services.prompts import FRIDGE_SCAN_PROMPT
from app.services.recipe_parser import load_json

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 30.0  # seconds


class FridgeAnalysisService:
    """Identifies ingredients in fridge photos"""

    def __init__(
        self,
        settings: Settings,
        gemini: Optional[GeminiService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Raises:
            ConfigurationError: If GEMINI_API_KEY or SUPABASE_URL is missing
        """
        if not settings.SUPABASE_URL:
            raise ConfigurationError("Missing configuration or authorization")

        self.gemini = gemini or GeminiService(settings)
        self.model_name = settings.MODEL_VISION
        self.bucket = settings.STORAGE_BUCKET
        self.storage_base = settings.SUPABASE_URL.rstrip("/")
        self._transport = transport

    async def analyze(self, image_path: Optional[str], authorization: Optional[str]) -> FridgeScanResult:
        """
        Identify ingredients in a stored fridge photo.

        Args:
            image_path: Path inside the images bucket, e.g. "scans/1712345678.jpg"
            authorization: Caller's Authorization header

        Raises:
            InvalidRequestError: Missing path/header or image download failure
            ModelInvocationError / ModelResponseError: Model failures
        """
        if not image_path:
            raise InvalidRequestError("Image path is required")
        if not authorization:
            raise InvalidRequestError("Missing configuration or authorization")

        image_bytes = await self._download(image_path.lstrip("/"), authorization)
        mime_type = GeminiService.detect_image_mime_type(image_bytes)

        raw_text = await self.gemini.generate_text(
            [FRIDGE_SCAN_PROMPT, {"mime_type": mime_type, "data": image_bytes}],
            self.model_name
        )

        data = load_json(raw_text)
        ingredients = data.get("ingredients") if isinstance(data, dict) else None
        if not isinstance(ingredients, list):
            logger.warning("Fridge scan reply had no ingredient list")
            return FridgeScanResult()

        names = [item.strip() for item in ingredients if isinstance(item, str) and item.strip()]
        logger.info(f"Fridge scan found {len(names)} ingredients")
        return FridgeScanResult(ingredients=names)

    async def _download(self, image_path: str, authorization: str) -> bytes:
        """Fetch from the public object URL, with the caller's token first and without it second"""
        url = f"{self.storage_base}/storage/v1/object/public/{self.bucket}/{image_path}"

        async with httpx.AsyncClient(timeout=DOWNLOAD_TIMEOUT, transport=self._transport) as client:
            response = await client.get(url, headers={"Authorization": authorization})
            if response.status_code != 200:
                logger.info(f"Authorized image download returned {response.status_code}, retrying without auth")
                retry = await client.get(url)
                if retry.status_code != 200:
                    raise InvalidRequestError(
                        f"Failed to download image from Supabase: {response.reason_phrase}"
                    )
                response = retry

        return response.content
