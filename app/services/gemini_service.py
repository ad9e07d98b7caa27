"""
Gemini service for recipe import, generation and fridge scans.

Wraps the google-generativeai SDK with a bounded retry loop: overload (503)
responses and transport failures are retried with a fixed delay, other API
errors fail immediately. The SDK is synchronous, so calls run in a thread.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from app.core.config import Settings
from app.domain.exceptions import ConfigurationError, ModelInvocationError, ModelResponseError

logger = logging.getLogger(__name__)

ContentParts = List[Union[str, Dict[str, Any]]]


class GeminiService:
    """Service for Google Gemini API interactions"""

    def __init__(self, settings: Settings):
        """
        Initialize Gemini service with the API key from settings.

        Raises:
            ConfigurationError: If GEMINI_API_KEY is not set
        """
        if not settings.GEMINI_API_KEY:
            raise ConfigurationError("GEMINI_API_KEY not found")

        genai.configure(api_key=settings.GEMINI_API_KEY)
        self._genai = genai

        self.max_attempts = max(1, settings.MODEL_MAX_ATTEMPTS)
        self.retry_delay = settings.MODEL_RETRY_DELAY_SECONDS

    def _get_generation_config(self, temperature: float = 0.3, max_tokens: int = 8192):
        """Get generation config for Gemini API calls."""
        return self._genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json"
        )

    async def generate_text(self, parts: ContentParts, model_name: str) -> str:
        """
        Send content parts to a model and return the first candidate's text.

        Args:
            parts: Prompt text followed by optional inline blobs ({"mime_type", "data"})
            model_name: Gemini model identifier

        Returns:
            Raw text of the first candidate

        Raises:
            ModelInvocationError: If retries are exhausted or the API rejects the request
            ModelResponseError: If the reply has no candidate or no text
        """
        model = self._genai.GenerativeModel(
            model_name=model_name,
            generation_config=self._get_generation_config()
        )

        def _generate():
            return model.generate_content(parts)

        logger.info(f"Sending request to Gemini ({model_name})")
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await asyncio.to_thread(_generate)
                break
            except google_exceptions.ServiceUnavailable as e:
                last_error = e
                logger.warning(
                    f"Model overloaded, retrying... ({self.max_attempts - attempt} left)"
                )
            except google_exceptions.GoogleAPICallError as e:
                logger.error(f"Gemini API Failed ({model_name}): {e}")
                raise ModelInvocationError(f"Gemini API Failed: {e}", attempts=attempt)
            except Exception as e:
                last_error = e
                logger.error(f"Gemini request error (attempt {attempt}/{self.max_attempts}): {e}")

            if attempt < self.max_attempts:
                await asyncio.sleep(self.retry_delay)
        else:
            raise ModelInvocationError(
                f"Gemini API Error after {self.max_attempts} attempts: {last_error}",
                attempts=self.max_attempts
            )

        return self.extract_text(response)

    @staticmethod
    def extract_text(response: Any) -> str:
        """
        Pull the text of the first candidate out of a response envelope.

        Raises:
            ModelResponseError: If there is no candidate or it has no text part
        """
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            raise ModelResponseError("No candidates returned from Gemini")

        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        text = getattr(parts[0], "text", None) if parts else None
        if not text:
            raise ModelResponseError("No text returned from Gemini")

        return text

    @staticmethod
    def detect_image_mime_type(image_bytes: bytes) -> str:
        """
        Detect MIME type from image magic bytes.

        Args:
            image_bytes: Raw image bytes

        Returns:
            MIME type string
        """
        if image_bytes[:3] == b"\xff\xd8\xff":
            return "image/jpeg"
        elif image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
            return "image/png"
        elif image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
            return "image/webp"
        elif image_bytes[:4] == b"GIF8":
            return "image/gif"
        else:
            # Default to JPEG
            return "image/jpeg"
