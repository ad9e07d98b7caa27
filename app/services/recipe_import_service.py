"""
Recipe import service.

Orchestrates a single import of a user-shared link:

    metadata scrape -> media extraction (video URLs only) -> prompt ->
    Gemini -> parse & classify -> image resolution -> result

Content-level failures (scrape, media, unparseable reply, image tiers)
degrade the result and are recorded in the diagnostics trace. Only
configuration errors and model invocation/protocol failures raise.
"""
import json
import logging
from typing import List, Optional

from app.core.config import Settings
from app.domain.enums import ImportStatus
from app.domain.models import ImportMetadata, ImportRequest, ImportResult, PageMetadata
from app.services.gemini_service import GeminiService
from app.services.image_resolver import ImageResolver
from app.services.media_extractor import MediaExtractor
from app.services.metadata_scraper import MetadataScraper
from app.services.prompts import build_import_parts, build_import_prompt
from app.services.recipe_parser import parse_recipe_reply
from app.services.tier_policy import TierPolicy, build_tier_policy

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "Shared Link"


class RecipeImportService:
    """Imports a recipe from an arbitrary shared URL"""

    def __init__(
        self,
        gemini: GeminiService,
        tier_policy: TierPolicy,
        scraper: MetadataScraper,
        media_extractor: MediaExtractor,
        image_resolver: ImageResolver
    ):
        self.gemini = gemini
        self.tier_policy = tier_policy
        self.scraper = scraper
        self.media_extractor = media_extractor
        self.image_resolver = image_resolver

    @classmethod
    def from_settings(cls, settings: Settings, storage_client=None) -> "RecipeImportService":
        """
        Wire the pipeline from settings.

        Raises:
            ConfigurationError: If GEMINI_API_KEY is missing or the tier policy is unknown
        """
        return cls(
            gemini=GeminiService(settings),
            tier_policy=build_tier_policy(settings.IMPORT_TIER_POLICY, settings, settings.MODEL_STANDARD),
            scraper=MetadataScraper(settings),
            media_extractor=MediaExtractor(settings),
            image_resolver=ImageResolver(settings, storage_client=storage_client),
        )

    async def import_recipe(self, request: ImportRequest) -> ImportResult:
        """
        Run the import pipeline for one URL.

        Args:
            request: Source URL and caller tier

        Returns:
            ImportResult with status "found" or "empty" and the diagnostics trace

        Raises:
            ModelInvocationError: If the model stays unreachable after retries
            ModelResponseError: If the model reply has no candidate text
        """
        url = request.source_url
        trace: List[str] = []
        logger.info(f"Processing URL: {url}. Tier: {request.tier.value}")

        metadata = await self.scraper.scrape(url, trace)

        media = None
        if self.media_extractor.supports(url):
            extraction = await self.media_extractor.extract(url, trace)
            metadata.merge_missing(title=extraction.title, thumbnail_url=extraction.thumbnail_url)
            media = extraction.asset

        model_name = await self.tier_policy.select_model(request.tier)
        trace.append(f"Model: {model_name}")

        prompt = build_import_prompt(url, title=metadata.title, caption=metadata.description)
        parts = build_import_parts(prompt, media)
        trace.append("Prompt: text + media" if media is not None else "Prompt: text only")

        raw_text = await self.gemini.generate_text(parts, model_name)

        parsed = parse_recipe_reply(raw_text, metadata)
        status = ImportStatus.FOUND if parsed.is_found else ImportStatus.EMPTY
        trace.append(f"Classification: {status.value}")

        thumbnail = await self.image_resolver.resolve(
            self._thumbnail_candidate(metadata, parsed.draft.thumbnail if parsed.is_found else None),
            trace
        )
        if parsed.is_found and thumbnail:
            parsed.draft.thumbnail = thumbnail

        logger.info(f"Debug Log: {json.dumps(trace)}")

        return ImportResult(
            status=status,
            recipe=parsed.draft if parsed.is_found else None,
            metadata=ImportMetadata(
                title=metadata.title or parsed.draft.title or FALLBACK_TITLE,
                thumbnail=thumbnail,
            ),
            diagnostics=trace,
        )

    @staticmethod
    def _thumbnail_candidate(metadata: PageMetadata, draft_thumbnail: Optional[str]) -> Optional[str]:
        """The page's own preview image, else whatever a found draft carries"""
        return metadata.thumbnail_url or draft_thumbnail
