"""
Recipe generation service.

Backs the "generate recipes" screen:
- discover: three recipes for a free-text request, cross-checked against the pantry
- pantry_chef: three recipes built from what is in the pantry
- consult_chef: a short answer about a recipe, optionally with an ingredient swap

Generated recipes are illustrated with one stock photo each, searched
concurrently.
"""
import logging
from typing import Callable, Optional, Union

from pydantic import ValidationError

from app.api.v1.schemas.recipe import GenerateRecipesRequest
from app.core.config import Settings
from app.core.database import get_supabase_user_client
from app.domain.enums import CallerTier, GenerationMode
from app.domain.exceptions import InvalidRequestError
from app.domain.models import ChefAnswer, GeneratedRecipes, RecipeModification
from app.repositories.pantry_repository import PantryRepository
from app.services.gemini_service import GeminiService
from app.services.pexels_service import PexelsService
from app.services.prompts import build_consult_prompt, build_generation_prompt
from app.services.recipe_parser import load_json, parse_generated_recipes
from app.services.tier_policy import TierPolicy, build_tier_policy

logger = logging.getLogger(__name__)

DEFAULT_CHEF_ANSWER = "I couldn't understand that."


class RecipeGenerationService:
    """Generates recipes and answers cooking questions"""

    def __init__(
        self,
        gemini: GeminiService,
        tier_policy: TierPolicy,
        pexels: PexelsService,
        pantry_repository_factory: Callable[[str], PantryRepository]
    ):
        """
        Args:
            gemini: Gemini service
            tier_policy: Tier policy (model choice / latency shaping)
            pexels: Stock photo search
            pantry_repository_factory: Builds a pantry repository from the caller's Authorization header
        """
        self.gemini = gemini
        self.tier_policy = tier_policy
        self.pexels = pexels
        self._pantry_repository_factory = pantry_repository_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecipeGenerationService":
        """
        Raises:
            ConfigurationError: If GEMINI_API_KEY is missing or the tier policy is unknown
        """
        return cls(
            gemini=GeminiService(settings),
            tier_policy=build_tier_policy(settings.GENERATION_TIER_POLICY, settings, settings.MODEL_GENERATION),
            pexels=PexelsService(settings),
            pantry_repository_factory=lambda token: PantryRepository(get_supabase_user_client(token, settings)),
        )

    async def generate(
        self,
        request: GenerateRecipesRequest,
        authorization: Optional[str]
    ) -> Union[ChefAnswer, GeneratedRecipes]:
        """
        Handle one generation request.

        Args:
            request: Mode and its parameters
            authorization: Caller's Authorization header, forwarded to the pantry query

        Raises:
            InvalidRequestError: Missing header, unknown mode or missing mode parameter
            ConfigurationError: Supabase settings missing for pantry modes
            ModelInvocationError / ModelResponseError: Model failures
        """
        if not authorization:
            raise InvalidRequestError("Missing Authorization header")

        mode = self._parse_mode(request.mode)
        if mode == GenerationMode.CONSULT_CHEF and not request.user_question:
            raise InvalidRequestError("Question required")
        if mode == GenerationMode.DISCOVER and not request.search_query:
            raise InvalidRequestError("Search query required for discovery mode")

        model_name = await self.tier_policy.select_model(CallerTier.from_flag(request.is_executive))

        if mode == GenerationMode.CONSULT_CHEF:
            return await self._consult_chef(request, model_name)

        pantry_items = await self._load_pantry(authorization)
        prompt = build_generation_prompt(
            mode.value,
            pantry_items,
            search_query=request.search_query,
            meal_type=request.meal_type,
            filters=request.filters,
            allergies=request.allergies,
            mood=request.mood,
        )

        raw_text = await self.gemini.generate_text([prompt], model_name)
        generated = parse_generated_recipes(raw_text)
        if not generated.recipes:
            logger.warning("Generation reply contained no parseable recipes")
            return generated

        await self._attach_images(generated)
        return generated

    def _parse_mode(self, mode: Optional[str]) -> GenerationMode:
        try:
            return GenerationMode(mode)
        except ValueError:
            raise InvalidRequestError(f"Invalid mode: {mode}")

    async def _load_pantry(self, authorization: str):
        repository = self._pantry_repository_factory(authorization)
        try:
            items = await repository.get_item_names()
        except Exception as e:
            raise InvalidRequestError(f"Failed to fetch pantry: {e}")
        logger.info(f"Loaded {len(items)} pantry items")
        return items

    async def _consult_chef(self, request: GenerateRecipesRequest, model_name: str) -> ChefAnswer:
        prompt = build_consult_prompt(request.user_question, request.recipe_context)
        raw_text = await self.gemini.generate_text([prompt], model_name)

        data = load_json(raw_text)
        if not isinstance(data, dict):
            # Model ignored the JSON instruction; its prose is still a usable answer
            return ChefAnswer(answer=raw_text.strip() or DEFAULT_CHEF_ANSWER)

        answer = data.get("answer")
        modification = None
        if isinstance(data.get("modification"), dict):
            try:
                modification = RecipeModification.model_validate(data["modification"])
            except ValidationError as e:
                logger.warning(f"Ignoring malformed modification: {e}")

        return ChefAnswer(
            answer=answer if isinstance(answer, str) and answer.strip() else DEFAULT_CHEF_ANSWER,
            modification=modification,
        )

    async def _attach_images(self, generated: GeneratedRecipes) -> None:
        if not self.pexels.is_enabled():
            logger.info("No Pexels API key found. Skipping image search.")
            return

        logger.info(f"Fetching images for {len(generated.recipes)} recipes from Pexels...")
        queries = [f"{recipe.title or 'recipe'} food" for recipe in generated.recipes]
        images = await self.pexels.search_photos(queries)

        for recipe, image_url in zip(generated.recipes, images):
            recipe.thumbnail = image_url
            recipe.image = image_url
