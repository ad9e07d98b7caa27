"""
Recipe import and generation endpoints
"""
from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from app.core.config import Settings, get_settings
from app.core.database import get_supabase_admin_client
from app.api.v1.schemas.common import ErrorResponse
from app.api.v1.schemas.recipe import ImportRecipeRequest, GenerateRecipesRequest
from app.domain.enums import CallerTier
from app.domain.exceptions import ChefMindError, InvalidRequestError
from app.domain.models import ImportRequest, ImportResult
from app.services.recipe_import_service import RecipeImportService
from app.services.recipe_generation_service import RecipeGenerationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["Recipes"])


@router.post(
    "/import",
    response_model=ImportResult,
    responses={500: {"model": ErrorResponse}}
)
async def import_recipe(
    import_request: ImportRecipeRequest,
    settings: Settings = Depends(get_settings)
):
    """
    Import a recipe from a shared link.

    Scrapes the page, extracts audio for video links, asks Gemini for the
    recipe and resolves a displayable thumbnail. Returns status "found" or
    "empty" with a diagnostics trace; only configuration, request and model
    failures produce an error response.
    """
    try:
        if not import_request.url or not import_request.url.strip():
            raise InvalidRequestError("URL is required")

        service = RecipeImportService.from_settings(settings, get_supabase_admin_client(settings))

        return await service.import_recipe(ImportRequest(
            source_url=import_request.url,
            tier=CallerTier.from_flag(import_request.is_executive)
        ))

    except ChefMindError as e:
        logger.error(f"Recipe import failed: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "error": e.message}
        )
    except Exception as e:
        logger.error(f"Unexpected error importing recipe: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "error": str(e)}
        )


@router.post("/generate", responses={400: {"model": ErrorResponse}})
async def generate_recipes(
    generate_request: GenerateRecipesRequest,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings)
):
    """
    Generate three recipes (discover / pantry_chef) or answer a cooking
    question about a recipe (consult_chef).

    The caller's Authorization header is forwarded to the pantry query.
    """
    try:
        service = RecipeGenerationService.from_settings(settings)
        result = await service.generate(generate_request, authorization)
        return JSONResponse(content=result.model_dump(mode="json"))

    except ChefMindError as e:
        logger.error(f"Recipe generation failed: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": e.message}
        )
    except Exception as e:
        logger.error(f"Unexpected error generating recipes: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(e)}
        )
