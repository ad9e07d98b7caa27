"""
Pantry endpoints
"""
from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from app.core.config import Settings, get_settings
from app.api.v1.schemas.common import ErrorResponse
from app.api.v1.schemas.pantry import AnalyzeFridgeRequest
from app.domain.exceptions import ChefMindError
from app.domain.models import FridgeScanResult
from app.services.fridge_analysis_service import FridgeAnalysisService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/pantry", tags=["Pantry"])


@router.post(
    "/analyze-fridge",
    response_model=FridgeScanResult,
    responses={500: {"model": ErrorResponse}}
)
async def analyze_fridge(
    fridge_request: AnalyzeFridgeRequest,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings)
):
    """
    List the food items visible in a fridge photo previously uploaded to
    the images bucket.
    """
    try:
        service = FridgeAnalysisService(settings)
        return await service.analyze(fridge_request.image_path, authorization)

    except ChefMindError as e:
        logger.error(f"Fridge analysis failed: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": e.message}
        )
    except Exception as e:
        logger.error(f"Unexpected error analyzing fridge: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e)}
        )
