"""
Main API v1 router
"""
from fastapi import APIRouter

from app.api.v1.endpoints import recipes, pantry

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(recipes.router)
api_router.include_router(pantry.router)
