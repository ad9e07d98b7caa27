"""
Recipe import and generation API schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Union


class ImportRecipeRequest(BaseModel):
    """Import a recipe from a shared link"""
    url: Optional[str] = Field(None, description="Any shared URL: recipe blog, TikTok, Reel, YouTube")
    is_executive: bool = Field(False, description="Caller has the Executive Chef entitlement")


class GenerateRecipesRequest(BaseModel):
    """Generate recipes or ask the chef assistant"""
    mode: Optional[str] = Field(None, description="discover | pantry_chef | consult_chef")
    search_query: Optional[str] = None
    filters: Optional[List[str]] = None
    meal_type: Optional[str] = None
    allergies: Optional[str] = None
    mood: Optional[str] = None
    recipe_context: Optional[Union[str, Dict[str, Any]]] = None
    user_question: Optional[str] = None
    is_executive: bool = False
