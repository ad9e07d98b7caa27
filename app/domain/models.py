"""
Core domain models
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.domain.enums import CallerTier, ImportStatus

# Media larger than this is never sent to the model
MEDIA_SIZE_CEILING = 20 * 1024 * 1024


# ============= Import Pipeline Models =============

class ImportRequest(BaseModel):
    """A single recipe import request"""
    model_config = ConfigDict(frozen=True)

    source_url: str
    tier: CallerTier = CallerTier.STANDARD

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        return v


class PageMetadata(BaseModel):
    """Best-effort metadata scraped from a page or a media extraction service"""
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None

    def merge_missing(
        self,
        title: Optional[str] = None,
        thumbnail_url: Optional[str] = None
    ) -> None:
        """Fill fields that are still empty; existing values are never overwritten"""
        if title and not self.title:
            self.title = title
        if thumbnail_url and not self.thumbnail_url:
            self.thumbnail_url = thumbnail_url


class MediaAsset(BaseModel):
    """Audio/video bytes extracted from a video page"""
    data: bytes = Field(repr=False)
    mime_type: str = "audio/mp3"
    size_bytes: int

    @model_validator(mode="after")
    def validate_size(self):
        if self.size_bytes != len(self.data):
            raise ValueError("size_bytes does not match data length")
        if self.size_bytes > MEDIA_SIZE_CEILING:
            raise ValueError(f"Media exceeds {MEDIA_SIZE_CEILING} bytes")
        return self


# ============= Recipe Models =============

class Macros(BaseModel):
    """Macro breakdown, as free text (e.g. "25g")"""
    protein: Optional[str] = None
    carbs: Optional[str] = None
    fat: Optional[str] = None


class RecipeIngredient(BaseModel):
    """Ingredient name with a free-text amount"""
    name: str
    amount: str = ""


class RecipeDraft(BaseModel):
    """
    Best-effort recipe parsed from a model reply.

    Every field may be missing; absence downgrades classification
    instead of raising.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    time: Optional[str] = None
    calories: Optional[str] = None
    macros: Optional[Macros] = None
    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    thumbnail: Optional[str] = None


class ParsedRecipe(BaseModel):
    """Parser output: the draft plus whether it is complete enough to count as found"""
    draft: RecipeDraft = Field(default_factory=RecipeDraft)
    is_found: bool = False


class ImportMetadata(BaseModel):
    """Display metadata the caller can always render"""
    title: str
    thumbnail: Optional[str] = None


class ImportResult(BaseModel):
    """Final result of a recipe import"""
    status: ImportStatus
    recipe: Optional[RecipeDraft] = None
    metadata: ImportMetadata
    diagnostics: List[str] = Field(default_factory=list)


# ============= Generation Models =============

class GeneratedIngredient(RecipeIngredient):
    """Ingredient of a generated recipe, cross-referenced with the pantry"""
    is_missing: Optional[bool] = None


class GeneratedRecipe(RecipeDraft):
    """Recipe produced by the generation handler"""
    ingredients: List[GeneratedIngredient] = Field(default_factory=list)
    image_prompt: Optional[str] = Field(default=None, exclude=True)
    image: Optional[str] = None


class GeneratedRecipes(BaseModel):
    """Generation handler result"""
    recipes: List[GeneratedRecipe] = Field(default_factory=list)


class ReplacementIngredient(BaseModel):
    name: str
    amount: Optional[str] = None


class RecipeModification(BaseModel):
    """Ingredient change suggested by the chef assistant"""
    type: str = "replace"
    target_ingredient: Optional[str] = None
    replacement_ingredient: Optional[ReplacementIngredient] = None


class ChefAnswer(BaseModel):
    """Answer from the consult-chef mode"""
    answer: str
    modification: Optional[RecipeModification] = None


class FridgeScanResult(BaseModel):
    """Ingredients identified in a fridge photo"""
    ingredients: List[str] = Field(default_factory=list)
