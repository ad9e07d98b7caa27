"""
Pantry API schemas
"""
from pydantic import BaseModel, Field
from typing import Optional


class AnalyzeFridgeRequest(BaseModel):
    """Identify ingredients in an uploaded fridge photo"""
    image_path: Optional[str] = Field(None, description="Path in the images bucket, e.g. scans/1712345678.jpg")
