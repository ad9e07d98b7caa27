"""
Common API schemas
"""
from pydantic import BaseModel
from typing import Optional


class ErrorResponse(BaseModel):
    """Error response body"""
    status: Optional[str] = None
    error: str
