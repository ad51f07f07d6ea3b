"""
API response models for the Lowkey steganography service
"""

from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class StegoAPIResult(BaseModel):
    """
    Standard API response model for all steganography endpoints
    """
    success: bool
    message: str
    paths: Optional[List[str]] = None
    details: Optional[Dict[str, Any]] = None
