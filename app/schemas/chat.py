"""
Chat Schemas

Request/response models for the help assistant.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from app.schemas.base import Proofs


class ChatRequest(BaseModel):
    """Chat request payload."""
    message: str = Field(..., description="User message/query", min_length=1, max_length=1000)
    language: Optional[str] = Field(None, description="UI language of the user")

    model_config = ConfigDict(extra="ignore")


class ChatResponse(BaseModel):
    """
    Chat response payload.

    - message: assistant answer
    - topic: matched help topic
    - confidence: rule confidence
    - reasoning: rules that matched
    """
    message: str = Field(..., description="Assistant answer")
    topic: str = Field(..., description="Matched help topic")
    confidence: float = Field(..., description="Rule confidence")
    reasoning: List[str] = Field(default_factory=list, description="Matched rules")
    proofs: Optional[Proofs] = Field(None, description="Tracing information")
