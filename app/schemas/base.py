"""
Base Schemas

Core Pydantic models shared by all endpoint responses.
Every endpoint answers {message, data, proofs}; errors answer {detail}.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict


class Proofs(BaseModel):
    """
    Tracing information included in responses.

    - trace_id: Request trace ID
    - user_id: Session user, when authenticated
    - algorithm: Algorithm identifier (e.g., "weighted_off_peak_scoring")
    - source: Where the data came from (e.g., "backend")
    """
    trace_id: Optional[str] = Field(None, description="Request trace ID")
    user_id: Optional[str] = Field(None, description="Authenticated user ID")
    algorithm: Optional[str] = Field(None, description="Algorithm identifier")
    source: Optional[str] = Field(None, description="Data source")

    model_config = ConfigDict(extra="allow")


class ApiResponse(BaseModel):
    """Standard response envelope."""
    message: str = Field(..., description="User-facing response message")
    data: Optional[Dict[str, Any]] = Field(None, description="Response payload")
    proofs: Optional[Proofs] = Field(None, description="Tracing information")

    model_config = ConfigDict(extra="allow")


class ErrorDetail(BaseModel):
    """Body of the detail field rendered for any AppError."""
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="User-facing error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Extra error context")
    trace_id: Optional[str] = Field(None, description="Request trace ID")


class ErrorResponse(BaseModel):
    detail: ErrorDetail
