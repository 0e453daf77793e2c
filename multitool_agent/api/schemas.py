"""
Pydantic schemas for the HTTP API.

Response field names (``toolsUsed``) match what the bundled front end reads.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request body for /api/chat."""

    message: str = Field(..., min_length=1, description="The user's message")

    model_config = {
        "json_schema_extra": {"example": {"message": "Was ist 25 * 4?"}}
    }


class ChatResponse(BaseModel):
    """Response body for /api/chat."""

    model_config = ConfigDict(populate_by_name=True)

    response: str
    tools_used: list[str] = Field(default_factory=list, alias="toolsUsed")
    cost: float = 0.0
    tokens: int = 0


class ChatErrorResponse(BaseModel):
    """Body returned when a chat request fails unexpectedly."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    tools_used: list[str] = Field(default_factory=list, alias="toolsUsed")
    cost: float = 0.0
    tokens: int = 0


class BadRequestResponse(BaseModel):
    """Body returned for malformed chat requests."""

    error: str


class HealthResponse(BaseModel):
    """Response body for /health endpoint."""

    status: str = "ok"
    tools: int
    timestamp: datetime
