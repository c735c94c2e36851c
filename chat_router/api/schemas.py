"""
Pydantic schemas for the chat router API.
"""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-01-01T00:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "message": "What's the weather in Paris?",
                "history": [
                    {"role": "user", "content": "Hi"},
                    {"role": "assistant", "content": "Hello! How can I help?"},
                ],
                "enableTools": True,
            }
        },
    )

    message: Optional[str] = Field(default=None, description="The user's message")
    # Entries are filtered leniently by the conversation, not rejected here
    history: Optional[list[Any]] = Field(
        default=None, description="Prior turns as {role, content} objects"
    )
    enable_tools: bool = Field(
        default=True, alias="enableTools", description="Allow the model to call tools"
    )


class ChatResponse(BaseModel):
    """Response body for a successful POST /chat."""

    model_config = ConfigDict(populate_by_name=True)

    reply: str
    tools_used: bool = Field(alias="toolsUsed")
    timestamp: str = Field(default_factory=utc_timestamp)


class ErrorResponse(BaseModel):
    """Error body for /chat failures."""

    error: str
    timestamp: Optional[str] = None


class ToolInfo(BaseModel):
    """A tool as listed by GET /tools."""

    name: str
    description: str
    parameters: dict[str, Any]


class ToolListResponse(BaseModel):
    """Response body for GET /tools."""

    tools: list[ToolInfo]
    total: int


class HealthResponse(BaseModel):
    """Response body for /health endpoint."""

    status: Literal["healthy"]
    version: str
    model: str


class IndexResponse(BaseModel):
    """Response body for the service index at /."""

    message: str
    routes: list[str]
