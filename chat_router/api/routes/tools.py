"""Tool catalog endpoint."""

from fastapi import APIRouter

from ..schemas import ToolInfo, ToolListResponse
from ...orchestration import describe_tools
from ...tools import get_registry

router = APIRouter()


@router.get(
    "/tools",
    response_model=ToolListResponse,
    summary="List tools",
    description="List the tools the model may call, with their argument schemas.",
)
def list_tools() -> ToolListResponse:
    """Return the tool registry as {name, description, parameters} entries."""
    tools = [ToolInfo(**entry) for entry in describe_tools(get_registry())]
    return ToolListResponse(tools=tools, total=len(tools))
