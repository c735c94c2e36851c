"""Health check and service index endpoints."""

from fastapi import APIRouter

from ..schemas import HealthResponse, IndexResponse
from ... import __version__
from ...config import config

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the API server is running and healthy.",
)
def health_check() -> HealthResponse:
    """Return health status of the API server."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        model=config.model.model,
    )


@router.get(
    "/",
    response_model=IndexResponse,
    summary="Service index",
    description="Describe the service and list its routes.",
)
def index() -> IndexResponse:
    """Return the service name and available routes."""
    return IndexResponse(
        message="Chat Router API",
        routes=["POST /chat", "GET /tools", "GET /health"],
    )
