"""
FastAPI application for the chat router.

Exposes POST /chat (tool-augmented chat), GET /tools (tool catalog)
and GET /health.

Usage:
    # Development server with auto-reload
    uvicorn chat_router.api.main:app --reload --host 0.0.0.0 --port 8000

    # Debug mode (verbose logging)
    LOG_LEVEL=DEBUG uvicorn chat_router.api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import config
from ..orchestration import MAX_ITERATIONS
from ..tools import get_registry
from ..tracing import init_tracing_client, shutdown_tracing
from .routes import chat, health, tools


def configure_logging():
    """Configure logging based on the configured log level."""
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("chat_router").setLevel(log_level)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting Chat Router API server")

    logger.info("=" * 60)
    logger.info("MODEL CONFIGURATION")
    logger.info(f"  Base URL: {config.model.base_url}")
    logger.info(f"  Model: {config.model.model}")
    logger.info(f"  Temperature: {config.model.temperature}")
    logger.info(f"  Max Tokens: {config.model.max_tokens}")
    logger.info(f"  Timeout: {config.model.timeout}s")
    logger.info(
        f"  Max Iterations: {min(config.model.max_iterations, MAX_ITERATIONS)}"
    )
    if not config.model.api_key:
        logger.warning("  API key not configured (set OPENAI_API_KEY)")

    logger.info("-" * 60)
    logger.info("TOOL ENDPOINTS")
    logger.info(f"  Weather: {config.tools.weather_url}")
    logger.info(f"  Search: {config.tools.search_url}")
    logger.info(f"  Timeout: {config.tools.timeout}s")

    logger.info("-" * 60)
    logger.info("REGISTERED TOOLS")
    for tool in get_registry().list_definitions():
        logger.info(f"  - {tool.name}: {tool.description[:60]}")

    logger.info("-" * 60)
    logger.info("LANGFUSE OBSERVABILITY")
    tracing_client = init_tracing_client(
        public_key=config.langfuse.public_key,
        secret_key=config.langfuse.secret_key,
        host=config.langfuse.host,
        debug=config.langfuse.debug,
    )
    if tracing_client.enabled:
        logger.info("  Status: ENABLED")
    else:
        logger.info("  Status: DISABLED")
        if tracing_client.error:
            logger.info(f"  Reason: {tracing_client.error}")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down Chat Router API server")
    shutdown_tracing()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Chat Router API",
        description=(
            "Chat completions proxied to a language model, augmented with "
            "weather, web search, calculator and clock tools."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Browser frontends call the API cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(tools.router, tags=["Tools"])
    app.include_router(chat.router, tags=["Chat"])

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Log validation errors before returning 400 response."""
        logger.warning(
            f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
        )
        body = await request.body()
        logger.debug(f"Request body: {body.decode('utf-8', errors='replace')[:1000]}")
        return JSONResponse(
            status_code=400,
            content={"detail": jsonable_errors(exc)},
        )

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with non-serializable context values stringified."""
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


# Create the application instance
app = create_app()


def run_server():
    """
    Run the server using uvicorn.

    This is the entry point for running the server programmatically.
    """
    import uvicorn

    uvicorn.run(
        "chat_router.api.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        workers=1 if config.server.reload else config.server.workers,
    )


if __name__ == "__main__":
    run_server()
