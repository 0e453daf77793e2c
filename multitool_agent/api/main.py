"""
FastAPI application for the multi-tool agent.

Usage:
    # Development server with auto-reload
    uvicorn multitool_agent.api.main:app --reload --port 3000

    # Production server
    python -m multitool_agent

    # Debug mode (verbose logging)
    LOG_LEVEL=DEBUG python -m multitool_agent
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import config
from ..tools import ToolRegistry
from ..tracing import init_tracing_client, shutdown_tracing
from .routes import chat, health, static

INVALID_MESSAGE_ERROR = "Message is required and must be a string"


def configure_logging():
    """Configure logging based on LOG_LEVEL environment variable."""
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("multitool_agent").setLevel(log_level)


configure_logging()
logger = logging.getLogger(__name__)


def _configured(value: str) -> str:
    return "configured" if value else "MISSING"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("=" * 60)
    logger.info("AI MULTI-TOOL AGENT SERVER")
    logger.info("=" * 60)
    logger.info(f"  Listening on: http://{config.server.host}:{config.server.port}")
    logger.info(f"  Model: {config.completion.model}")
    logger.info(f"  Max iterations: {config.orchestration.max_iterations}")
    logger.info(f"  OpenAI API: {_configured(config.completion.api_key)}")
    logger.info(f"  Weather API: {_configured(config.tools.weather_api_key)}")

    logger.info("-" * 60)
    logger.info(f"REGISTERED TOOLS ({ToolRegistry.count()})")
    for name, tool in ToolRegistry.all_tools().items():
        logger.info(f"  - {name.value}: {tool.description}")

    logger.info("-" * 60)
    logger.info("LANGFUSE OBSERVABILITY")
    tracing_client = init_tracing_client(config.langfuse)
    if tracing_client.enabled:
        logger.info("  Status: ENABLED")
    else:
        logger.info("  Status: DISABLED")
        if tracing_client.error:
            logger.info(f"  Reason: {tracing_client.error}")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down multi-tool agent server")
    shutdown_tracing()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Multi-Tool Agent API",
        description="Chat with an LLM assistant that can call eleven utility tools.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # The catch-all front-end route must be registered last
    app.include_router(health.router, tags=["Health"])
    app.include_router(chat.router, tags=["Chat"])
    app.include_router(static.router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Log validation errors before returning a 400 response."""
        logger.warning(
            f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
        )
        return JSONResponse(
            status_code=400,
            content={"error": INVALID_MESSAGE_ERROR},
        )

    return app


# Create the application instance
app = create_app()


def run_server():
    """
    Run the server using uvicorn.

    This is the entry point for ``python -m multitool_agent`` and the
    ``multitool-agent`` console script.
    """
    import uvicorn

    uvicorn.run(
        "multitool_agent.api.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
    )


if __name__ == "__main__":
    run_server()
