"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error handling and router registration.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from analysis_hub import __version__
from analysis_hub.api.chat import router as chat_router
from analysis_hub.api.routes import router as sessions_router
from analysis_hub.errors import DocumentAnalysisError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info("Starting Document Analysis API...")
    yield
    logger.info("Shutting down Document Analysis API...")


async def handle_analysis_error(request: Request, exc: DocumentAnalysisError) -> JSONResponse:
    """Turn a DocumentAnalysisError into a JSON error response."""
    logger.warning(
        f"{request.method} {request.url.path} -> {exc.status_code}: {exc.user_message}"
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.user_message})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Document Analysis API",
        description=(
            "Upload a plain-text document, generate a structured summary "
            "(synopsis, key points, named entities) and ask follow-up questions "
            "answered strictly from the document. Answers stream as Server-Sent Events."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.add_exception_handler(DocumentAnalysisError, handle_analysis_error)

    application.include_router(sessions_router)
    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "document-analysis-hub"}

    return application


app = create_app()
