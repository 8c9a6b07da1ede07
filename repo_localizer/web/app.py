"""FastAPI application exposing the translation service and analysis jobs."""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ..config import config
from .routes import api, sse
from .services.job_manager import JobManager
from .services.translation_service import TranslationService


def create_app(translation_service: Optional[TranslationService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        translation_service: Service to use; defaults to one built from configuration
    """
    app = FastAPI(
        title="Repo Localizer",
        description="Batch translation service for extracted UI strings",
        version="0.1.0",
    )

    # Store services in app state
    app.state.translation_service = translation_service or TranslationService()
    app.state.job_manager = JobManager()

    # Include routers
    app.include_router(api.router, prefix="/api")
    app.include_router(sse.router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok", "backend": config.translation_backend}

    return app


def main():
    """Entry point for the repo-localizer-web command."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the Repo Localizer translation service")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    errors = config.validate()
    for error in errors:
        logging.getLogger(__name__).warning("Configuration: %s", error)

    print(f"Starting Repo Localizer at http://{args.host}:{args.port}")
    uvicorn.run(
        "repo_localizer.web.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
