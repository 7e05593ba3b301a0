"""
FastAPI application for the valuation engine.

Exposes collection valuation over HTTP. The request carries the
exchange rates, so the service itself performs no IO.

Production deployment configuration via environment variables.
"""

import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from core.valuation_engine import ValuationError, __version__
from utils.config import Config
from web.schemas import ValuationRequest, build_items, build_valuer

logger = logging.getLogger(__name__)

# =============================================================================
# Environment Configuration
# =============================================================================

IS_PRODUCTION = os.getenv("PRODUCTION", "").lower() == "true"

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else []
if not ALLOWED_ORIGINS and not IS_PRODUCTION:
    # Development fallback only
    ALLOWED_ORIGINS = ["http://localhost:8000", "http://127.0.0.1:8000"]


def create_app(config: Config = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()

    app = FastAPI(
        title="Collection Valuation Engine",
        description="Market-based valuation of collectible items",
        version=__version__,
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=config.debug and not IS_PRODUCTION,
    )

    @app.get("/health", include_in_schema=False)
    def health():
        """Healthcheck. No dependencies, no IO."""
        return {"status": "healthy"}

    if ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.post("/api/valuation")
    def valuate(request_data: ValuationRequest):
        """
        Value a collection.

        Returns per-item valuations, collection totals in the display
        currency, and diagnostics (unparseable text, missing rates).
        """
        try:
            valuer = build_valuer(request_data, config)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

        items, diagnostics = build_items(request_data)

        try:
            summary = valuer.value_collection(items, diagnostics)
        except ValuationError as exc:
            logger.error("Valuation failed: %s", exc)
            raise HTTPException(status_code=422, detail=str(exc))

        return summary.to_dict()

    @app.get("/api/health")
    def api_health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "environment": "production" if IS_PRODUCTION else "development",
        }

    return app


# Create app instance for uvicorn
app = create_app()
