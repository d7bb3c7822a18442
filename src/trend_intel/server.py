"""FastAPI service exposing the trend analysis trigger."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from fastapi import APIRouter, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .logging_setup import configure_logging
from .pipeline import TrendRunResult, run_trend_analysis, to_response

logger = logging.getLogger(__name__)

SERVICE_MESSAGE = "Pune Real Estate Trend Intelligence Agent API"

router = APIRouter()


def _run_trend_pipeline() -> TrendRunResult:
    return run_trend_analysis(get_settings())


@router.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/api/analyze")
def analyze_status() -> Dict[str, str]:
    return {"status": "healthy", "message": SERVICE_MESSAGE}


@router.post("/api/analyze")
def analyze() -> JSONResponse:
    """Fetch all sources, analyze them, log the run, and return the analysis."""
    try:
        result = _run_trend_pipeline()
        body = to_response(result).model_dump()
    except Exception as exc:
        logger.exception("Error in analysis")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Analysis failed", "message": str(exc) or "Unknown error"},
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content=body)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API app; package logging is configured when the server starts."""
    settings = settings or get_settings()
    origins = settings.cors_origins

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        logger.info("Trend API starting; CORS origins: %s", ", ".join(origins))
        yield

    app = FastAPI(title="Trend Intelligence Agent", lifespan=lifespan)
    # Credentialed requests cannot be paired with a wildcard origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "trend_intel.server:app",
        host=os.getenv("TREND_HOST", "0.0.0.0"),
        port=int(os.getenv("TREND_PORT", "8000")),
        reload=os.getenv("TREND_RELOAD", "false").lower() == "true",
    )
