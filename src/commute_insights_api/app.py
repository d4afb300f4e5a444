"""Application factory for the FastAPI service."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import router
from .core.config import settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Commute Insights API", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    try:
        settings.ensure_files()
    except FileNotFoundError as exc:
        logger.warning("Incomplete configuration: %s", exc)
    if not settings.geoapify_api_key:
        logger.warning("GEOAPIFY_API_KEY is not set; routing and geocoding endpoints will fail")

    app.include_router(router, prefix="/api")
    return app


app = create_app()
