"""BOQ API — FastAPI application factory."""


import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from boq_api import __version__
from boq_api.core.config import Settings, settings as default_settings
from boq_api.core.exceptions import register_exception_handlers
from boq_api.middleware.audit import AuditMiddleware
from boq_api.routers.boq import router as boq_router
from boq_api.schemas.common import HealthResponse
from boq_api.services.ai_service import AICollaborator, ProcurementAIService
from boq_api.services.relay import build_relays


def _configure_logging(settings: Settings) -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def create_app(
    settings: Settings | None = None,
    ai_service: AICollaborator | None = None,
) -> FastAPI:
    settings = settings or default_settings
    _configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )
    app.state.settings = settings
    app.state.ai_service = ai_service or ProcurementAIService.from_settings(settings)
    app.state.relays = build_relays(app.state.ai_service, settings.max_body_size_bytes)

    if not settings.ai_enabled and ai_service is None:
        logging.getLogger(__name__).warning(
            "OPENAI_API_KEY is not set; relay endpoints will respond with 500."
        )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Audit middleware ---
    app.add_middleware(AuditMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- Relay routes (/api/*) ---
    app.include_router(boq_router)

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on ``APP_PORT``."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=default_settings.app_port)
