# src/pulse/main.py
"""
SoW Pulse application entry point.

    uvicorn src.pulse.main:app --port 3000

create_app() wires configuration, logging, routers, the static dashboard
assets and the background scheduler. Tests build their own app with an
injected Container.
"""

from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from .api.pages import router as pages_router
from .api.responses import APIException, ErrorCode, error_json
from .config import get_config
from .core.container import Container
from .domains.documents.api import router as documents_router
from .domains.notifications.api import router as notifications_router
from .domains.projects.api import router as projects_router
from .domains.tracking.api import router as tracking_router
from .services.scheduler import get_next_job_runs, init_scheduler, shutdown_scheduler

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the FastAPI app around ``container`` (or one built from global config)."""
    container = container or Container(get_config())
    configure_logging(container.config.log_level)

    app = FastAPI(title="SoW Pulse - Project Coordination Dashboard")
    app.state.container = container

    # Serve static files (CSS, JS)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # -------------------------
    # Error handlers
    # -------------------------

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return error_json(ErrorCode.INVALID_INPUT, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_json(ErrorCode.INTERNAL_ERROR, "Internal server error")

    # -------------------------
    # Lifecycle
    # -------------------------

    @app.on_event("startup")
    def startup():
        init_scheduler(app.state.container)

    @app.on_event("shutdown")
    def shutdown():
        shutdown_scheduler()
        app.state.container.close()

    # -------------------------
    # Health
    # -------------------------

    @app.get("/health")
    def health():
        config = app.state.container.config
        return JSONResponse({
            "status": "ok",
            "environment": config.environment,
            "linear_configured": bool(config.linear.api_key),
            "slack_configured": bool(config.slack.bot_token),
            "jobs": get_next_job_runs(),
        })

    app.include_router(projects_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")
    app.include_router(tracking_router, prefix="/api")
    app.include_router(pages_router)

    logger.info(f"SoW Pulse app created (environment: {container.config.environment})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(app, host=config.api_host, port=config.api_port)
