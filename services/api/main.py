"""
FastAPI application exposing the migration engine.
"""
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI

from config import CONFIG
from logger import get_logger
from services.api.routers import schema
from services.api.schemas import HealthResponse

log = get_logger(__name__)


def create_app() -> FastAPI:
    """Build the application with every router mounted."""
    app = FastAPI(
        title=CONFIG.app_name,
        description="Apply multi-statement SQL scripts atomically",
        version=CONFIG.app_version,
    )
    app.include_router(schema.router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    def health_check():
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc),
            service=CONFIG.app_name,
            version=CONFIG.app_version,
        )

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    log.info("Starting %s on %s:%d", CONFIG.app_name, CONFIG.api.host, CONFIG.api.port)
    uvicorn.run(app, host=CONFIG.api.host, port=CONFIG.api.port)


if __name__ == "__main__":
    run()
