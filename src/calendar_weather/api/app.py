"""FastAPI application factory.

Serves the health endpoints and runs the sync scheduler for the lifetime of
the application.

## Usage

```python
from calendar_weather.api import create_app

app = create_app()

# Run with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=10000)
```

## Endpoints

- GET /health: JSON sync status (token present, last cycle, timestamp)
- GET /: plain-text liveness message
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from calendar_weather.config import get_settings
from calendar_weather.models.health import HealthStatus
from calendar_weather.service import CalendarWeatherService, build_service

logger = logging.getLogger(__name__)


def create_app(service: CalendarWeatherService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        service: Prebuilt service; built from settings on startup if omitted

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Build the service, start syncing, and stop on shutdown."""
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")

        if getattr(app.state, "service", None) is None:
            app.state.service = await build_service(settings)

        await app.state.service.start()

        yield

        logger.info("Shutting down")
        await app.state.service.stop()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Annotates calendar event titles with weather forecasts",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.service = service

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check(request: Request) -> HealthStatus:
        """Health check endpoint."""
        return request.app.state.service.scheduler.health()

    @app.get("/", response_class=PlainTextResponse, tags=["Health"])
    async def root() -> str:
        return "Calendar Weather Bot Running"

    return app
