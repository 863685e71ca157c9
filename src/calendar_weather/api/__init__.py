"""FastAPI application serving the bot's health endpoints.

## Endpoints

- /health - Sync status snapshot for uptime checks
- / - Liveness message

The application lifespan owns the sync scheduler: it starts on startup and
stops on shutdown.
"""

from calendar_weather.api.app import create_app

__all__ = ["create_app"]
