"""Tests for the health server."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from calendar_weather.api.app import create_app
from calendar_weather.calendar.sync import SyncEngine
from calendar_weather.scheduler import SyncScheduler
from calendar_weather.service import CalendarWeatherService

from .conftest import FakeCalendar, fixed_clock


@pytest.fixture
def engine(fake_lookup):
    return SyncEngine(FakeCalendar(), fake_lookup, clock=fixed_clock)


@pytest.fixture
def service(engine):
    apscheduler = MagicMock()
    apscheduler.running = False
    scheduler = SyncScheduler(
        engine,
        watch_interval=timedelta(minutes=30),
        full_sync_interval=timedelta(minutes=60),
        scheduler=apscheduler,
    )
    provider = MagicMock()
    provider.aclose = AsyncMock()
    return CalendarWeatherService(engine=engine, scheduler=scheduler, provider=provider)


class TestHealthEndpoints:
    """Tests for GET /health and GET /."""

    def test_health_pending(self, service):
        """Test health before any sync token is held."""
        client = TestClient(create_app(service))

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["last_sync"] == "pending"
        assert body["token_present"] is False
        assert "timestamp" in body

    def test_health_active(self, service, engine):
        """Test health once a sync token is held."""
        engine.sync_token = "tok-1"
        client = TestClient(create_app(service))

        body = client.get("/health").json()

        assert body["last_sync"] == "active"
        assert body["token_present"] is True

    def test_root(self, service):
        """Test the plain-text liveness message."""
        client = TestClient(create_app(service))

        response = client.get("/")

        assert response.status_code == 200
        assert response.text == "Calendar Weather Bot Running"

    def test_lifespan_starts_and_stops_service(self, service):
        """Test the service lifecycle follows the application's."""
        with TestClient(create_app(service)) as client:
            assert client.get("/health").status_code == 200
            service.scheduler._scheduler.start.assert_called_once()

        service.provider.aclose.assert_awaited_once()
