from datetime import date

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from lawncadence.main import app
from lawncadence.schemas.weather import ForecastPoint, WeatherData


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def calm_weather() -> WeatherData:
    """Fits every treatment's hard limits."""
    return WeatherData(
        temperature=20, humidity=50, precipitation=0, wind_speed=5, conditions="Partly cloudy"
    )


@pytest.fixture
def make_forecast():
    def _make(*entries: tuple[date, dict]) -> list[ForecastPoint]:
        base = {"temperature": 20, "humidity": 50, "precipitation": 0, "wind_speed": 5, "conditions": "Clear"}
        return [
            ForecastPoint(date=day, weather=WeatherData(**{**base, **overrides}))
            for day, overrides in entries
        ]
    return _make
