from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Weather monitor
    WEATHER_CHECK_INTERVAL: int = 30  # minutes
    WEATHER_ALERT_THRESHOLD: int = 3
    WEATHER_FORECAST_HOURS: int = 48
    WEATHER_MIN_ALERT_PRIORITY: int = 2
    RESCHEDULE_MAX_SUGGESTIONS: int = 3

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:5174"

    @property
    def origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]


settings = Settings()
