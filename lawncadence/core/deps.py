from typing import Annotated

from fastapi import Depends, HTTPException, status

from lawncadence.core.config import settings
from lawncadence.services.monitor_config import (
    ConfigError,
    WeatherMonitorConfig,
    monitor_config_from_settings,
)


def get_monitor_config() -> WeatherMonitorConfig:
    try:
        return monitor_config_from_settings(settings)
    except ConfigError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Weather monitor misconfigured: {exc}",
        )


MonitorConfig = Annotated[WeatherMonitorConfig, Depends(get_monitor_config)]
