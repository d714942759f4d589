"""
Weather monitor tuning.

Bounds are contractual: the messages below are shown to users verbatim, and the
checks run in a fixed order so the first violated bound is the one reported.
"""
import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from lawncadence.core.config import Settings, settings

MIN_CHECK_INTERVAL = 15  # minutes
MAX_CHECK_INTERVAL = 360  # 6 hours
MIN_ALERT_THRESHOLD = 1
MAX_ALERT_THRESHOLD = 5
MIN_FORECAST_HOURS = 24  # 1 day
MAX_FORECAST_HOURS = 168  # 7 days
MIN_ALERT_PRIORITY = 1
MAX_ALERT_PRIORITY = 5

DEFAULT_CHECK_INTERVAL = 30
DEFAULT_ALERT_THRESHOLD = 3  # alert when weather score drops below this
DEFAULT_FORECAST_HOURS = 48
DEFAULT_MIN_ALERT_PRIORITY = 2  # alerts below this priority are not raised


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class WeatherMonitorConfig:
    check_interval: int = DEFAULT_CHECK_INTERVAL  # minutes between checks
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD
    forecast_hours: int = DEFAULT_FORECAST_HOURS  # hours ahead to check
    min_alert_priority: int = DEFAULT_MIN_ALERT_PRIORITY

    def __post_init__(self) -> None:
        validate_config(self)


def validate_config(config: WeatherMonitorConfig | Mapping[str, Any]) -> None:
    """Raise ConfigError on the first bound violated; return None otherwise."""
    if isinstance(config, Mapping):
        values = config
    else:
        values = dataclasses.asdict(config)

    check_interval = values["check_interval"]
    if check_interval <= 0:
        raise ConfigError("Check interval must be positive")
    if check_interval < MIN_CHECK_INTERVAL:
        raise ConfigError("Check interval must be at least 15 minutes")
    if check_interval > MAX_CHECK_INTERVAL:
        raise ConfigError("Check interval must not exceed 6 hours")

    alert_threshold = values["alert_threshold"]
    if alert_threshold < MIN_ALERT_THRESHOLD or alert_threshold > MAX_ALERT_THRESHOLD:
        raise ConfigError("Alert threshold must be between 1 and 5")

    forecast_hours = values["forecast_hours"]
    if forecast_hours < MIN_FORECAST_HOURS:
        raise ConfigError("Forecast hours must be at least 24")
    if forecast_hours > MAX_FORECAST_HOURS:
        raise ConfigError("Forecast hours must not exceed 168")

    min_alert_priority = values.get("min_alert_priority", DEFAULT_MIN_ALERT_PRIORITY)
    if min_alert_priority < MIN_ALERT_PRIORITY or min_alert_priority > MAX_ALERT_PRIORITY:
        raise ConfigError("Min alert priority must be between 1 and 5")


def create_default_config(**overrides: Any) -> WeatherMonitorConfig:
    """Defaults shallow-merged with overrides, then validated."""
    unknown = sorted(set(overrides) - {f.name for f in dataclasses.fields(WeatherMonitorConfig)})
    if unknown:
        raise ConfigError(f"Unknown config option: {', '.join(unknown)}")
    return dataclasses.replace(DEFAULT_CONFIG, **overrides)


def monitor_config_from_settings(s: Settings = settings) -> WeatherMonitorConfig:
    return WeatherMonitorConfig(
        check_interval=s.WEATHER_CHECK_INTERVAL,
        alert_threshold=s.WEATHER_ALERT_THRESHOLD,
        forecast_hours=s.WEATHER_FORECAST_HOURS,
        min_alert_priority=s.WEATHER_MIN_ALERT_PRIORITY,
    )


def is_valid_check_interval(minutes: int) -> bool:
    return MIN_CHECK_INTERVAL <= minutes <= MAX_CHECK_INTERVAL


def is_valid_alert_threshold(threshold: int) -> bool:
    return MIN_ALERT_THRESHOLD <= threshold <= MAX_ALERT_THRESHOLD


def is_valid_forecast_hours(hours: int) -> bool:
    return MIN_FORECAST_HOURS <= hours <= MAX_FORECAST_HOURS


def is_valid_alert_priority(priority: int) -> bool:
    return MIN_ALERT_PRIORITY <= priority <= MAX_ALERT_PRIORITY


DEFAULT_CONFIG = WeatherMonitorConfig()
