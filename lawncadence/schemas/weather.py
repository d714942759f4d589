from datetime import date, datetime, timezone
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

Constraint = Literal["temperature_low", "temperature_high", "wind", "precipitation"]
EventSeverity = Literal["info", "warning", "severe"]
AlertType = Literal["temperature", "wind", "precipitation", "uv", "soil", "dewpoint"]
AlertSeverity = Literal["warning", "critical"]
Decision = Literal["proceed", "reschedule", "alert"]


class WeatherData(BaseModel):
    """One observation or forecast period, already fetched and parsed upstream."""

    model_config = {"frozen": True, "from_attributes": True}

    temperature: float  # °C
    humidity: float  # %
    precipitation: float  # mm
    wind_speed: float  # km/h
    conditions: str
    uv_index: Optional[float] = None
    soil_moisture: Optional[float] = None  # % saturation
    pressure: Optional[float] = None  # hPa
    dew_point: Optional[float] = None  # °C
    visibility: Optional[float] = None  # km


class ForecastPoint(BaseModel):
    model_config = {"frozen": True}

    date: date
    weather: WeatherData


class SuitabilityVerdict(BaseModel):
    suitable: bool
    violated_constraints: list[Constraint]
    score: float


class WeatherAlert(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    treatment_id: str
    treatment_type: str
    type: AlertType
    severity: AlertSeverity
    priority: int = Field(ge=1, le=5)
    message: str
    original_date: date
    suggested_date: Optional[date] = None
    metrics: dict[str, float] = {}
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RescheduleOption(BaseModel):
    date: date
    score: float
    weather_score: int
    weather: WeatherData


class OccurrencePlan(BaseModel):
    occurrence_date: date
    decision: Decision
    verdict: Optional[SuitabilityVerdict] = None
    alert: Optional[WeatherAlert] = None
    suggested_date: Optional[date] = None
    alternatives: list[date] = []


class TreatmentEffectiveness(BaseModel):
    score: float
    factors: dict[str, float]
    recommendations: list[str]


class WeatherRecommendation(BaseModel):
    score: int
    recommendations: list[str]
    alternative_dates: list[date] = []


# ── API payloads ──────────────────────────────────────────────────────────────


class MetricRangeRead(BaseModel):
    model_config = {"from_attributes": True}

    min: float
    max: float


class TreatmentConditionsRead(BaseModel):
    model_config = {"from_attributes": True}

    treatment_type: str
    min_temp: float
    max_temp: float
    max_wind_speed: float
    max_precipitation: float
    ideal_conditions: list[str]
    priority: int
    uv_index: MetricRangeRead
    soil_moisture: MetricRangeRead
    pressure: MetricRangeRead
    dew_point: MetricRangeRead
    visibility: MetricRangeRead


class EvaluateRequest(BaseModel):
    treatment_type: str
    weather: WeatherData


class EvaluateRead(SuitabilityVerdict):
    treatment_type: str
    weather_score: int


class SeverityRequest(BaseModel):
    description: str


class SeverityRead(BaseModel):
    severity: EventSeverity


class RecommendationRequest(BaseModel):
    treatment_type: str
    weather: WeatherData
    forecast: list[ForecastPoint] = []


class PlanRequest(BaseModel):
    treatment_id: str
    treatment_type: str
    dates: list[date]
    forecast: list[ForecastPoint] = []


class PlanRead(BaseModel):
    plans: list[OccurrencePlan]
    reschedule_count: int
    alert_count: int


class MonitorConfigIn(BaseModel):
    check_interval: int
    alert_threshold: int
    forecast_hours: int
    min_alert_priority: int = 2


class MonitorConfigRead(BaseModel):
    model_config = {"from_attributes": True}

    check_interval: int
    alert_threshold: int
    forecast_hours: int
    min_alert_priority: int
