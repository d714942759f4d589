"""
Per-treatment weather thresholds.

Static table, built once at import and never mutated. Hard limits (temperature
range, wind, precipitation) decide suitability; ideal sky conditions and the
metric ranges only feed scoring and alerts.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class TreatmentType(str, Enum):
    FERTILIZATION = "Fertilization"
    WEED_CONTROL = "Weed Control"
    MOWING = "Mowing"
    SEEDING = "Seeding"


class UnknownTreatmentTypeError(LookupError):
    pass


# Qualitative sky labels ideal_conditions may draw from
SKY_CONDITIONS = ("Clear", "Partly cloudy", "Cloudy")


@dataclass(frozen=True)
class MetricRange:
    min: float
    max: float


@dataclass(frozen=True)
class TreatmentConditions:
    min_temp: float  # °C
    max_temp: float  # °C
    max_wind_speed: float  # km/h
    max_precipitation: float  # mm, 0 = none tolerated
    ideal_conditions: tuple[str, ...]
    priority: int  # 1-5
    uv_index: MetricRange
    soil_moisture: MetricRange  # % saturation
    pressure: MetricRange  # hPa
    dew_point: MetricRange  # °C
    visibility: MetricRange  # km

    def __post_init__(self) -> None:
        if self.max_temp <= self.min_temp:
            raise ValueError("max_temp must be greater than min_temp")
        if self.max_wind_speed < 0 or self.max_precipitation < 0:
            raise ValueError("wind and precipitation limits must be non-negative")
        unknown = set(self.ideal_conditions) - set(SKY_CONDITIONS)
        if unknown:
            raise ValueError(f"Unknown sky conditions: {sorted(unknown)}")


# ── Threshold table ───────────────────────────────────────────────────────────

TREATMENT_CONDITIONS: Mapping[TreatmentType, TreatmentConditions] = MappingProxyType({
    TreatmentType.FERTILIZATION: TreatmentConditions(
        min_temp=10, max_temp=29,
        max_wind_speed=15,
        max_precipitation=5,
        ideal_conditions=("Clear", "Partly cloudy"),
        priority=4,
        uv_index=MetricRange(2, 7),
        soil_moisture=MetricRange(30, 70),
        pressure=MetricRange(1000, 1020),
        dew_point=MetricRange(5, 15),
        visibility=MetricRange(5, 50),
    ),
    TreatmentType.WEED_CONTROL: TreatmentConditions(
        min_temp=12, max_temp=30,
        max_wind_speed=10,
        max_precipitation=0,
        ideal_conditions=("Clear", "Partly cloudy"),
        priority=3,
        uv_index=MetricRange(3, 8),
        soil_moisture=MetricRange(20, 60),
        pressure=MetricRange(1005, 1025),
        dew_point=MetricRange(8, 18),
        visibility=MetricRange(8, 50),
    ),
    TreatmentType.MOWING: TreatmentConditions(
        min_temp=5, max_temp=35,
        max_wind_speed=20,
        max_precipitation=0,
        ideal_conditions=("Clear", "Partly cloudy", "Cloudy"),
        priority=2,
        uv_index=MetricRange(0, 9),
        soil_moisture=MetricRange(10, 80),
        pressure=MetricRange(995, 1030),
        dew_point=MetricRange(2, 20),
        visibility=MetricRange(3, 50),
    ),
    TreatmentType.SEEDING: TreatmentConditions(
        min_temp=8, max_temp=26,
        max_wind_speed=12,
        max_precipitation=2,
        ideal_conditions=("Partly cloudy", "Cloudy"),
        priority=5,
        uv_index=MetricRange(1, 5),
        soil_moisture=MetricRange(40, 80),
        pressure=MetricRange(1008, 1022),
        dew_point=MetricRange(6, 14),
        visibility=MetricRange(5, 50),
    ),
})


def resolve_treatment_type(treatment_type: TreatmentType | str) -> TreatmentType:
    try:
        return TreatmentType(treatment_type)
    except ValueError:
        raise UnknownTreatmentTypeError(f"Unknown treatment type: {treatment_type}") from None


def get_treatment_conditions(treatment_type: TreatmentType | str) -> TreatmentConditions:
    """Look up thresholds; unknown keys raise UnknownTreatmentTypeError, never a default."""
    return TREATMENT_CONDITIONS[resolve_treatment_type(treatment_type)]
