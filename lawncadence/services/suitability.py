"""
Weather suitability evaluation.

Scores a weather snapshot against a treatment's thresholds and turns unsuitable
occurrences into alerts and reschedule suggestions. Pure functions over
immutable inputs; the only shared state is the read-only threshold table.
"""
import logging
import math
from datetime import date
from typing import Iterable, Optional

from lawncadence.schemas.recurrence import RecurrenceException
from lawncadence.schemas.weather import (
    AlertSeverity,
    AlertType,
    Constraint,
    EventSeverity,
    ForecastPoint,
    OccurrencePlan,
    RescheduleOption,
    SuitabilityVerdict,
    TreatmentEffectiveness,
    WeatherAlert,
    WeatherData,
    WeatherRecommendation,
)
from lawncadence.services.monitor_config import DEFAULT_CONFIG, WeatherMonitorConfig
from lawncadence.services.treatment_conditions import (
    MetricRange,
    TreatmentConditions,
    TreatmentType,
    get_treatment_conditions,
    resolve_treatment_type,
)

logger = logging.getLogger(__name__)

IDEAL_CONDITIONS_BONUS = 1.0

# Checked in order; severe tier first
SEVERE_EVENTS = ("tornado", "hurricane", "thunderstorm", "flood")
WARNING_EVENTS = ("rain", "snow", "wind", "extreme")

_SCORE_WEIGHTS: dict[str, float] = {
    "temperature": 0.25,
    "wind": 0.2,
    "precipitation": 0.2,
    "uv_index": 0.1,
    "soil_moisture": 0.15,
    "dew_point": 0.1,
}


# ── Suitability ───────────────────────────────────────────────────────────────


def _matches_ideal(conditions: TreatmentConditions, description: str) -> bool:
    text = description.lower()
    return any(label.lower() in text for label in conditions.ideal_conditions)


def evaluate(treatment_type: TreatmentType | str, weather: WeatherData) -> SuitabilityVerdict:
    """
    Check the hard limits for `treatment_type`.

    Suitable only when temperature is within [min_temp, max_temp] and wind and
    precipitation are at or below their caps. `score` is a ranking hint
    (ideal sky conditions) and never changes the pass/fail outcome.
    """
    conditions = get_treatment_conditions(treatment_type)
    violated: list[Constraint] = []

    if weather.temperature < conditions.min_temp:
        violated.append("temperature_low")
    elif weather.temperature > conditions.max_temp:
        violated.append("temperature_high")
    if weather.wind_speed > conditions.max_wind_speed:
        violated.append("wind")
    if weather.precipitation > conditions.max_precipitation:
        violated.append("precipitation")

    score = IDEAL_CONDITIONS_BONUS if _matches_ideal(conditions, weather.conditions) else 0.0
    return SuitabilityVerdict(suitable=not violated, violated_constraints=violated, score=score)


def determine_severity(description: str) -> EventSeverity:
    """Classify a weather event description: severe keywords win over warning keywords."""
    text = description.lower()
    if any(keyword in text for keyword in SEVERE_EVENTS):
        return "severe"
    if any(keyword in text for keyword in WARNING_EVENTS):
        return "warning"
    return "info"


# ── Weighted score ────────────────────────────────────────────────────────────


def _temperature_score(temp: float, low: float, high: float) -> float:
    if temp < low or temp > high:
        return 0.0
    optimal = (low + high) / 2
    return max(0.0, 1 - abs(temp - optimal) / ((high - low) / 2))


def _ceiling_score(value: float, ceiling: float) -> float:
    if ceiling <= 0:
        return 1.0 if value <= 0 else 0.0
    return max(0.0, 1 - value / ceiling)


def _range_score(value: Optional[float], bounds: MetricRange) -> float:
    # Missing metrics are neutral
    if value is None:
        return 1.0
    if value < bounds.min:
        return max(0.0, value / bounds.min) if bounds.min > 0 else 0.0
    if value > bounds.max:
        return max(0.0, 1 - (value - bounds.max) / bounds.max) if bounds.max else 0.0
    return 1.0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _metric_scores(conditions: TreatmentConditions, weather: WeatherData) -> dict[str, float]:
    return {
        "temperature": _temperature_score(weather.temperature, conditions.min_temp, conditions.max_temp),
        "wind": _ceiling_score(weather.wind_speed, conditions.max_wind_speed),
        "precipitation": _ceiling_score(weather.precipitation, conditions.max_precipitation),
        "uv_index": _range_score(weather.uv_index, conditions.uv_index),
        "soil_moisture": _range_score(weather.soil_moisture, conditions.soil_moisture),
        "dew_point": _range_score(weather.dew_point, conditions.dew_point),
    }


def weather_score(treatment_type: TreatmentType | str, weather: WeatherData) -> int:
    """Weighted 1-5 rating of how favourable `weather` is for the treatment."""
    scores = _metric_scores(get_treatment_conditions(treatment_type), weather)
    weighted = sum(score * _SCORE_WEIGHTS[metric] for metric, score in scores.items())
    return max(1, min(5, _round_half_up(weighted * 4 + 1)))


# ── Recommendations ───────────────────────────────────────────────────────────

# Factors below these impacts produce advice; unlisted factors use the default
_ADVICE_CUTOFFS = {"wind": 0.5, "precipitation": 0.6, "dew_point": 0.6}
_DEFAULT_ADVICE_CUTOFF = 0.7

_OPTIONAL_METRICS = {"uv_index", "soil_moisture", "dew_point"}


def _advice(factor: str, conditions: TreatmentConditions) -> str:
    if factor == "temperature":
        target = _round_half_up((conditions.min_temp + conditions.max_temp) / 2)
        return f"Consider adjusting treatment time to when temperature is closer to {target}°C"
    if factor == "wind":
        return f"Avoid treatment during high winds (above {_fmt(conditions.max_wind_speed)}km/h)"
    if factor == "precipitation":
        return f"Check forecast to avoid precipitation within {_fmt(conditions.max_precipitation)}mm"
    if factor == "uv_index":
        return "Consider UV exposure levels when scheduling treatments"
    if factor == "soil_moisture":
        return "Monitor soil moisture levels for optimal treatment effectiveness"
    return "Watch for high disease risk conditions with current dew point levels"


def analyze_effectiveness(
    treatment_type: TreatmentType | str, weather: WeatherData, rating: int
) -> TreatmentEffectiveness:
    """
    Per-metric impact factors for applying the treatment in `weather`.

    Each factor averages the metric's own 0-1 score with the overall 1-5
    `rating` scaled to 0-1. Optional metrics that were not observed are left
    out. Advice is produced for the weakest factors first.
    """
    conditions = get_treatment_conditions(treatment_type)
    rating_weight = (max(1, min(5, rating)) - 1) / 4
    factors = {
        metric: (score + rating_weight) / 2
        for metric, score in _metric_scores(conditions, weather).items()
        if metric not in _OPTIONAL_METRICS or getattr(weather, metric) is not None
    }

    recommendations = [
        _advice(factor, conditions)
        for factor, impact in sorted(factors.items(), key=lambda item: item[1])
        if impact < _ADVICE_CUTOFFS.get(factor, _DEFAULT_ADVICE_CUTOFF)
    ]
    return TreatmentEffectiveness(
        score=sum(factors.values()) / len(factors),
        factors=factors,
        recommendations=recommendations,
    )


def treatment_recommendations(
    treatment_type: TreatmentType | str,
    weather: WeatherData,
    forecast: Iterable[ForecastPoint] = (),
    max_alternatives: int = 3,
) -> WeatherRecommendation:
    """
    Advice for treating under `weather`, with better forecast dates when it is poor.

    Below a rating of 3 the best-rated forecast dates that beat the current
    rating are offered (ties keep forecast order), along with timing tips for
    heat, wind and UV. At 4 or above the advice confirms the conditions.
    """
    key = resolve_treatment_type(treatment_type)
    conditions = get_treatment_conditions(key)
    score = weather_score(key, weather)
    recommendations = list(analyze_effectiveness(key, weather, score).recommendations)

    if score < 3:
        rated = [(weather_score(key, point.weather), point.date) for point in forecast]
        better = sorted((r for r in rated if r[0] > score), key=lambda r: -r[0])
        if weather.temperature > conditions.max_temp:
            recommendations.append("Consider early morning or evening application to avoid high temperatures")
        if weather.wind_speed > conditions.max_wind_speed:
            recommendations.append("Early morning typically has lower wind speeds")
        if weather.uv_index is not None and weather.uv_index > conditions.uv_index.max:
            recommendations.append("UV levels are high - consider treatment during lower UV hours")
        logger.debug(
            "treatment_recommendations: %s rated %d, %d better forecast dates",
            key.value, score, len(better),
        )
        return WeatherRecommendation(
            score=score,
            recommendations=recommendations,
            alternative_dates=[day for _, day in better[:max_alternatives]],
        )

    if score >= 4:
        recommendations.append("Current conditions are optimal for treatment")
        moisture = weather.soil_moisture
        if moisture is not None and conditions.soil_moisture.min <= moisture <= conditions.soil_moisture.max:
            recommendations.append("Soil moisture levels are ideal for treatment effectiveness")

    return WeatherRecommendation(score=score, recommendations=recommendations)


# ── Alerts ────────────────────────────────────────────────────────────────────


def _fmt(value: float) -> str:
    return f"{value:g}"


def _findings(
    conditions: TreatmentConditions, weather: WeatherData
) -> list[tuple[AlertType, AlertSeverity, int, str]]:
    found: list[tuple[AlertType, AlertSeverity, int, str]] = []

    if weather.temperature < conditions.min_temp:
        found.append((
            "temperature", "critical", 5,
            f"Temperature too low: {_fmt(weather.temperature)}°C (min: {_fmt(conditions.min_temp)}°C)",
        ))
    elif weather.temperature > conditions.max_temp:
        found.append((
            "temperature", "critical", 5,
            f"Temperature too high: {_fmt(weather.temperature)}°C (max: {_fmt(conditions.max_temp)}°C)",
        ))

    if weather.wind_speed > conditions.max_wind_speed:
        found.append((
            "wind", "warning", 4,
            f"Wind speed too high: {_fmt(weather.wind_speed)}km/h (max: {_fmt(conditions.max_wind_speed)}km/h)",
        ))

    if weather.precipitation > conditions.max_precipitation:
        found.append((
            "precipitation", "warning", 4,
            f"Precipitation too high: {_fmt(weather.precipitation)}mm (max: {_fmt(conditions.max_precipitation)}mm)",
        ))

    if weather.uv_index is not None and weather.uv_index > conditions.uv_index.max:
        found.append((
            "uv", "warning", 3,
            f"UV index too high: {_fmt(weather.uv_index)} (max: {_fmt(conditions.uv_index.max)})",
        ))

    if weather.soil_moisture is not None:
        if weather.soil_moisture < conditions.soil_moisture.min:
            found.append((
                "soil", "warning", 3,
                f"Soil too dry: {_fmt(weather.soil_moisture)}% (min: {_fmt(conditions.soil_moisture.min)}%)",
            ))
        elif weather.soil_moisture > conditions.soil_moisture.max:
            found.append((
                "soil", "warning", 3,
                f"Soil too wet: {_fmt(weather.soil_moisture)}% (max: {_fmt(conditions.soil_moisture.max)}%)",
            ))

    if weather.dew_point is not None and weather.dew_point > conditions.dew_point.max:
        found.append((
            "dewpoint", "warning", 3,
            f"High disease risk - dew point: {_fmt(weather.dew_point)}°C (max: {_fmt(conditions.dew_point.max)}°C)",
        ))

    return found


def build_alert(
    treatment_id: str,
    treatment_type: TreatmentType | str,
    weather: WeatherData,
    original_date: date,
    suggested_date: Optional[date] = None,
) -> Optional[WeatherAlert]:
    """
    Alert payload for the most urgent problem with `weather`, or None.

    Temperature outranks wind and precipitation, which outrank UV, soil
    moisture and dew point. Ties go to the first finding.
    """
    key = resolve_treatment_type(treatment_type)
    findings = _findings(get_treatment_conditions(key), weather)
    if not findings:
        return None

    alert_type, severity, priority, message = max(findings, key=lambda f: f[2])
    metrics = {
        name: value
        for name, value in weather.model_dump(exclude={"conditions"}).items()
        if value is not None
    }
    return WeatherAlert(
        treatment_id=treatment_id,
        treatment_type=key.value,
        type=alert_type,
        severity=severity,
        priority=priority,
        message=message,
        original_date=original_date,
        suggested_date=suggested_date,
        metrics=metrics,
    )


# ── Rescheduling ──────────────────────────────────────────────────────────────


def rank_reschedule_options(
    treatment_type: TreatmentType | str,
    forecast: Iterable[ForecastPoint],
    config: WeatherMonitorConfig = DEFAULT_CONFIG,
    exclude: Iterable[date] = (),
) -> list[RescheduleOption]:
    """
    Forecast dates worth moving a treatment to, best first.

    A candidate must pass the hard limits and reach config.alert_threshold on
    the weighted score. Ranking is weighted score plus the ideal-conditions
    bonus, then earliest date.
    """
    excluded = set(exclude)
    options: list[RescheduleOption] = []
    for point in forecast:
        if point.date in excluded:
            continue
        verdict = evaluate(treatment_type, point.weather)
        if not verdict.suitable:
            continue
        rating = weather_score(treatment_type, point.weather)
        if rating < config.alert_threshold:
            continue
        options.append(RescheduleOption(
            date=point.date,
            score=rating + verdict.score,
            weather_score=rating,
            weather=point.weather,
        ))
    options.sort(key=lambda o: (-o.score, o.date))
    return options


def plan_occurrences(
    treatment_id: str,
    treatment_type: TreatmentType | str,
    dates: Iterable[date],
    forecast: Iterable[ForecastPoint],
    config: WeatherMonitorConfig = DEFAULT_CONFIG,
    max_alternatives: int = 3,
) -> list[OccurrencePlan]:
    """
    Decide proceed / reschedule / alert for each occurrence.

    Occurrences with no forecast point proceed unevaluated. An unsuitable
    occurrence is rescheduled when some other forecast date (not already an
    occurrence or an earlier suggestion) qualifies; otherwise it only raises an alert.
    Alerts below config.min_alert_priority are dropped, so an unsuitable
    occurrence with no alternative and no alert proceeds as scheduled.
    """
    key = resolve_treatment_type(treatment_type)
    occurrences = list(dates)
    points = list(forecast)
    by_date: dict[date, ForecastPoint] = {}
    for point in points:
        by_date.setdefault(point.date, point)

    plans: list[OccurrencePlan] = []
    claimed: list[date] = []
    for occurrence in occurrences:
        point = by_date.get(occurrence)
        if point is None:
            plans.append(OccurrencePlan(occurrence_date=occurrence, decision="proceed"))
            continue

        verdict = evaluate(key, point.weather)
        if verdict.suitable:
            plans.append(OccurrencePlan(occurrence_date=occurrence, decision="proceed", verdict=verdict))
            continue

        options = rank_reschedule_options(key, points, config, exclude=[*occurrences, *claimed])
        suggested = options[0].date if options else None
        if suggested is not None:
            claimed.append(suggested)
        alert = build_alert(treatment_id, key, point.weather, occurrence, suggested)
        if alert is not None and alert.priority < config.min_alert_priority:
            alert = None
        if suggested is not None:
            decision = "reschedule"
        elif alert is not None:
            decision = "alert"
        else:
            decision = "proceed"
        plans.append(OccurrencePlan(
            occurrence_date=occurrence,
            decision=decision,
            verdict=verdict,
            alert=alert,
            suggested_date=suggested,
            alternatives=[o.date for o in options[:max_alternatives]],
        ))
        logger.debug(
            "plan_occurrences: %s on %s unsuitable (%s), suggested=%s",
            treatment_id, occurrence, ",".join(verdict.violated_constraints), suggested,
        )

    return plans


def exceptions_from_plans(plans: Iterable[OccurrencePlan]) -> list[RecurrenceException]:
    """Move exceptions for every rescheduled occurrence, ready for apply_exceptions."""
    return [
        RecurrenceException(original_date=plan.occurrence_date, new_date=plan.suggested_date)
        for plan in plans
        if plan.decision == "reschedule" and plan.suggested_date is not None
    ]
