from datetime import date

import pytest

from lawncadence.schemas.weather import WeatherData
from lawncadence.services.monitor_config import create_default_config
from lawncadence.services.recurrence import apply_exceptions
from lawncadence.services.suitability import (
    build_alert,
    determine_severity,
    evaluate,
    analyze_effectiveness,
    exceptions_from_plans,
    plan_occurrences,
    rank_reschedule_options,
    treatment_recommendations,
    weather_score,
)
from lawncadence.services.treatment_conditions import TreatmentType, UnknownTreatmentTypeError


def _weather(**overrides) -> WeatherData:
    base = {"temperature": 20, "humidity": 50, "precipitation": 0, "wind_speed": 5, "conditions": "Clear"}
    return WeatherData(**{**base, **overrides})


# ── evaluate ──────────────────────────────────────────────────────────────────


def test_weed_control_wind_violation():
    verdict = evaluate("Weed Control", _weather(wind_speed=999))
    assert verdict.suitable is False
    assert "wind" in verdict.violated_constraints


def test_same_wind_passes_fertilization_but_not_weed_control():
    weather = _weather(wind_speed=12)
    assert evaluate(TreatmentType.FERTILIZATION, weather).suitable is True
    assert evaluate(TreatmentType.WEED_CONTROL, weather).violated_constraints == ["wind"]


def test_temperature_bounds_are_inclusive():
    assert evaluate("Fertilization", _weather(temperature=10)).suitable is True
    assert evaluate("Fertilization", _weather(temperature=29)).suitable is True
    assert evaluate("Fertilization", _weather(temperature=9.9)).violated_constraints == ["temperature_low"]
    assert evaluate("Fertilization", _weather(temperature=29.1)).violated_constraints == ["temperature_high"]


def test_zero_precipitation_cap():
    assert evaluate("Mowing", _weather(precipitation=0)).suitable is True
    assert evaluate("Mowing", _weather(precipitation=0.1)).violated_constraints == ["precipitation"]


def test_multiple_violations_are_all_reported():
    verdict = evaluate("Seeding", _weather(temperature=40, wind_speed=30, precipitation=10))
    assert verdict.violated_constraints == ["temperature_high", "wind", "precipitation"]


def test_ideal_conditions_only_affect_score():
    clear = evaluate("Seeding", _weather(conditions="Clear"))
    cloudy = evaluate("Seeding", _weather(conditions="Partly cloudy"))
    assert clear.suitable is cloudy.suitable is True
    assert clear.score == 0
    assert cloudy.score > clear.score


def test_unsuitable_weather_can_still_score_ideal():
    verdict = evaluate("Fertilization", _weather(conditions="Clear", wind_speed=50))
    assert verdict.suitable is False
    assert verdict.score == 1


def test_unknown_treatment_type_fails_loudly():
    with pytest.raises(UnknownTreatmentTypeError, match="Unknown treatment type: Aeration"):
        evaluate("Aeration", _weather())


# ── determine_severity ────────────────────────────────────────────────────────


@pytest.mark.parametrize("description, expected", [
    ("Severe Thunderstorm Warning", "severe"),
    ("Flood Watch", "severe"),
    ("TORNADO EMERGENCY", "severe"),
    ("Light Rain", "warning"),
    ("Winter Snow Advisory", "warning"),
    ("Extreme Heat", "warning"),
    ("Clear Skies", "info"),
    ("", "info"),
])
def test_determine_severity(description, expected):
    assert determine_severity(description) == expected


def test_severe_tier_checked_before_warning_tier():
    # "rain" would match warning, "thunderstorm" must win
    assert determine_severity("Rain and thunderstorm") == "severe"


# ── weather_score ─────────────────────────────────────────────────────────────


def test_weather_score_ideal_midpoint_is_five():
    assert weather_score("Fertilization", _weather(temperature=19.5, wind_speed=0)) == 5


def test_weather_score_drops_for_out_of_range_metrics():
    good = weather_score("Fertilization", _weather())
    bad = weather_score(
        "Fertilization",
        _weather(temperature=5, wind_speed=30, precipitation=10, uv_index=12, soil_moisture=5, dew_point=30),
    )
    assert bad == 1
    assert good > bad


def test_weather_score_stays_within_bounds():
    for treatment in TreatmentType:
        assert 1 <= weather_score(treatment, _weather(temperature=-30, wind_speed=200)) <= 5


# ── build_alert ───────────────────────────────────────────────────────────────


def test_no_alert_for_suitable_weather():
    assert build_alert("t1", "Fertilization", _weather(), date(2026, 4, 6)) is None


def test_temperature_outranks_wind():
    alert = build_alert("t1", "Fertilization", _weather(temperature=2, wind_speed=40), date(2026, 4, 6))
    assert alert.type == "temperature"
    assert alert.severity == "critical"
    assert alert.priority == 5
    assert alert.message == "Temperature too low: 2°C (min: 10°C)"


def test_wind_alert_payload():
    alert = build_alert(
        "t1", "Weed Control", _weather(wind_speed=25), date(2026, 4, 6), suggested_date=date(2026, 4, 7)
    )
    assert alert.treatment_id == "t1"
    assert alert.treatment_type == "Weed Control"
    assert alert.type == "wind"
    assert alert.severity == "warning"
    assert alert.message == "Wind speed too high: 25km/h (max: 10km/h)"
    assert alert.original_date == date(2026, 4, 6)
    assert alert.suggested_date == date(2026, 4, 7)
    assert alert.metrics["wind_speed"] == 25
    assert "uv_index" not in alert.metrics


def test_secondary_metric_alerts():
    dry = build_alert("t1", "Fertilization", _weather(soil_moisture=10), date(2026, 4, 6))
    assert (dry.type, dry.priority, dry.message) == ("soil", 3, "Soil too dry: 10% (min: 30%)")

    humid = build_alert("t1", "Fertilization", _weather(dew_point=20), date(2026, 4, 6))
    assert humid.type == "dewpoint"
    assert humid.message == "High disease risk - dew point: 20°C (max: 15°C)"


# ── Rescheduling ──────────────────────────────────────────────────────────────


def test_rank_prefers_ideal_conditions_then_earliest(make_forecast):
    forecast = make_forecast(
        (date(2026, 4, 10), {"conditions": "Cloudy"}),
        (date(2026, 4, 11), {"conditions": "Clear"}),
        (date(2026, 4, 12), {"conditions": "Clear"}),
        (date(2026, 4, 13), {"wind_speed": 40}),
    )
    options = rank_reschedule_options("Fertilization", forecast)
    assert [o.date for o in options] == [date(2026, 4, 11), date(2026, 4, 12), date(2026, 4, 10)]


def test_rank_applies_alert_threshold(make_forecast):
    forecast = make_forecast((date(2026, 4, 10), {"temperature": 12}))
    assert rank_reschedule_options("Fertilization", forecast)[0].weather_score == 4
    strict = create_default_config(alert_threshold=5)
    assert rank_reschedule_options("Fertilization", forecast, strict) == []


def test_plan_reschedules_unsuitable_occurrence(make_forecast):
    forecast = make_forecast(
        (date(2026, 4, 6), {"wind_speed": 25}),
        (date(2026, 4, 7), {}),
        (date(2026, 4, 8), {"precipitation": 3}),
    )
    plans = plan_occurrences("t1", "Weed Control", [date(2026, 4, 6), date(2026, 4, 13)], forecast)

    first, second = plans
    assert first.decision == "reschedule"
    assert first.verdict.violated_constraints == ["wind"]
    assert first.alert.suggested_date == date(2026, 4, 7)
    assert first.suggested_date == date(2026, 4, 7)
    assert first.alternatives == [date(2026, 4, 7)]
    assert second.decision == "proceed"
    assert second.verdict is None


def test_plan_alerts_when_no_alternative(make_forecast):
    forecast = make_forecast(
        (date(2026, 4, 6), {"temperature": 2}),
        (date(2026, 4, 7), {"temperature": 3}),
    )
    plans = plan_occurrences("t1", "Seeding", [date(2026, 4, 6)], forecast)
    assert plans[0].decision == "alert"
    assert plans[0].alert.severity == "critical"
    assert plans[0].alert.suggested_date is None


def test_plan_never_suggests_a_date_twice_or_onto_an_occurrence(make_forecast):
    forecast = make_forecast(
        (date(2026, 4, 6), {"wind_speed": 30}),
        (date(2026, 4, 7), {"wind_speed": 30}),
        (date(2026, 4, 8), {}),
        (date(2026, 4, 9), {}),
    )
    occurrences = [date(2026, 4, 6), date(2026, 4, 7), date(2026, 4, 9)]
    plans = plan_occurrences("t1", "Mowing", occurrences, forecast)
    assert [p.decision for p in plans] == ["reschedule", "alert", "proceed"]
    assert plans[0].alert.suggested_date == date(2026, 4, 8)


def test_plan_suggestions_fold_back_into_exceptions(make_forecast):
    forecast = make_forecast((date(2026, 4, 6), {"precipitation": 8}), (date(2026, 4, 7), {}))
    occurrences = [date(2026, 4, 6), date(2026, 4, 13)]
    plans = plan_occurrences("t1", "Fertilization", occurrences, forecast)

    exceptions = exceptions_from_plans(plans)
    assert len(exceptions) == 1
    assert apply_exceptions(occurrences, exceptions) == [date(2026, 4, 7), date(2026, 4, 13)]


def test_plan_unknown_treatment_raises_without_forecast():
    with pytest.raises(UnknownTreatmentTypeError):
        plan_occurrences("t1", "Aeration", [date(2026, 4, 6)], [])


def test_plan_drops_alerts_below_min_priority(make_forecast):
    forecast = make_forecast((date(2026, 4, 6), {"wind_speed": 25}))
    quiet = create_default_config(min_alert_priority=5)
    plan = plan_occurrences("t1", "Weed Control", [date(2026, 4, 6)], forecast, quiet)[0]
    assert plan.decision == "proceed"
    assert plan.alert is None
    assert plan.verdict.suitable is False


def test_plan_reschedules_without_alert_below_min_priority(make_forecast):
    forecast = make_forecast((date(2026, 4, 6), {"wind_speed": 25}), (date(2026, 4, 7), {}))
    quiet = create_default_config(min_alert_priority=5)
    plans = plan_occurrences("t1", "Weed Control", [date(2026, 4, 6)], forecast, quiet)
    assert plans[0].decision == "reschedule"
    assert plans[0].alert is None
    assert plans[0].suggested_date == date(2026, 4, 7)
    assert exceptions_from_plans(plans)[0].new_date == date(2026, 4, 7)


def test_plan_keeps_alerts_at_min_priority(make_forecast):
    forecast = make_forecast((date(2026, 4, 6), {"temperature": 2}))
    quiet = create_default_config(min_alert_priority=5)
    plan = plan_occurrences("t1", "Seeding", [date(2026, 4, 6)], forecast, quiet)[0]
    assert plan.decision == "alert"
    assert plan.alert.priority == 5


# ── Recommendations ───────────────────────────────────────────────────────────


def test_effectiveness_leaves_out_unobserved_metrics():
    result = analyze_effectiveness("Fertilization", _weather(), rating=5)
    assert set(result.factors) == {"temperature", "wind", "precipitation"}
    assert result.recommendations == []


def test_recommendations_for_good_conditions():
    result = treatment_recommendations("Fertilization", _weather(soil_moisture=50))
    assert result.score == 5
    assert result.recommendations == [
        "Current conditions are optimal for treatment",
        "Soil moisture levels are ideal for treatment effectiveness",
    ]
    assert result.alternative_dates == []


def test_recommendations_for_middling_conditions(make_forecast):
    weather = _weather(wind_speed=25, precipitation=5, uv_index=10)
    forecast = make_forecast((date(2026, 4, 10), {"wind_speed": 0}))
    result = treatment_recommendations("Weed Control", weather, forecast)
    assert result.score == 3
    assert result.recommendations == [
        "Avoid treatment during high winds (above 10km/h)",
        "Check forecast to avoid precipitation within 0mm",
        "Consider UV exposure levels when scheduling treatments",
        "Consider adjusting treatment time to when temperature is closer to 21°C",
    ]
    assert result.alternative_dates == []


def test_recommendations_for_poor_conditions_offer_better_dates(make_forecast):
    weather = _weather(temperature=35, wind_speed=25, precipitation=5, uv_index=10)
    forecast = make_forecast(
        (date(2026, 4, 10), {"temperature": 35, "wind_speed": 25, "precipitation": 5}),
        (date(2026, 4, 11), {"precipitation": 5}),
        (date(2026, 4, 12), {}),
        (date(2026, 4, 13), {"wind_speed": 0}),
        (date(2026, 4, 14), {"temperature": 35}),
        (date(2026, 4, 15), {"temperature": 35, "precipitation": 5}),
    )
    result = treatment_recommendations("Weed Control", weather, forecast)

    assert result.score == 2
    assert result.alternative_dates == [date(2026, 4, 13), date(2026, 4, 11), date(2026, 4, 12)]
    assert result.recommendations == [
        "Consider adjusting treatment time to when temperature is closer to 21°C",
        "Avoid treatment during high winds (above 10km/h)",
        "Check forecast to avoid precipitation within 0mm",
        "Consider UV exposure levels when scheduling treatments",
        "Consider early morning or evening application to avoid high temperatures",
        "Early morning typically has lower wind speeds",
        "UV levels are high - consider treatment during lower UV hours",
    ]


def test_recommendations_unknown_treatment_raises():
    with pytest.raises(UnknownTreatmentTypeError):
        treatment_recommendations("Aeration", _weather())
