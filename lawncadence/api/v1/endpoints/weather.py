import dataclasses

from fastapi import APIRouter, HTTPException, status

from lawncadence.core.config import settings
from lawncadence.core.deps import MonitorConfig
from lawncadence.schemas.weather import (
    EvaluateRead,
    EvaluateRequest,
    MonitorConfigIn,
    MonitorConfigRead,
    PlanRead,
    PlanRequest,
    RecommendationRequest,
    SeverityRead,
    SeverityRequest,
    TreatmentConditionsRead,
    WeatherRecommendation,
)
from lawncadence.services.monitor_config import ConfigError, create_default_config
from lawncadence.services.suitability import (
    determine_severity,
    evaluate,
    plan_occurrences,
    treatment_recommendations,
    weather_score,
)
from lawncadence.services.treatment_conditions import (
    TREATMENT_CONDITIONS,
    UnknownTreatmentTypeError,
    resolve_treatment_type,
)

router = APIRouter(prefix="/weather", tags=["weather"])


def _resolve_or_404(treatment_type: str):
    try:
        return resolve_treatment_type(treatment_type)
    except UnknownTreatmentTypeError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/treatments", response_model=list[TreatmentConditionsRead])
async def list_treatment_conditions():
    return [
        TreatmentConditionsRead.model_validate(
            {"treatment_type": key.value, **dataclasses.asdict(conditions)}
        )
        for key, conditions in TREATMENT_CONDITIONS.items()
    ]


@router.post("/evaluate", response_model=EvaluateRead)
async def evaluate_weather(data: EvaluateRequest):
    key = _resolve_or_404(data.treatment_type)
    verdict = evaluate(key, data.weather)
    return EvaluateRead(
        **verdict.model_dump(),
        treatment_type=key.value,
        weather_score=weather_score(key, data.weather),
    )


@router.post("/severity", response_model=SeverityRead)
async def classify_severity(data: SeverityRequest):
    return SeverityRead(severity=determine_severity(data.description))


@router.post("/recommendations", response_model=WeatherRecommendation)
async def recommend_treatment(data: RecommendationRequest):
    key = _resolve_or_404(data.treatment_type)
    return treatment_recommendations(
        key, data.weather, data.forecast, max_alternatives=settings.RESCHEDULE_MAX_SUGGESTIONS
    )


@router.post("/plan", response_model=PlanRead)
async def plan_treatments(data: PlanRequest, config: MonitorConfig):
    key = _resolve_or_404(data.treatment_type)
    plans = plan_occurrences(
        data.treatment_id,
        key,
        data.dates,
        data.forecast,
        config,
        max_alternatives=settings.RESCHEDULE_MAX_SUGGESTIONS,
    )
    return PlanRead(
        plans=plans,
        reschedule_count=sum(1 for p in plans if p.decision == "reschedule"),
        alert_count=sum(1 for p in plans if p.alert is not None),
    )


@router.get("/monitor-config", response_model=MonitorConfigRead)
async def read_monitor_config(config: MonitorConfig):
    return MonitorConfigRead.model_validate(config)


@router.post("/monitor-config/validate", response_model=MonitorConfigRead)
async def validate_monitor_config(data: MonitorConfigIn):
    try:
        config = create_default_config(**data.model_dump())
    except ConfigError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return MonitorConfigRead.model_validate(config)
