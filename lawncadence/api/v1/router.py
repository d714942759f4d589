from fastapi import APIRouter

from lawncadence.api.v1.endpoints import recurrence, weather

api_router = APIRouter()

api_router.include_router(recurrence.router)
api_router.include_router(weather.router)
