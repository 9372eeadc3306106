from fastapi import APIRouter

from clinical_engine.api.v1 import (
    users,
    exercises,
    protocols,
    outcomes,
)

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(protocols.router, prefix="/protocols", tags=["protocols"])
api_router.include_router(outcomes.router, prefix="/outcomes", tags=["outcomes"])
