from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_engine.database import async_session_maker
from clinical_engine.models import User
from clinical_engine.services.catalog import ExerciseCatalog, get_exercise_catalog
from clinical_engine.services.outcome_tracker import OutcomeService
from clinical_engine.services.protocol_repository import ProtocolRepository
from clinical_engine.services.protocol_resolver import ProtocolResolver
from clinical_engine.services.recommender import RecommendationEngine


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(
    db: DbSession,
    user_id: int = 1,  # TODO: Replace with proper auth (JWT/OAuth)
) -> User:
    """
    Temporary: Returns user by ID. Will be replaced with proper authentication.
    For MVP, we use a simple user_id query parameter or default to user 1.
    """
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_catalog() -> ExerciseCatalog:
    return get_exercise_catalog()


Catalog = Annotated[ExerciseCatalog, Depends(get_catalog)]


def get_recommendation_engine(catalog: Catalog) -> RecommendationEngine:
    return RecommendationEngine(catalog=catalog)


Recommender = Annotated[RecommendationEngine, Depends(get_recommendation_engine)]


def get_protocol_resolver(db: DbSession) -> ProtocolResolver:
    return ProtocolResolver(ProtocolRepository(db))


Resolver = Annotated[ProtocolResolver, Depends(get_protocol_resolver)]


def get_outcome_service(db: DbSession) -> OutcomeService:
    return OutcomeService(db)


Outcomes = Annotated[OutcomeService, Depends(get_outcome_service)]
