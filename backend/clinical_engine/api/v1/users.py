import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from clinical_engine.api.deps import CurrentUser, DbSession
from clinical_engine.models import User
from clinical_engine.schemas.user import UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: DbSession,
) -> User:
    """Register a patient with their intake profile."""
    email = user_in.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = User(**user_in.model_dump(exclude={"email"}), email=email)
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Registered user", extra={"user_id": user.id})
    return user


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: CurrentUser,
) -> User:
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    profile_in: UserUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> User:
    """Update intake profile fields that were sent."""
    for field, value in profile_in.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(current_user, field, value)

    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: DbSession,
) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user
