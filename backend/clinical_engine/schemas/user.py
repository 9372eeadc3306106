from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field


class UserProfile(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    date_of_birth: date | None = None
    medical_conditions: list[str] = Field(default_factory=list)
    preferred_language: str = Field("en", max_length=10)


class UserCreate(UserProfile):
    email: EmailStr


class UserUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    date_of_birth: date | None = None
    medical_conditions: list[str] | None = None
    preferred_language: str | None = Field(None, max_length=10)


class UserResponse(UserProfile):
    id: int
    email: EmailStr
    created_at: datetime

    class Config:
        from_attributes = True
