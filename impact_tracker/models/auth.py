"""Auth and user-facing DTOs."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from impact_tracker.rubric.enums import JobFamily, Level


class UserBase(BaseModel):
    """Base user fields."""
    email: EmailStr = Field(..., description="User email address")
    full_name: Optional[str] = Field(None, description="Full name for display")


class RubricPreferences(BaseModel):
    """The user's current rubric selection."""
    job_family: Optional[JobFamily] = Field(None, description="Selected job family")
    level: Optional[Level] = Field(None, description="Selected level")


class UserCreate(UserBase, RubricPreferences):
    """Registration payload."""
    password: str = Field(..., min_length=8, description="Raw password (not stored).")


class UserLogin(BaseModel):
    """Login payload."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="Password")


class UserPublic(UserBase):
    """Safe user representation."""
    id: str = Field(..., description="User identifier")
    job_family: Optional[str] = Field(None, description="Selected job family code")
    level: Optional[str] = Field(None, description="Selected level")


class TokenResponse(BaseModel):
    """Access token response."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type (bearer)")
