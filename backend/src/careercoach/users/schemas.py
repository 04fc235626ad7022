"""Pydantic schemas for profile updates and user responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IdentityProfile(BaseModel):
    """Profile fields read from the identity provider, already defaulted."""

    email: str = ""
    name: str = ""
    image_url: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Onboarding form submission."""

    industry: str = Field(..., min_length=1, max_length=200)
    experience: Optional[int] = Field(default=None, ge=0, le=80)
    bio: Optional[str] = Field(default=None, max_length=5000)
    skills: list[str] = Field(default_factory=list)

    @field_validator("industry")
    @classmethod
    def strip_industry(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("industry must not be blank")
        return value

    @field_validator("skills")
    @classmethod
    def normalize_skills(cls, value: list[str]) -> list[str]:
        """Drop blanks and duplicates, keeping first-seen order."""
        seen: list[str] = []
        for skill in value:
            skill = skill.strip()
            if skill and skill not in seen:
                seen.append(skill)
        return seen


class UserResponse(BaseModel):
    """User record returned after a profile update."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    clerk_user_id: str
    email: str
    name: str
    image_url: Optional[str] = None
    industry: Optional[str] = None
    experience: Optional[int] = None
    bio: Optional[str] = None
    skills: list[str] = []
    created_at: datetime
    updated_at: datetime


class OnboardingStatus(BaseModel):
    """Whether the user has completed onboarding (industry set)."""

    is_onboarded: bool
