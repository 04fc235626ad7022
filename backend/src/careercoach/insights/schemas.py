"""Pydantic schemas for generated insight payloads and API responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SalaryRange(BaseModel):
    """Salary band for one role, in the currency the generator reports."""

    role: str
    min: float
    max: float
    median: float
    location: str = ""


class InsightPayload(BaseModel):
    """Structured content returned by the insight generator."""

    salary_ranges: list[SalaryRange] = Field(default_factory=list)
    growth_rate: float
    demand_level: Literal["HIGH", "MEDIUM", "LOW"]
    top_skills: list[str] = Field(default_factory=list)
    market_outlook: Literal["POSITIVE", "NEUTRAL", "NEGATIVE"]
    key_trends: list[str] = Field(default_factory=list)
    recommended_skills: list[str] = Field(default_factory=list)

    @field_validator("demand_level", "market_outlook", mode="before")
    @classmethod
    def upper_case_enum(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class IndustryInsightResponse(BaseModel):
    """Cached insight as returned to the dashboard."""

    model_config = ConfigDict(from_attributes=True)

    industry: str
    salary_ranges: list[SalaryRange]
    growth_rate: float
    demand_level: str
    top_skills: list[str]
    market_outlook: str
    key_trends: list[str]
    recommended_skills: list[str]
    last_updated: datetime
    next_update: datetime
