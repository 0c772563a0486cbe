from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class SalaryFilter(BaseModel):
    min: float | None = None
    max: float | None = None


class RecommendationFilters(BaseModel):
    """Candidate-set filters. All AND-combined, except ``remote_only`` which
    widens the location predicate to remote postings."""
    location: str | None = None
    job_types: list[str] = []
    experience_levels: list[str] = []
    salary: SalaryFilter | None = None
    skills: list[str] = []
    companies: list[str] = []
    industries: list[str] = []
    remote_only: bool = False
    deadline: datetime | None = None  # only postings open at least until this cutoff
    company_sizes: list[str] = []
    benefits: list[str] = []
    schedules: list[str] = []


class RecommendationPreferences(BaseModel):
    prioritize_skill_match: bool = False
    prioritize_location: bool = False
    career_goals: list[str] = []
    work_environment: Literal["remote", "onsite", "hybrid", "any"] | None = None
    culture_keywords: list[str] = []
    learning_opportunities: bool | None = None
    work_life_balance: int | None = Field(default=None, ge=1, le=10)
    salary_importance: int | None = Field(default=None, ge=1, le=10)
    growth_potential: int | None = Field(default=None, ge=1, le=10)
    industry_preferences: list[str] = []
    role_types: list[str] = []
    avoid_companies: list[str] = []
    preferred_benefits: list[str] = []


class TrainingConfig(BaseModel):
    epochs: int = Field(default=50, ge=1)
    batch_size: int = Field(default=32, ge=1)
    learning_rate: float = Field(default=0.001, gt=0)
    validation_split: float = Field(default=0.2, ge=0, lt=1)
    dropout_rate: float = Field(default=0.3, ge=0, lt=1)  # regularization after each hidden layer
    hidden_units: list[int] = [128, 64, 32]
    seed: int | None = None

    @field_validator("hidden_units")
    @classmethod
    def _check_hidden_units(cls, value: list[int]) -> list[int]:
        if not 1 <= len(value) <= 3:
            raise ValueError("hidden_units needs one to three layer widths")
        if any(width < 1 for width in value):
            raise ValueError("hidden layer widths must be positive")
        return value
