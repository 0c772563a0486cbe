"""Platform entities read by the engine.

These are supplied by the surrounding platform (profiles, postings,
historical applications). The engine never mutates them.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel

FeedbackType = Literal["liked", "disliked", "applied", "saved", "rejected"]


class Location(BaseModel):
    city: str = ""
    state: str = ""
    country: str = ""


class ProfileSkill(BaseModel):
    name: str
    endorsements: int = 0


class Education(BaseModel):
    institution: str = ""
    degree: str = ""  # free text, e.g. "Bachelor of Science"
    field: str = ""
    grade: str | float | None = None  # "3.8", "B+", 3.8 ...
    start_date: date | None = None
    end_date: date | None = None


class Experience(BaseModel):
    title: str = ""
    organization: str = ""
    description: str = ""
    location: str = ""
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool = False
    skills: list[str] = []


class Profile(BaseModel):
    id: str
    headline: str = ""
    location: Location | None = None
    skills: list[ProfileSkill] = []
    education: list[Education] = []
    experiences: list[Experience] = []
    languages: list[str] = []
    interests: list[str] = []
    availability: str | None = None


class Company(BaseModel):
    name: str = ""
    industry: str = ""
    size: str = ""


class SalaryRange(BaseModel):
    min: float | None = None
    max: float | None = None
    currency: str = "USD"
    period: str = "yearly"


class JobPosting(BaseModel):
    id: str
    title: str = ""
    description: str = ""
    requirements: list[str] = []  # free-text skill/requirement tokens
    type: str = ""  # FULL_TIME, PART_TIME, CONTRACT, REMOTE, HYBRID, ONSITE ...
    location: str = ""
    experience_level: str = ""
    salary: SalaryRange | None = None
    application_deadline: datetime | None = None
    company: Company = Company()
    benefits: list[str] = []
    schedule: str = ""
    status: Literal["ACTIVE", "CLOSED"] = "ACTIVE"
    created_at: datetime | None = None


class OutcomeRecord(BaseModel):
    """A historical (profile, job) interaction with its outcome."""
    profile: Profile
    job: JobPosting
    applied: bool = True
    interviewed: bool = False
    hired: bool = False
    feedback: str | None = None


class FeedbackEvent(BaseModel):
    """A user reaction to a stored recommendation."""
    profile_id: str
    job_id: str
    feedback: FeedbackType
    reasons: list[str] = []
    recorded_at: datetime
