"""Canonical profile/job records shared by training and scoring."""

from datetime import datetime

from pydantic import BaseModel

from models.entities import SalaryRange


class NormalizedLocation(BaseModel):
    city: str = ""
    state: str = ""
    country: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.city or self.state or self.country)


class NormalizedExperience(BaseModel):
    title: str = ""  # lower-cased
    organization: str = ""
    description: str = ""
    months: int = 0  # whole months, end (or now) minus start
    is_current: bool = False
    skills: list[str] = []  # lower-cased, deduplicated


class NormalizedEducation(BaseModel):
    institution: str = ""
    degree: str = ""  # lower-cased
    field: str = ""  # lower-cased
    grade: float = 0.0  # 0.0 when the raw grade could not be parsed
    has_grade: bool = False


class NormalizedProfile(BaseModel):
    id: str
    skills: list[str] = []  # lower-cased, deduplicated, original order
    skill_names: list[str] = []  # display names, aligned with ``skills``
    experiences: list[NormalizedExperience] = []
    education: list[NormalizedEducation] = []
    location: NormalizedLocation = NormalizedLocation()


class NormalizedJob(BaseModel):
    id: str
    title: str = ""  # lower-cased
    display_title: str = ""
    description: str = ""
    requirements: list[str] = []  # lower-cased, deduplicated
    type: str = ""  # upper-cased employment category
    location: str = ""  # lower-cased
    experience_level: str = ""
    company_name: str = ""
    industry: str = ""  # lower-cased
    company_size: str = ""
    salary: SalaryRange | None = None
    application_deadline: datetime | None = None
    created_at: datetime | None = None
