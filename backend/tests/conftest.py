"""Shared test configuration, pytest markers and fixtures."""

from datetime import date, datetime, timezone

import pytest

from models.entities import (
    Company,
    Education,
    Experience,
    JobPosting,
    Location,
    Profile,
    ProfileSkill,
    SalaryRange,
)
from services.store import InMemoryStore

FROZEN_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: runs a real (small) torch optimisation"
    )


class FakeClock:
    """Monotonic seconds that only move when a test advances them."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def frozen_now():
    return lambda: FROZEN_NOW


@pytest.fixture
def make_profile():
    def _make(
        profile_id: str = "p1",
        skills: tuple[str, ...] = ("JavaScript", "React", "Python"),
        city: str = "Austin",
        state: str = "Texas",
        country: str = "USA",
        experiences: list[Experience] | None = None,
        education: list[Education] | None = None,
    ) -> Profile:
        if experiences is None:
            experiences = [
                Experience(
                    title="Frontend Developer",
                    organization="Acme Software",
                    start_date=date(2022, 1, 1),
                    end_date=date(2024, 1, 1),
                    skills=["javascript", "react"],
                )
            ]
        if education is None:
            education = [
                Education(
                    institution="UT Austin",
                    degree="Bachelor of Science",
                    field="Computer Science",
                    grade="3.6",
                )
            ]
        location = Location(city=city, state=state, country=country) if (city or state or country) else None
        return Profile(
            id=profile_id,
            location=location,
            skills=[ProfileSkill(name=s) for s in skills],
            experiences=experiences,
            education=education,
        )
    return _make


@pytest.fixture
def make_job():
    def _make(
        job_id: str = "j1",
        title: str = "Frontend Developer",
        requirements: tuple[str, ...] = ("JavaScript", "React"),
        location: str = "Austin, Texas",
        job_type: str = "FULL_TIME",
        company: str = "Globex",
        industry: str = "technology",
        salary: SalaryRange | None = None,
        created_at: datetime | None = None,
        **extra,
    ) -> JobPosting:
        return JobPosting(
            id=job_id,
            title=title,
            requirements=list(requirements),
            location=location,
            type=job_type,
            company=Company(name=company, industry=industry, size="51-200"),
            salary=salary,
            created_at=created_at or FROZEN_NOW,
            **extra,
        )
    return _make


@pytest.fixture
def store(make_profile, make_job):
    """Store with one profile and three postings of decreasing fit."""
    s = InMemoryStore()
    s.add_profile(make_profile())
    s.add_job(make_job(
        "j1",
        salary=SalaryRange(min=100000, max=130000),
        created_at=datetime(2025, 5, 20, tzinfo=timezone.utc),
    ))
    s.add_job(make_job(
        "j2",
        title="Backend Engineer",
        requirements=("Java", "Spring"),
        location="Remote",
        job_type="REMOTE",
        company="Initech",
        industry="finance",
        created_at=datetime(2025, 5, 18, tzinfo=timezone.utc),
    ))
    s.add_job(make_job(
        "j3",
        title="Data Analyst",
        requirements=("SQL", "Excel"),
        location="Berlin, Germany",
        job_type="CONTRACT",
        company="Umbrella",
        industry="consulting",
        created_at=datetime(2025, 5, 10, tzinfo=timezone.utc),
    ))
    return s
