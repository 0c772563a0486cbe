"""Profile and job normalization.

Pure functions that turn platform entities into the canonical records
consumed by both the training pipeline and the scoring engine:
lower-cased deduplicated tokens, experience spans in whole months and
best-effort numeric grades. Nothing here raises on malformed input.
"""

import logging
import re
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone

from models.entities import JobPosting, Profile
from models.schemas.normalized import (
    NormalizedEducation,
    NormalizedExperience,
    NormalizedJob,
    NormalizedLocation,
    NormalizedProfile,
)

logger = logging.getLogger(__name__)

# 4.0-scale equivalents for letter grades
LETTER_GRADES: dict[str, float] = {
    "a+": 4.0, "a": 4.0, "a-": 3.7,
    "b+": 3.3, "b": 3.0, "b-": 2.7,
    "c+": 2.3, "c": 2.0, "c-": 1.7,
    "d+": 1.3, "d": 1.0, "d-": 0.7,
    "f": 0.0,
}

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_tokens(tokens: Iterable[str]) -> list[str]:
    """Lower-case, strip and deduplicate tokens, keeping first-seen order."""
    seen: dict[str, None] = {}
    for token in tokens:
        if not token:
            continue
        cleaned = " ".join(str(token).lower().split())
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def months_between(start: date | None, end: date | None, now: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (or ``now``), never negative."""
    if start is None:
        return 0
    end = end or now
    months = (end.year - start.year) * 12 + (end.month - start.month)
    return max(0, months)


def _parse_grade(raw: str | float | int | None) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip().lower()
    if not text:
        return None
    if text in LETTER_GRADES:
        return LETTER_GRADES[text]
    match = _NUMBER_RE.search(text)
    if match:
        return float(match.group())
    return None


def parse_grade(raw: str | float | int | None) -> float:
    """Parse "3.8", "B+", 3.8 or "3.5/4.0" into a float; 0.0 when unparseable."""
    value = _parse_grade(raw)
    return value if value is not None else 0.0


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def normalize_profile(profile: Profile, now: datetime | None = None) -> NormalizedProfile:
    today = _as_date(now or utc_now())

    skill_names: dict[str, str] = {}
    for skill in profile.skills:
        key = " ".join(skill.name.lower().split())
        if key:
            skill_names.setdefault(key, skill.name.strip())

    experiences = [
        NormalizedExperience(
            title=" ".join(exp.title.lower().split()),
            organization=exp.organization.strip(),
            description=exp.description,
            months=months_between(
                exp.start_date, None if exp.is_current else exp.end_date, today
            ),
            is_current=exp.is_current,
            skills=normalize_tokens(exp.skills),
        )
        for exp in profile.experiences
    ]

    education = []
    for edu in profile.education:
        grade = _parse_grade(edu.grade)
        education.append(
            NormalizedEducation(
                institution=edu.institution.strip(),
                degree=" ".join(edu.degree.lower().split()),
                field=" ".join(edu.field.lower().split()),
                grade=grade if grade is not None else 0.0,
                has_grade=grade is not None,
            )
        )

    location = NormalizedLocation()
    if profile.location is not None:
        location = NormalizedLocation(
            city=profile.location.city.strip().lower(),
            state=profile.location.state.strip().lower(),
            country=profile.location.country.strip().lower(),
        )

    return NormalizedProfile(
        id=profile.id,
        skills=list(skill_names),
        skill_names=list(skill_names.values()),
        experiences=experiences,
        education=education,
        location=location,
    )


def normalize_job(job: JobPosting) -> NormalizedJob:
    return NormalizedJob(
        id=job.id,
        title=" ".join(job.title.lower().split()),
        display_title=job.title.strip(),
        description=job.description,
        requirements=normalize_tokens(job.requirements),
        type=job.type.strip().upper(),
        location=job.location.strip().lower(),
        experience_level=job.experience_level.strip().lower(),
        company_name=job.company.name.strip(),
        industry=job.company.industry.strip().lower(),
        company_size=job.company.size.strip(),
        salary=job.salary,
        application_deadline=job.application_deadline,
        created_at=job.created_at,
    )


class Normalizer:
    """Normalization bound to a clock, so month spans are reproducible."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    def profile(self, profile: Profile) -> NormalizedProfile:
        return normalize_profile(profile, now=self._clock())

    def job(self, job: JobPosting) -> NormalizedJob:
        return normalize_job(job)

    def now(self) -> datetime:
        return self._clock()
