"""Candidate-job filter predicate and ordering.

Filters are AND-combined. ``remote_only`` widens the location predicate:
with a location filter a remote posting also passes, without one only
remote postings pass.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from models.entities import JobPosting
from models.requests import RecommendationFilters
from services.similarity import any_similar

REMOTE_TYPE = "REMOTE"


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _lower_set(values: list[str]) -> set[str]:
    return {v.strip().lower() for v in values if v and v.strip()}


def is_remote(job: JobPosting) -> bool:
    location = job.location.lower()
    return (
        "remote" in location
        or "anywhere" in location
        or job.type.strip().upper() == REMOTE_TYPE
    )


def _location_ok(job: JobPosting, filters: RecommendationFilters) -> bool:
    wanted = (filters.location or "").strip().lower()
    if wanted:
        matched = wanted in job.location.lower()
        return matched or (filters.remote_only and is_remote(job))
    if filters.remote_only:
        return is_remote(job)
    return True


def _salary_ok(job: JobPosting, filters: RecommendationFilters) -> bool:
    wanted = filters.salary
    if wanted is None or (wanted.min is None and wanted.max is None):
        return True
    if job.salary is None:
        return False
    job_low = job.salary.min if job.salary.min is not None else job.salary.max
    job_high = job.salary.max if job.salary.max is not None else job.salary.min
    if job_low is None:
        return False
    if wanted.min is not None and job_high < wanted.min:
        return False
    if wanted.max is not None and job_low > wanted.max:
        return False
    return True


def job_matches_filters(job: JobPosting, filters: RecommendationFilters | None) -> bool:
    if filters is None:
        return True
    if not _location_ok(job, filters):
        return False
    if filters.job_types and job.type.strip().upper() not in {
        t.strip().upper() for t in filters.job_types
    }:
        return False
    if filters.experience_levels and (
        job.experience_level.strip().lower() not in _lower_set(filters.experience_levels)
    ):
        return False
    if not _salary_ok(job, filters):
        return False
    if filters.skills and not any(
        any_similar(req, filters.skills) for req in job.requirements
    ):
        return False
    if filters.companies and job.company.name.strip().lower() not in _lower_set(filters.companies):
        return False
    if filters.industries and job.company.industry.strip().lower() not in _lower_set(filters.industries):
        return False
    if filters.deadline is not None and job.application_deadline is not None:
        # Postings without a deadline stay open indefinitely
        if _aware(job.application_deadline) < _aware(filters.deadline):
            return False
    if filters.company_sizes and job.company.size.strip().lower() not in _lower_set(filters.company_sizes):
        return False
    if filters.benefits and not (_lower_set(job.benefits) & _lower_set(filters.benefits)):
        return False
    if filters.schedules and job.schedule.strip().lower() not in _lower_set(filters.schedules):
        return False
    return True


def company_excluded(job: JobPosting, companies: Iterable[str]) -> bool:
    """Case-insensitive company-name match against an exclusion list."""
    name = job.company.name.strip().lower()
    return bool(name) and name in {c.strip().lower() for c in companies if c}


def order_by_recency(jobs: list[JobPosting]) -> list[JobPosting]:
    """Newest first; among equal creation times, nearest deadline first."""
    far_future = datetime.max.replace(tzinfo=timezone.utc)
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    by_deadline = sorted(
        jobs,
        key=lambda j: _aware(j.application_deadline) if j.application_deadline else far_future,
    )
    return sorted(
        by_deadline,
        key=lambda j: _aware(j.created_at) if j.created_at else epoch,
        reverse=True,
    )
