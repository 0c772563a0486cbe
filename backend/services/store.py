"""Store contract the engine reads from and writes to.

The platform supplies a real implementation (database-backed). ``InMemoryStore``
implements the same contract with plain dicts and is what the tests and
the training CLI's demo mode use.
"""

import logging
import threading
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from models.entities import FeedbackEvent, JobPosting, OutcomeRecord, Profile
from models.requests import RecommendationFilters
from models.responses import FeedbackEntry, ScoredRecommendation
from services.filters import company_excluded, job_matches_filters, order_by_recency

logger = logging.getLogger(__name__)


class RecommendationStore(Protocol):
    def get_profile(self, profile_id: str) -> Profile | None: ...

    def get_job(self, job_id: str) -> JobPosting | None: ...

    def list_candidate_jobs(
        self,
        filters: RecommendationFilters | None,
        exclude_applied_by: str,
        limit: int,
        exclude_companies: Iterable[str] = (),
    ) -> list[JobPosting]: ...

    def list_profiles(self, limit: int) -> list[Profile]: ...

    def list_jobs(self, limit: int) -> list[JobPosting]: ...

    def list_outcome_records(self) -> list[OutcomeRecord]: ...

    def persist_recommendations(
        self, profile_id: str, recommendations: list[ScoredRecommendation]
    ) -> None: ...

    def get_recommendation(self, profile_id: str, job_id: str) -> ScoredRecommendation | None: ...

    def save_recommendation(self, recommendation: ScoredRecommendation) -> None: ...

    def append_feedback(
        self, profile_id: str, job_id: str, entry: FeedbackEntry, updated_at: datetime
    ) -> ScoredRecommendation | None: ...

    def list_recommendations(self, profile_id: str) -> list[ScoredRecommendation]: ...

    def delete_recommendations(self, profile_id: str) -> None: ...

    def count_applications(self, profile_id: str) -> int: ...

    def record_feedback_event(self, event: FeedbackEvent) -> None: ...

    def list_feedback_events(self) -> list[FeedbackEvent]: ...


class InMemoryStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._profiles: dict[str, Profile] = {}
        self._jobs: dict[str, JobPosting] = {}
        self._applications: set[tuple[str, str]] = set()
        self._outcomes: list[OutcomeRecord] = []
        # profile_id -> job_id -> recommendation; one active entry per job
        self._recommendations: dict[str, dict[str, ScoredRecommendation]] = {}
        self._feedback: list[FeedbackEvent] = []

    # -- seeding ---------------------------------------------------------

    def add_profile(self, profile: Profile) -> None:
        with self._lock:
            self._profiles[profile.id] = profile

    def add_job(self, job: JobPosting) -> None:
        with self._lock:
            self._jobs[job.id] = job

    def add_application(self, profile_id: str, job_id: str) -> None:
        with self._lock:
            self._applications.add((profile_id, job_id))

    def add_outcome_record(self, record: OutcomeRecord) -> None:
        with self._lock:
            self._outcomes.append(record)
            self._profiles.setdefault(record.profile.id, record.profile)
            self._jobs.setdefault(record.job.id, record.job)
            if record.applied:
                self._applications.add((record.profile.id, record.job.id))

    # -- reads -----------------------------------------------------------

    def get_profile(self, profile_id: str) -> Profile | None:
        with self._lock:
            return self._profiles.get(profile_id)

    def get_job(self, job_id: str) -> JobPosting | None:
        with self._lock:
            return self._jobs.get(job_id)

    def list_candidate_jobs(
        self,
        filters: RecommendationFilters | None,
        exclude_applied_by: str,
        limit: int,
        exclude_companies: Iterable[str] = (),
    ) -> list[JobPosting]:
        excluded = list(exclude_companies)
        with self._lock:
            jobs = list(self._jobs.values())
            applied = {job_id for pid, job_id in self._applications if pid == exclude_applied_by}
        candidates = [
            job for job in jobs
            if job.status == "ACTIVE"
            and job.id not in applied
            and job_matches_filters(job, filters)
            and not company_excluded(job, excluded)
        ]
        return order_by_recency(candidates)[:limit]

    def list_profiles(self, limit: int) -> list[Profile]:
        with self._lock:
            return list(self._profiles.values())[:limit]

    def list_jobs(self, limit: int) -> list[JobPosting]:
        with self._lock:
            return list(self._jobs.values())[:limit]

    def list_outcome_records(self) -> list[OutcomeRecord]:
        with self._lock:
            return list(self._outcomes)

    def count_applications(self, profile_id: str) -> int:
        with self._lock:
            return sum(1 for pid, _ in self._applications if pid == profile_id)

    # -- recommendation sets ---------------------------------------------

    def persist_recommendations(
        self, profile_id: str, recommendations: list[ScoredRecommendation]
    ) -> None:
        replacement = {rec.job_id: rec.model_copy(deep=True) for rec in recommendations}
        with self._lock:
            self._recommendations[profile_id] = replacement

    def get_recommendation(self, profile_id: str, job_id: str) -> ScoredRecommendation | None:
        with self._lock:
            rec = self._recommendations.get(profile_id, {}).get(job_id)
        return rec.model_copy(deep=True) if rec is not None else None

    def save_recommendation(self, recommendation: ScoredRecommendation) -> None:
        with self._lock:
            self._recommendations.setdefault(recommendation.profile_id, {})[
                recommendation.job_id
            ] = recommendation.model_copy(deep=True)

    def append_feedback(
        self, profile_id: str, job_id: str, entry: FeedbackEntry, updated_at: datetime
    ) -> ScoredRecommendation | None:
        """Append to the stored feedback history in one locked step."""
        with self._lock:
            rec = self._recommendations.get(profile_id, {}).get(job_id)
            if rec is None:
                return None
            rec.feedback_history.append(entry.model_copy(deep=True))
            rec.updated_at = updated_at
            return rec.model_copy(deep=True)

    def list_recommendations(self, profile_id: str) -> list[ScoredRecommendation]:
        with self._lock:
            recs = list(self._recommendations.get(profile_id, {}).values())
        return [rec.model_copy(deep=True) for rec in recs]

    def delete_recommendations(self, profile_id: str) -> None:
        with self._lock:
            self._recommendations.pop(profile_id, None)

    # -- feedback --------------------------------------------------------

    def record_feedback_event(self, event: FeedbackEvent) -> None:
        with self._lock:
            self._feedback.append(event)

    def list_feedback_events(self) -> list[FeedbackEvent]:
        with self._lock:
            return list(self._feedback)
