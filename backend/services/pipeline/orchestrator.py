"""Recommendation engine: wires cache, store, scorers and the learned model.

Flow:
    profile_id + limit + filters + preferences
      ├─ cache lookup (unless force_refresh)      → cached list, done
      ├─ store.get_profile → Normalizer           → NormalizedProfile
      ├─ store.list_candidate_jobs → Normalizer   → [NormalizedJob] (≤ max_candidates)
      ├─ EngagementModelService.predict           → learned score per job | None
      ├─ per job: scorers.score_pair → mean
      │       → preferences.apply_preferences → learned blend
      ├─ drop < min_relevance_score, rank (overall, confidence)
      └─ persist top ``limit`` (replace) → drop cached analytics
         → cache write-through → return
"""

import logging
from collections.abc import Callable
from concurrent.futures import Executor
from datetime import datetime

from pydantic import TypeAdapter

from models.requests import RecommendationFilters, RecommendationPreferences
from models.responses import ScoredRecommendation
from models.schemas.normalized import NormalizedJob, NormalizedProfile
from services.cache import RecommendationCache, analytics_key, build_cache_key
from services.errors import NotFoundError, PersistenceError
from services.normalizer import Normalizer
from services.pipeline import scorers
from services.pipeline.engagement_model import EngagementModelService
from services.pipeline.preferences import apply_preferences
from services.similarity import DEFAULT_THRESHOLD
from services.store import RecommendationStore

logger = logging.getLogger(__name__)

RECOMMENDATIONS_PREFIX = "job_recommendations"
SIMILAR_JOBS_POOL = 20

_recommendation_list = TypeAdapter(list[ScoredRecommendation])


def rank(recommendations: list[ScoredRecommendation]) -> list[ScoredRecommendation]:
    """Overall score descending; equal scores ordered high > medium > low confidence."""
    return sorted(
        recommendations,
        key=lambda r: (r.overall_score, scorers.CONFIDENCE_RANK[r.confidence]),
        reverse=True,
    )


def _title_words(title: str) -> set[str]:
    return {w for w in title.lower().split() if len(w) > 2}


def is_related_job(target: NormalizedJob, job: NormalizedJob) -> bool:
    if job.id == target.id:
        return False
    return bool(
        _title_words(target.title) & _title_words(job.title)
        or (target.company_name and job.company_name == target.company_name)
        or (target.type and job.type == target.type)
    )


class RecommendationEngine:
    def __init__(
        self,
        store: RecommendationStore,
        cache: RecommendationCache,
        model_service: EngagementModelService | None = None,
        normalizer: Normalizer | None = None,
        cache_ttl_seconds: float = 3600,
        max_candidates: int = 50,
        min_relevance_score: float = 0.3,
        similarity_threshold: float = DEFAULT_THRESHOLD,
        learned_score_weight: float = 0.3,
        executor: Executor | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.model_service = model_service
        self.normalizer = normalizer or Normalizer()
        self.cache_ttl_seconds = cache_ttl_seconds
        self.max_candidates = max_candidates
        self.min_relevance_score = min_relevance_score
        self.similarity_threshold = similarity_threshold
        self.learned_score_weight = learned_score_weight
        self.executor = executor

    # --- public operations ----------------------------------------------

    def recommend(
        self,
        profile_id: str,
        limit: int = 10,
        filters: RecommendationFilters | None = None,
        preferences: RecommendationPreferences | None = None,
        force_refresh: bool = False,
    ) -> list[ScoredRecommendation]:
        key = build_cache_key(RECOMMENDATIONS_PREFIX, profile_id, {
            "limit": limit,
            "filters": filters.model_dump(mode="json") if filters else None,
            "preferences": preferences.model_dump(mode="json") if preferences else None,
        })
        if not force_refresh:
            cached = self._cache_get(key)
            if cached is not None:
                logger.info("Cache hit for profile %s recommendations", profile_id)
                return cached

        profile = self._load_profile(profile_id)
        avoided = preferences.avoid_companies if preferences else []
        jobs = [
            self.normalizer.job(j)
            for j in self.store.list_candidate_jobs(
                filters, profile_id, self.max_candidates, exclude_companies=avoided
            )
        ]

        ranked = self._score_and_rank(profile, jobs, preferences)[:limit]
        logger.info(
            "Generated %d recommendations for profile %s from %d candidates",
            len(ranked), profile_id, len(jobs),
        )

        try:
            self.store.persist_recommendations(profile_id, ranked)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Failed to persist recommendations for {profile_id}: {e}"
            ) from e

        # Analytics summarize the stored set, which was just replaced
        self.cache.invalidate(analytics_key(profile_id))
        self._cache_set(key, ranked)
        return ranked

    def similar_jobs(
        self, job_id: str, profile_id: str, limit: int = 5
    ) -> list[ScoredRecommendation]:
        """Score postings related to ``job_id`` (title words, company or type)."""
        key = f"similar_jobs:{job_id}:{profile_id}:{limit}"
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        target = self.store.get_job(job_id)
        if target is None:
            raise NotFoundError(f"Job {job_id} not found")
        profile = self._load_profile(profile_id)
        target_norm = self.normalizer.job(target)

        related = [
            job for job in (
                self.normalizer.job(j)
                for j in self.store.list_candidate_jobs(None, profile_id, self.max_candidates)
            )
            if is_related_job(target_norm, job)
        ][:SIMILAR_JOBS_POOL]

        result = self._score_and_rank(profile, related, None)[:limit]
        self._cache_set(key, result)
        return result

    def invalidate(self, profile_id: str) -> int:
        return self.cache.invalidate_profile(profile_id)

    def refresh(self, profile_id: str) -> None:
        """Forget cached and stored recommendations for a profile."""
        self.invalidate(profile_id)
        self.store.delete_recommendations(profile_id)
        logger.info("Refreshed recommendations for profile %s", profile_id)

    # --- scoring ----------------------------------------------------------

    def _load_profile(self, profile_id: str) -> NormalizedProfile:
        profile = self.store.get_profile(profile_id)
        if profile is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        return self.normalizer.profile(profile)

    def _score_and_rank(
        self,
        profile: NormalizedProfile,
        jobs: list[NormalizedJob],
        preferences: RecommendationPreferences | None,
    ) -> list[ScoredRecommendation]:
        if not jobs:
            return []
        learned = self.model_service.predict(profile, jobs) if self.model_service else None
        learned = learned or {}
        now = self.normalizer.now()

        def score(job: NormalizedJob) -> ScoredRecommendation:
            return self.score_candidate(profile, job, learned.get(job.id), preferences, now)

        scored: list[ScoredRecommendation] = []
        if self.executor is None:
            for job in jobs:
                rec = self._safe(score, job)
                if rec is not None:
                    scored.append(rec)
        else:
            futures = [(job, self.executor.submit(score, job)) for job in jobs]
            for job, future in futures:
                try:
                    scored.append(future.result())
                except Exception as e:
                    logger.warning("Skipping job %s: scoring failed: %s", job.id, e)

        eligible = [r for r in scored if r.overall_score >= self.min_relevance_score]
        return rank(eligible)

    @staticmethod
    def _safe(
        score: Callable[[NormalizedJob], ScoredRecommendation], job: NormalizedJob
    ) -> ScoredRecommendation | None:
        try:
            return score(job)
        except Exception as e:
            logger.warning("Skipping job %s: scoring failed: %s", job.id, e)
            return None

    def score_candidate(
        self,
        profile: NormalizedProfile,
        job: NormalizedJob,
        learned_score: float | None,
        preferences: RecommendationPreferences | None,
        now: datetime,
    ) -> ScoredRecommendation:
        scores = scorers.score_pair(profile, job, self.similarity_threshold)
        overall = apply_preferences(scorers.mean_score(scores), scores, job, preferences)
        if learned_score is not None:
            w = self.learned_score_weight
            overall = max(0.0, min(1.0, (1 - w) * overall + w * learned_score))

        return ScoredRecommendation(
            id=f"{profile.id}-{job.id}",
            profile_id=profile.id,
            job_id=job.id,
            job_title=job.display_title,
            company_name=job.company_name,
            industry=job.industry,
            overall_score=overall,
            match_percentage=round(overall * 100),
            scores=scores,
            learned_score=learned_score,
            reasons=scorers.reasons_for(profile, job, learned_score, self.similarity_threshold),
            concerns=scorers.concerns_for(scores),
            insights=scorers.insights_for(scores),
            confidence=scorers.confidence_tier(overall),
            created_at=now,
            updated_at=now,
        )

    # --- cache ------------------------------------------------------------

    def _cache_get(self, key: str) -> list[ScoredRecommendation] | None:
        raw = self.cache.get(key)
        if raw is None:
            return None
        return _recommendation_list.validate_json(raw)

    def _cache_set(self, key: str, value: list[ScoredRecommendation]) -> None:
        try:
            payload = _recommendation_list.dump_json(value).decode("utf-8")
            self.cache.set(key, payload, self.cache_ttl_seconds)
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)
