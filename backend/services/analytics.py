"""Per-profile recommendation analytics, computed from the stored set."""

import logging
from collections import Counter, defaultdict
from datetime import date

from models.responses import (
    EngagementSummary,
    RecommendationAnalytics,
    ScoredRecommendation,
    TrendPoint,
)
from services.cache import RecommendationCache, analytics_key
from services.store import RecommendationStore

logger = logging.getLogger(__name__)

TOP_N = 10
MAX_TREND_POINTS = 30
SKILLS_REASON_PREFIX = "Matching skills: "
MORE_SUFFIX = " and more"


def skills_from_reasons(reasons: list[str]) -> list[str]:
    """Skill names listed in a "Matching skills: a, b and more" reason."""
    skills: list[str] = []
    for reason in reasons:
        if not reason.startswith(SKILLS_REASON_PREFIX):
            continue
        listed = reason[len(SKILLS_REASON_PREFIX):]
        if listed.endswith(MORE_SUFFIX):
            listed = listed[: -len(MORE_SUFFIX)]
        skills.extend(s.strip() for s in listed.split(",") if s.strip())
    return skills


def _top(counter: Counter) -> list[str]:
    return [name for name, _ in counter.most_common(TOP_N)]


def trends(recommendations: list[ScoredRecommendation]) -> list[TrendPoint]:
    by_day: dict[date, list[float]] = defaultdict(list)
    for rec in recommendations:
        by_day[rec.created_at.date()].append(rec.overall_score)
    return [
        TrendPoint(day=day, count=len(scores), average_score=sum(scores) / len(scores))
        for day, scores in sorted(by_day.items(), reverse=True)[:MAX_TREND_POINTS]
    ]


def engagement(
    recommendations: list[ScoredRecommendation], applications: int
) -> EngagementSummary:
    summary = EngagementSummary(applied=applications)
    for rec in recommendations:
        if rec.feedback_history:
            summary.viewed += 1
        for entry in rec.feedback_history:
            if entry.feedback == "applied":
                summary.applied += 1
            elif entry.feedback == "saved":
                summary.saved += 1
            elif entry.feedback == "rejected":
                summary.rejected += 1
            elif entry.feedback == "liked":
                summary.liked += 1
            elif entry.feedback == "disliked":
                summary.disliked += 1
    return summary


class AnalyticsService:
    def __init__(
        self,
        store: RecommendationStore,
        cache: RecommendationCache,
        cache_ttl_seconds: float = 3600,
    ) -> None:
        self.store = store
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds

    def get_analytics(self, profile_id: str) -> RecommendationAnalytics:
        key = analytics_key(profile_id)
        cached = self.cache.get(key)
        if cached is not None:
            return RecommendationAnalytics.model_validate_json(cached)

        recs = self.store.list_recommendations(profile_id)
        skill_counts: Counter = Counter()
        for rec in recs:
            skill_counts.update(skills_from_reasons(rec.reasons))

        analytics = RecommendationAnalytics(
            total_recommendations=len(recs),
            average_score=sum(r.overall_score for r in recs) / len(recs) if recs else 0.0,
            top_skills=_top(skill_counts),
            top_companies=_top(Counter(r.company_name for r in recs if r.company_name)),
            top_industries=_top(Counter(r.industry for r in recs if r.industry)),
            trends=trends(recs),
            engagement=engagement(recs, self.store.count_applications(profile_id)),
        )

        try:
            self.cache.set(key, analytics.model_dump_json(), self.cache_ttl_seconds)
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)
        return analytics
