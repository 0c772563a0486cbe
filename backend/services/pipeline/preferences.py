"""Preference-weighted adjustments to a candidate's overall score.

Every adjustment is a weighted blend or a bounded nudge, clamped to
[0, 1] after each step. Dials without a concrete signal yet
(work-life balance, growth potential, learning opportunities, culture
keywords, preferred benefits) are validated on the request but leave
the score untouched.
"""

from models.requests import RecommendationPreferences
from models.responses import SubScores
from models.schemas.normalized import NormalizedJob
from services.pipeline.scorers import environment_match
from services.similarity import string_similarity

SKILL_PRIORITY_WEIGHT = 0.3
LOCATION_PRIORITY_WEIGHT = 0.2
ENVIRONMENT_WEIGHT = 0.1
INDUSTRY_NUDGE = 0.1
INDUSTRY_PREFERRED = 1.0
INDUSTRY_OTHER = 0.3
GOAL_NUDGE = 0.2
NEUTRAL = 0.5
SALARY_IMPORTANCE_WEIGHT = 0.1


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _blend(overall: float, signal: float, weight: float) -> float:
    return _clamp((1 - weight) * overall + weight * signal)


def industry_preference_match(job: NormalizedJob, preferred: list[str]) -> float:
    industry = job.industry
    for wanted in preferred:
        wanted = wanted.strip().lower()
        if industry and wanted and (wanted in industry or industry in wanted):
            return INDUSTRY_PREFERRED
    return INDUSTRY_OTHER


def goal_alignment(job: NormalizedJob, goals: list[str]) -> float:
    """Best similarity between a goal and the job title; never below neutral."""
    best = 0.0
    for goal in goals:
        goal = goal.strip().lower()
        if not goal:
            continue
        if goal in job.title or (job.title and job.title in goal):
            return 1.0
        best = max(best, string_similarity(goal, job.title))
    return max(best, NEUTRAL)


def apply_preferences(
    overall: float,
    scores: SubScores,
    job: NormalizedJob,
    preferences: RecommendationPreferences | None,
) -> float:
    if preferences is None:
        return _clamp(overall)

    if preferences.prioritize_skill_match:
        overall = _blend(overall, scores.skills_match, SKILL_PRIORITY_WEIGHT)

    if preferences.prioritize_location:
        overall = _blend(overall, scores.location_match, LOCATION_PRIORITY_WEIGHT)

    env = preferences.work_environment
    if env and env != "any":
        overall = _blend(overall, environment_match(env, job), ENVIRONMENT_WEIGHT)

    if preferences.industry_preferences:
        match = industry_preference_match(job, preferences.industry_preferences)
        overall = _clamp(overall + INDUSTRY_NUDGE * (match - NEUTRAL))

    goals = preferences.career_goals + preferences.role_types
    if goals:
        overall = _clamp(overall + GOAL_NUDGE * (goal_alignment(job, goals) - NEUTRAL))

    if preferences.salary_importance is not None:
        weight = preferences.salary_importance / 10 * SALARY_IMPORTANCE_WEIGHT
        overall = _blend(overall, scores.salary_match, weight)

    return _clamp(overall)
