"""Rule-based sub-scores for a (profile, job) pair.

Eight independent factors, each in [0, 1]:

    skills      share of job requirements fuzzy-matched by a profile skill
    experience  months in relevant roles / 24, capped; 0.3 with none relevant
    education   best (degree, field, grade) mean over relevant entries; 0.5 default
    location    remote/city 1.0, state 0.8, country 0.6, else 0.3; 0.5 unknown
    salary      0.7 when the posting lists a salary, else 0.5
    company     0.6 neutral
    industry    0.9 prior experience, 0.7 related education, else 0.5
    culture     0.6 neutral

Plus the explanation helpers (reasons, concerns, insights, confidence).
"""

import logging

from models.responses import ConfidenceTier, SubScores
from models.schemas.normalized import (
    NormalizedEducation,
    NormalizedExperience,
    NormalizedJob,
    NormalizedProfile,
)
from services.similarity import DEFAULT_THRESHOLD, is_similar, string_similarity

logger = logging.getLogger(__name__)

NO_EXPERIENCE_SCORE = 0.3
EXPERIENCE_SATURATION_MONTHS = 24
TITLE_RELEVANCE_THRESHOLD = 0.5
EXPERIENCE_SKILL_THRESHOLD = 0.7

DEFAULT_EDUCATION_SCORE = 0.5
DEFAULT_DEGREE_SCORE = 0.7
DEFAULT_GRADE_SCORE = 0.7
GRADE_SCALE = 4.0
DEGREE_SCORES: list[tuple[str, float]] = [
    ("phd", 1.0),
    ("doctorate", 1.0),
    ("master", 0.9),
    ("mba", 0.9),
    ("bachelor", 0.8),
    ("associate", 0.6),
    ("certificate", 0.5),
    ("diploma", 0.5),
]

UNKNOWN_LOCATION_SCORE = 0.5
REMOTE_MARKERS = ("remote", "anywhere")

SALARY_LISTED_SCORE = 0.7
SALARY_UNLISTED_SCORE = 0.5
COMPANY_SCORE = 0.6
CULTURE_SCORE = 0.6

INDUSTRY_UNKNOWN_SCORE = 0.5
INDUSTRY_EXPERIENCE_SCORE = 0.9
INDUSTRY_EDUCATION_SCORE = 0.7
FIELD_INDUSTRIES: dict[str, list[str]] = {
    "computer science": ["technology", "software", "it"],
    "business": ["finance", "consulting", "management"],
    "engineering": ["manufacturing", "automotive", "aerospace"],
    "marketing": ["advertising", "media", "retail"],
    "finance": ["banking", "investment", "insurance"],
}

# Employment type -> work modality
JOB_ENVIRONMENTS: dict[str, str] = {
    "REMOTE": "remote",
    "ONSITE": "onsite",
    "HYBRID": "hybrid",
    "FULL_TIME": "onsite",
    "PART_TIME": "hybrid",
    "CONTRACT": "remote",
}
ENVIRONMENT_MISMATCH_SCORE = 0.3

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.6
CONFIDENCE_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}

MAX_LISTED_SKILLS = 3


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


# --- individual factors -------------------------------------------------


def skill_matches(skill: str, requirement: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
    """A skill covers a requirement by containment either way or by fuzzy match.

    Containment lets a short skill such as ``python`` satisfy free-text
    requirements like ``python programming``.
    """
    if not skill or not requirement:
        return False
    if skill in requirement or requirement in skill:
        return True
    return is_similar(skill, requirement, threshold)


def matched_requirements(
    profile: NormalizedProfile, job: NormalizedJob, threshold: float = DEFAULT_THRESHOLD
) -> list[str]:
    """Profile skill display names that cover at least one requirement."""
    return [
        name for skill, name in zip(profile.skills, profile.skill_names)
        if any(skill_matches(skill, req, threshold) for req in job.requirements)
    ]


def skills_match(
    profile: NormalizedProfile, job: NormalizedJob, threshold: float = DEFAULT_THRESHOLD
) -> float:
    if not profile.skills or not job.requirements:
        return 0.0
    matched = sum(
        1 for req in job.requirements
        if any(skill_matches(skill, req, threshold) for skill in profile.skills)
    )
    return matched / len(job.requirements)


def is_relevant_experience(experience: NormalizedExperience, job: NormalizedJob) -> bool:
    if string_similarity(experience.title, job.title) > TITLE_RELEVANCE_THRESHOLD:
        return True
    return any(
        string_similarity(skill, req) > EXPERIENCE_SKILL_THRESHOLD
        for skill in experience.skills
        for req in job.requirements
    )


def experience_match(profile: NormalizedProfile, job: NormalizedJob) -> float:
    relevant = [e for e in profile.experiences if is_relevant_experience(e, job)]
    if not relevant:
        return NO_EXPERIENCE_SCORE
    months = sum(e.months for e in relevant)
    return min(months / EXPERIENCE_SATURATION_MONTHS, 1.0)


def degree_score(degree: str) -> float:
    for key, score in DEGREE_SCORES:
        if key in degree:
            return score
    return DEFAULT_DEGREE_SCORE


def field_relevance(field: str, job: NormalizedJob) -> float:
    if field and any(field in req or req in field for req in job.requirements):
        return 1.0
    return 0.5


def grade_score(education: NormalizedEducation) -> float:
    if not education.has_grade:
        return DEFAULT_GRADE_SCORE
    return _clamp(education.grade / GRADE_SCALE)


def is_relevant_education(education: NormalizedEducation, job: NormalizedJob) -> bool:
    return any(
        (education.field and education.field in req)
        or (education.degree and education.degree in req)
        for req in job.requirements
    )


def education_match(profile: NormalizedProfile, job: NormalizedJob) -> float:
    relevant = [e for e in profile.education if is_relevant_education(e, job)]
    if not relevant:
        return DEFAULT_EDUCATION_SCORE
    return max(
        (degree_score(e.degree) + field_relevance(e.field, job) + grade_score(e)) / 3
        for e in relevant
    )


def location_match(profile: NormalizedProfile, job: NormalizedJob) -> float:
    job_location = job.location
    if any(marker in job_location for marker in REMOTE_MARKERS):
        return 1.0
    loc = profile.location
    if loc.is_empty or not job_location:
        return UNKNOWN_LOCATION_SCORE
    if loc.city and loc.city in job_location:
        return 1.0
    if loc.state and loc.state in job_location:
        return 0.8
    if loc.country and loc.country in job_location:
        return 0.6
    return 0.3


def salary_match(profile: NormalizedProfile, job: NormalizedJob) -> float:
    return SALARY_LISTED_SCORE if job.salary is not None else SALARY_UNLISTED_SCORE


def company_match(profile: NormalizedProfile, job: NormalizedJob) -> float:
    return COMPANY_SCORE


def _field_serves_industry(field: str, industry: str) -> bool:
    for key, industries in FIELD_INDUSTRIES.items():
        if key in field:
            return any(ind in industry for ind in industries)
    return False


def industry_match(profile: NormalizedProfile, job: NormalizedJob) -> float:
    industry = job.industry
    if not industry:
        return INDUSTRY_UNKNOWN_SCORE
    for exp in profile.experiences:
        text = " ".join([exp.organization, exp.title, exp.description]).lower()
        if industry in text:
            return INDUSTRY_EXPERIENCE_SCORE
    if any(_field_serves_industry(e.field, industry) for e in profile.education):
        return INDUSTRY_EDUCATION_SCORE
    return INDUSTRY_UNKNOWN_SCORE


def culture_fit(profile: NormalizedProfile, job: NormalizedJob) -> float:
    return CULTURE_SCORE


def job_environment(job: NormalizedJob) -> str:
    if any(marker in job.location for marker in REMOTE_MARKERS):
        return "remote"
    return JOB_ENVIRONMENTS.get(job.type, "onsite")


def environment_match(preferred: str, job: NormalizedJob) -> float:
    return 1.0 if job_environment(job) == preferred else ENVIRONMENT_MISMATCH_SCORE


def score_pair(
    profile: NormalizedProfile, job: NormalizedJob, threshold: float = DEFAULT_THRESHOLD
) -> SubScores:
    return SubScores(
        skills_match=_clamp(skills_match(profile, job, threshold)),
        experience_match=_clamp(experience_match(profile, job)),
        education_match=_clamp(education_match(profile, job)),
        location_match=_clamp(location_match(profile, job)),
        salary_match=_clamp(salary_match(profile, job)),
        company_match=_clamp(company_match(profile, job)),
        industry_match=_clamp(industry_match(profile, job)),
        culture_fit=_clamp(culture_fit(profile, job)),
    )


def mean_score(scores: SubScores) -> float:
    values = list(scores.model_dump().values())
    return sum(values) / len(values)


# --- explanations -------------------------------------------------------


def confidence_tier(overall: float) -> ConfidenceTier:
    if overall > HIGH_CONFIDENCE:
        return "high"
    if overall > MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def concerns_for(scores: SubScores) -> list[str]:
    concerns = []
    if scores.skills_match < 0.5:
        concerns.append("Limited skill match with job requirements")
    if scores.experience_match < 0.4:
        concerns.append("May require more relevant experience")
    if scores.location_match < 0.5:
        concerns.append("Location may not be ideal")
    if scores.education_match < 0.5:
        concerns.append("Educational background may not fully align")
    return concerns


def insights_for(scores: SubScores) -> list[str]:
    insights = []
    if scores.skills_match > 0.8:
        insights.append("Strong technical skill alignment with job requirements")
    if scores.experience_match > 0.7:
        insights.append("Relevant work experience matches job expectations")
    if scores.education_match > 0.8:
        insights.append("Educational background strongly supports this role")
    if scores.location_match == 1.0:
        insights.append("Perfect location match or remote work opportunity")
    return insights


def reasons_for(
    profile: NormalizedProfile,
    job: NormalizedJob,
    learned_score: float | None,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[str]:
    reasons = []
    if learned_score is not None:
        if learned_score > HIGH_CONFIDENCE:
            reasons.append("Excellent overall match for your profile")
        elif learned_score > MEDIUM_CONFIDENCE:
            reasons.append("Good match for your qualifications")

    matching = matched_requirements(profile, job, threshold)
    if matching:
        listed = ", ".join(matching[:MAX_LISTED_SKILLS])
        more = " and more" if len(matching) > MAX_LISTED_SKILLS else ""
        reasons.append(f"Matching skills: {listed}{more}")

    relevant = [e for e in profile.experiences if is_relevant_experience(e, job)]
    if relevant:
        reasons.append(f"Relevant experience: {relevant[0].title}")

    return reasons or ["Basic profile compatibility"]
