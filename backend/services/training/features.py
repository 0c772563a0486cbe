"""Vocabulary construction and feature vectors for the engagement model.

Feature layout (in order):
    skills block      one column per vocabulary skill; 1 + log1p(years the
                      skill was used across experiences) when the profile
                      lists it, else 0
    titles block      one column per vocabulary title; years spent under
                      that title, capped at 5
    education level   highest degree level / 5 (diploma=1 ... doctorate=5)
    industries block  one-hot of the job's industry
    summary scalars   experience count / 10, skill count / 20,
                      education count / 5, each capped at 1

Tokens missing from the vocabulary contribute nothing, so vectors built
at inference time always have the persisted width.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from models.schemas.normalized import NormalizedJob, NormalizedProfile
from models.schemas.training_example import TrainingExample
from services.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)

# Substring -> level; checked in order, first hit wins
EDUCATION_LEVELS: list[tuple[str, int]] = [
    ("high school", 1),
    ("diploma", 1),
    ("associate", 2),
    ("bachelor", 3),
    ("master", 4),
    ("mba", 4),
    ("phd", 5),
    ("doctorate", 5),
]
MAX_EDUCATION_LEVEL = 5
MAX_TITLE_YEARS = 5.0
SUMMARY_SATURATION = {"experiences": 10, "skills": 20, "education": 5}
N_SUMMARY_FEATURES = len(SUMMARY_SATURATION)


def education_level(degree: str) -> int:
    """Ordinal level of a degree string; unknown text counts as the lowest level."""
    degree = degree.lower()
    for key, level in EDUCATION_LEVELS:
        if key in degree:
            return level
    return 1


@dataclass
class Vocabularies:
    skills: list[str] = field(default_factory=list)
    titles: list[str] = field(default_factory=list)
    industries: list[str] = field(default_factory=list)

    @property
    def feature_size(self) -> int:
        return (
            len(self.skills)
            + len(self.titles)
            + 1
            + len(self.industries)
            + N_SUMMARY_FEATURES
        )


def build_vocabularies(examples: list[TrainingExample]) -> Vocabularies:
    skills: set[str] = set()
    titles: set[str] = set()
    industries: set[str] = set()
    for example in examples:
        skills.update(example.profile.skills)
        titles.update(exp.title for exp in example.profile.experiences if exp.title)
        if example.job.industry:
            industries.add(example.job.industry)
    return Vocabularies(
        skills=sorted(skills),
        titles=sorted(titles),
        industries=sorted(industries),
    )


class FeatureEncoder:
    def __init__(self, vocabularies: Vocabularies) -> None:
        self.vocabularies = vocabularies
        self._skill_index = {s: i for i, s in enumerate(vocabularies.skills)}
        self._title_index = {t: i for i, t in enumerate(vocabularies.titles)}
        self._industry_index = {s: i for i, s in enumerate(vocabularies.industries)}
        self.feature_size = vocabularies.feature_size

    def encode(self, profile: NormalizedProfile, job: NormalizedJob) -> np.ndarray:
        vocab = self.vocabularies
        n_skills, n_titles = len(vocab.skills), len(vocab.titles)
        vector = np.zeros(self.feature_size, dtype=np.float32)

        months_by_skill: dict[str, int] = {}
        for exp in profile.experiences:
            for skill in exp.skills:
                months_by_skill[skill] = months_by_skill.get(skill, 0) + exp.months
        for skill in profile.skills:
            idx = self._skill_index.get(skill)
            if idx is not None:
                vector[idx] = 1.0 + math.log1p(months_by_skill.get(skill, 0) / 12)

        offset = n_skills
        months_by_title: dict[str, int] = {}
        for exp in profile.experiences:
            months_by_title[exp.title] = months_by_title.get(exp.title, 0) + exp.months
        for title, months in months_by_title.items():
            idx = self._title_index.get(title)
            if idx is not None:
                vector[offset + idx] = min(months / 12, MAX_TITLE_YEARS)

        offset += n_titles
        levels = [education_level(edu.degree) for edu in profile.education]
        vector[offset] = max(levels, default=0) / MAX_EDUCATION_LEVEL

        offset += 1
        idx = self._industry_index.get(job.industry)
        if idx is not None:
            vector[offset + idx] = 1.0

        offset += len(vocab.industries)
        vector[offset] = min(len(profile.experiences) / SUMMARY_SATURATION["experiences"], 1.0)
        vector[offset + 1] = min(len(profile.skills) / SUMMARY_SATURATION["skills"], 1.0)
        vector[offset + 2] = min(len(profile.education) / SUMMARY_SATURATION["education"], 1.0)
        return vector

    def encode_examples(self, examples: list[TrainingExample]) -> tuple[np.ndarray, np.ndarray]:
        """Stack examples into ``(features, labels)`` float32 arrays."""
        if self.feature_size == 0:
            raise InvalidConfigurationError("Feature width is zero")
        if not examples:
            raise InvalidConfigurationError("No examples to vectorize")
        features = np.stack([self.encode(e.profile, e.job) for e in examples])
        labels = np.array([[e.engagement_score] for e in examples], dtype=np.float32)
        return features, labels
