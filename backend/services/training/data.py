"""Training-set collection: outcome records, feedback events, synthetic pairs.

Real records always come first and are never dropped. When fewer than
``min_records`` exist, synthetic (profile, job) pairs sampled from the
store are appended, labelled by skill overlap plus bounded noise.
"""

import logging

import numpy as np

from models.entities import FeedbackEvent, OutcomeRecord
from models.schemas.normalized import NormalizedJob, NormalizedProfile
from models.schemas.training_example import TrainingExample
from services.errors import InsufficientDataError
from services.normalizer import Normalizer
from services.store import RecommendationStore

logger = logging.getLogger(__name__)

HIRED_SCORE = 1.0
INTERVIEWED_SCORE = 0.8
APPLIED_SCORE = 0.6

EMPTY_OVERLAP_SCORE = 0.3
MAX_NOISE = 0.3
SAMPLE_POOL_SIZE = 10


def engagement_score(record: OutcomeRecord) -> float:
    if record.hired:
        return HIRED_SCORE
    if record.interviewed:
        return INTERVIEWED_SCORE
    if record.applied:
        return APPLIED_SCORE
    return 0.0


def skill_overlap(profile: NormalizedProfile, job: NormalizedJob) -> float:
    """Share of matched tokens over the larger of the two skill lists."""
    if not profile.skills or not job.requirements:
        return EMPTY_OVERLAP_SCORE
    matched = sum(
        1 for skill in profile.skills
        if any(skill in req or req in skill for req in job.requirements)
    )
    return matched / max(len(profile.skills), len(job.requirements))


def feedback_records(
    events: list[FeedbackEvent],
    store: RecommendationStore,
    known_pairs: set[tuple[str, str]],
) -> list[OutcomeRecord]:
    """Turn outcome-bearing feedback into records; liked/saved carry no outcome."""
    records: list[OutcomeRecord] = []
    seen = set(known_pairs)
    for event in events:
        if event.feedback not in ("applied", "rejected", "disliked"):
            continue
        pair = (event.profile_id, event.job_id)
        if pair in seen:
            continue
        profile = store.get_profile(event.profile_id)
        job = store.get_job(event.job_id)
        if profile is None or job is None:
            logger.debug("Skipping feedback for missing profile/job %s", pair)
            continue
        seen.add(pair)
        records.append(OutcomeRecord(
            profile=profile,
            job=job,
            applied=event.feedback == "applied",
        ))
    return records


class TrainingDataCollector:
    def __init__(
        self,
        store: RecommendationStore,
        normalizer: Normalizer | None = None,
        min_records: int = 10,
        synthetic_count: int = 50,
    ) -> None:
        self.store = store
        self.normalizer = normalizer or Normalizer()
        self.min_records = min_records
        self.synthetic_count = synthetic_count

    def collect(self, rng: np.random.Generator | None = None) -> list[TrainingExample]:
        rng = rng or np.random.default_rng()

        records = self.store.list_outcome_records()
        known = {(r.profile.id, r.job.id) for r in records}
        from_feedback = feedback_records(self.store.list_feedback_events(), self.store, known)
        if from_feedback:
            logger.info("Added %d outcome records from feedback", len(from_feedback))
        records = records + from_feedback

        examples = [
            TrainingExample(
                profile=self.normalizer.profile(r.profile),
                job=self.normalizer.job(r.job),
                engagement_score=engagement_score(r),
            )
            for r in records
        ]
        logger.info("Collected %d real training records", len(examples))

        if len(examples) < self.min_records:
            logger.warning(
                "Only %d training records (< %d), adding %d synthetic pairs",
                len(examples), self.min_records, self.synthetic_count,
            )
            examples.extend(self._synthesize(rng))

        if not examples:
            raise InsufficientDataError(
                "No outcome records and no profiles/jobs to synthesize from"
            )
        return examples

    def _synthesize(self, rng: np.random.Generator) -> list[TrainingExample]:
        profiles = [self.normalizer.profile(p) for p in self.store.list_profiles(SAMPLE_POOL_SIZE)]
        jobs = [self.normalizer.job(j) for j in self.store.list_jobs(SAMPLE_POOL_SIZE)]
        if not profiles or not jobs:
            logger.warning("No profiles or jobs available for synthetic augmentation")
            return []

        synthetic = []
        for _ in range(self.synthetic_count):
            profile = profiles[rng.integers(len(profiles))]
            job = jobs[rng.integers(len(jobs))]
            score = min(1.0, skill_overlap(profile, job) + rng.uniform(0, MAX_NOISE))
            synthetic.append(TrainingExample(
                profile=profile, job=job, engagement_score=score, synthetic=True,
            ))
        return synthetic
