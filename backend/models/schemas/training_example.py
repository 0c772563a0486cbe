"""Training pipeline input: one labelled (profile, job) pair."""

from pydantic import BaseModel

from models.schemas.normalized import NormalizedJob, NormalizedProfile


class TrainingExample(BaseModel):
    profile: NormalizedProfile
    job: NormalizedJob
    engagement_score: float = 0.0  # 0-1 label
    synthetic: bool = False
