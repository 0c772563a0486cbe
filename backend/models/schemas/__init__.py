"""Inter-stage pydantic contracts for normalization, training and scoring."""

from models.schemas.normalized import (
    NormalizedEducation,
    NormalizedExperience,
    NormalizedJob,
    NormalizedLocation,
    NormalizedProfile,
)
from models.schemas.trained_model import ModelMetadata, TrainedModel
from models.schemas.training_example import TrainingExample

__all__ = [
    "NormalizedEducation",
    "NormalizedExperience",
    "NormalizedJob",
    "NormalizedLocation",
    "NormalizedProfile",
    "ModelMetadata",
    "TrainedModel",
    "TrainingExample",
]
