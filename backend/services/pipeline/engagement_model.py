"""Learned engagement signal for the scoring engine.

Loads the active model lazily on first use. When no usable model exists,
or prediction fails, callers get ``None`` and score on rules alone.
"""

import logging
import threading

import numpy as np
import torch

from models.schemas.normalized import NormalizedJob, NormalizedProfile
from models.schemas.trained_model import TrainedModel
from services.pipeline.model_store import ModelRepository
from services.training.features import FeatureEncoder, Vocabularies

logger = logging.getLogger(__name__)


def encoder_for(model: TrainedModel) -> FeatureEncoder:
    meta = model.metadata
    return FeatureEncoder(Vocabularies(
        skills=list(meta.skills_vocab),
        titles=list(meta.titles_vocab),
        industries=list(meta.industries_vocab),
    ))


def predict_scores(
    model: TrainedModel,
    pairs: list[tuple[NormalizedProfile, NormalizedJob]],
) -> np.ndarray:
    """Run the network over (profile, job) pairs; returns values in [0, 1]."""
    if not pairs:
        return np.zeros(0, dtype=np.float32)
    encoder = encoder_for(model)
    if encoder.feature_size != model.metadata.feature_size:
        raise ValueError(
            f"Feature width {encoder.feature_size} != persisted {model.metadata.feature_size}"
        )
    features = np.stack([encoder.encode(p, j) for p, j in pairs])
    network = model.network
    network.eval()
    with torch.no_grad():
        output = network(torch.from_numpy(features))
    return np.clip(output.numpy().ravel(), 0.0, 1.0)


class EngagementModelService:
    def __init__(self, repository: ModelRepository) -> None:
        self.repository = repository
        self._model: TrainedModel | None = None
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def available(self) -> bool:
        self.ensure_loaded()
        return self._model is not None

    @property
    def version(self) -> str | None:
        self.ensure_loaded()
        return self._model.metadata.version if self._model is not None else None

    def load(self) -> None:
        self._model = self.repository.load_active_model()
        if self._model is None:
            logger.info("No engagement model available, using rule-based scoring only")
        else:
            logger.info("Engagement model %s loaded", self._model.metadata.version)

    def ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if not self._loaded:
                self.load()
                self._loaded = True

    def reload(self) -> None:
        """Drop the cached model so the next call picks up the active version."""
        with self._lock:
            self._model = None
            self._loaded = False

    def predict(
        self, profile: NormalizedProfile, jobs: list[NormalizedJob]
    ) -> dict[str, float] | None:
        """Learned score per job id, or ``None`` when the signal is unavailable."""
        self.ensure_loaded()
        model = self._model
        if model is None or not jobs:
            return None
        try:
            scores = predict_scores(model, [(profile, job) for job in jobs])
        except (RuntimeError, ValueError) as e:
            logger.warning("Engagement model prediction failed, falling back to rules: %s", e)
            return None
        return {job.id: float(score) for job, score in zip(jobs, scores)}
