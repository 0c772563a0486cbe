"""Recommendation service: the operations the platform calls.

    recommend        ranked, cached, persisted recommendations for a profile
    similar_jobs     recommendations related to one posting
    record_feedback  append feedback, clear the profile's cache
    get_analytics    summary of the stored recommendation set
    refresh          drop cached and stored recommendations
    train            fit and activate a new engagement model
    evaluate         score the active model against outcome records

``create_service`` wires every collaborator from ``Settings``; tests build
a service around an ``InMemoryStore`` the same way.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor
from datetime import datetime
from typing import Any

from config import Settings, settings as default_settings
from models.entities import FeedbackType, OutcomeRecord
from models.requests import RecommendationFilters, RecommendationPreferences, TrainingConfig
from models.responses import (
    ModelEvaluation,
    RecommendationAnalytics,
    ScoredRecommendation,
    TrainingMetrics,
)
from services.analytics import AnalyticsService
from services.cache import CacheSweeper, RecommendationCache
from services.feedback import FeedbackRecorder
from services.normalizer import Normalizer, utc_now
from services.pipeline.engagement_model import EngagementModelService
from services.pipeline.model_store import ModelRepository
from services.pipeline.orchestrator import RecommendationEngine
from services.store import RecommendationStore
from services.training.trainer import EngagementTrainer

logger = logging.getLogger(__name__)


class RecommendationService:
    def __init__(
        self,
        engine: RecommendationEngine,
        feedback: FeedbackRecorder,
        analytics: AnalyticsService,
        trainer: EngagementTrainer,
        model_service: EngagementModelService,
        sweeper: CacheSweeper | None = None,
        similar_jobs_limit: int = 5,
    ) -> None:
        self.engine = engine
        self.feedback = feedback
        self.analytics = analytics
        self.trainer = trainer
        self.model_service = model_service
        self.sweeper = sweeper
        self.similar_jobs_limit = similar_jobs_limit

    def recommend(
        self,
        profile_id: str,
        limit: int = 10,
        filters: RecommendationFilters | None = None,
        preferences: RecommendationPreferences | None = None,
        force_refresh: bool = False,
    ) -> list[ScoredRecommendation]:
        return self.engine.recommend(profile_id, limit, filters, preferences, force_refresh)

    def similar_jobs(
        self, job_id: str, profile_id: str, limit: int | None = None
    ) -> list[ScoredRecommendation]:
        return self.engine.similar_jobs(job_id, profile_id, limit or self.similar_jobs_limit)

    def record_feedback(
        self,
        profile_id: str,
        job_id: str,
        feedback: FeedbackType,
        reasons: list[str] | None = None,
    ) -> None:
        self.feedback.record_feedback(profile_id, job_id, feedback, reasons)

    def get_analytics(self, profile_id: str) -> RecommendationAnalytics:
        return self.analytics.get_analytics(profile_id)

    def refresh(self, profile_id: str) -> None:
        self.engine.refresh(profile_id)

    def train(
        self,
        config: TrainingConfig | dict[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> TrainingMetrics:
        metrics = self.trainer.train(config, cancel_event)
        # Next scoring call loads the freshly activated version
        self.model_service.reload()
        return metrics

    def evaluate(self, records: list[OutcomeRecord] | None = None) -> ModelEvaluation:
        return self.trainer.evaluate(records)

    def start(self) -> None:
        if self.sweeper is not None:
            self.sweeper.start()

    def close(self) -> None:
        if self.sweeper is not None:
            self.sweeper.stop()


def create_service(
    store: RecommendationStore,
    config: Settings | None = None,
    clock: Callable[[], datetime] = utc_now,
    cache: RecommendationCache | None = None,
    executor: Executor | None = None,
) -> RecommendationService:
    cfg = config or default_settings
    if cache is None:
        cache = RecommendationCache(maxsize=cfg.cache_max_entries)
    normalizer = Normalizer(clock)
    repository = ModelRepository(cfg.model_dir)
    model_service = EngagementModelService(repository)

    engine = RecommendationEngine(
        store,
        cache,
        model_service=model_service,
        normalizer=normalizer,
        cache_ttl_seconds=cfg.cache_ttl_seconds,
        max_candidates=cfg.max_candidates,
        min_relevance_score=cfg.min_relevance_score,
        similarity_threshold=cfg.similarity_threshold,
        learned_score_weight=cfg.learned_score_weight,
        executor=executor,
    )
    trainer = EngagementTrainer(
        store,
        repository,
        report_dir=cfg.report_dir,
        normalizer=normalizer,
        min_records=cfg.min_training_records,
        synthetic_count=cfg.synthetic_sample_count,
        clock=clock,
    )
    service = RecommendationService(
        engine=engine,
        feedback=FeedbackRecorder(store, cache, clock),
        analytics=AnalyticsService(store, cache, cfg.analytics_cache_ttl_seconds),
        trainer=trainer,
        model_service=model_service,
        sweeper=CacheSweeper(cache, cfg.cache_sweep_interval_seconds),
        similar_jobs_limit=cfg.similar_jobs_limit,
    )
    logger.info("Recommendation service ready (model dir %s)", cfg.model_dir)
    return service
