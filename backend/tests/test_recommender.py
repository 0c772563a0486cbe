"""End-to-end tests for the recommendation service."""

from datetime import datetime, timezone

import pytest

from config import Settings
from models.entities import OutcomeRecord
from services.cache import RecommendationCache
from services.errors import NotFoundError
from services.recommender import create_service

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
SMALL = {"epochs": 3, "batch_size": 8, "hidden_units": [8, 4], "seed": 3}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        model_dir=str(tmp_path / "models"),
        report_dir=str(tmp_path / "reports"),
        synthetic_sample_count=20,
        similar_jobs_limit=2,
    )


@pytest.fixture
def cache():
    return RecommendationCache(clock=lambda: 0.0)


@pytest.fixture
def service(store, settings, cache):
    svc = create_service(store, settings, clock=lambda: NOW, cache=cache)
    yield svc
    svc.close()


class TestRecommendationFlow:
    def test_recommend_without_model(self, service):
        recs = service.recommend("p1")
        assert [r.job_id for r in recs] == ["j1", "j2", "j3"]
        assert all(r.learned_score is None for r in recs)

    def test_feedback_invalidates_cached_results(self, service, store, cache):
        service.recommend("p1")
        assert service.get_analytics("p1").engagement.viewed == 0
        assert len(cache) == 2

        service.record_feedback("p1", "j1", "liked")
        assert len(cache) == 0
        assert service.get_analytics("p1").engagement.liked == 1
        assert service.get_analytics("p1").engagement.viewed == 1

    def test_feedback_needs_a_recommendation(self, service):
        with pytest.raises(NotFoundError):
            service.record_feedback("p1", "j1", "liked")

    def test_refresh(self, service, store, cache):
        service.recommend("p1")
        service.refresh("p1")
        assert store.list_recommendations("p1") == []
        assert len(cache) == 0

    def test_similar_jobs_default_limit(self, service, store, make_job):
        store.add_job(make_job("j4", title="Frontend Engineer", company="Hooli", job_type="CONTRACT"))
        store.add_job(make_job("j5", title="React Frontend Developer", company="Hooli", job_type="CONTRACT"))
        store.add_job(make_job("j6", title="UI Developer", company="Globex", job_type="CONTRACT"))
        recs = service.similar_jobs("j1", "p1")
        assert len(recs) == 2
        assert "j1" not in [r.job_id for r in recs]

    def test_lifecycle(self, service):
        service.start()
        assert service.sweeper.running
        service.close()
        assert not service.sweeper.running


@pytest.mark.slow
class TestTrainingFlow:
    def setup_method(self):
        self.records = []

    def _add_outcomes(self, store, make_profile, make_job):
        profile = make_profile()
        for job_id, kwargs in [("j1", {"hired": True}), ("j2", {"interviewed": True}), ("j3", {})]:
            record = OutcomeRecord(profile=profile, job=make_job(job_id), **kwargs)
            store.add_outcome_record(record)
            self.records.append(record)

    def test_train_activates_model_for_scoring(self, service, store, make_profile, make_job):
        self._add_outcomes(store, make_profile, make_job)
        assert service.recommend("p1") == []

        metrics = service.train(SMALL)
        assert metrics.data_points == 23
        assert service.model_service.version == metrics.model_version

        # Applied jobs leave the candidate pool; add a fresh one to score
        store.add_job(make_job("j7", created_at=NOW))
        recs = service.recommend("p1", force_refresh=True)
        assert [r.job_id for r in recs] == ["j7"]
        assert recs[0].learned_score is not None
        assert 0.0 <= recs[0].overall_score <= 1.0

    def test_evaluate(self, service, store, make_profile, make_job):
        self._add_outcomes(store, make_profile, make_job)
        with pytest.raises(NotFoundError):
            service.evaluate()
        service.train(SMALL)
        evaluation = service.evaluate(self.records[:2])
        assert evaluation.samples == 2
