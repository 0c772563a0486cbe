"""Tests for the outcome training pipeline."""

import json
import threading
from datetime import datetime, timezone

import pytest

from models.entities import OutcomeRecord
from services.errors import (
    InvalidConfigurationError,
    NotFoundError,
    PersistenceError,
    TrainingCancelledError,
)
from services.normalizer import Normalizer
from services.pipeline.model_store import ModelRepository
from services.training.trainer import EngagementTrainer, parse_config

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
VERSION = "20250601120000000000"
SMALL = {"epochs": 3, "batch_size": 8, "hidden_units": [8, 4], "seed": 1}


@pytest.fixture
def trained_store(store, make_profile, make_job):
    profile = make_profile()
    store.add_outcome_record(OutcomeRecord(profile=profile, job=make_job("j1"), hired=True))
    store.add_outcome_record(OutcomeRecord(profile=profile, job=make_job("j2"), interviewed=True))
    store.add_outcome_record(OutcomeRecord(profile=profile, job=make_job("j3")))
    return store


def _trainer(store, tmp_path, report_dir=None) -> EngagementTrainer:
    return EngagementTrainer(
        store,
        ModelRepository(tmp_path / "models"),
        report_dir=report_dir or tmp_path / "reports",
        normalizer=Normalizer(lambda: NOW),
        min_records=10,
        synthetic_count=20,
        clock=lambda: NOW,
    )


@pytest.mark.slow
class TestTrain:
    def test_sparse_records_train_and_activate(self, trained_store, tmp_path):
        trainer = _trainer(trained_store, tmp_path)
        result = trainer.train(SMALL)

        assert result.data_points == 23
        assert result.synthetic_points == 20
        assert result.epochs == 3
        assert result.feature_size > 0
        assert 0.0 <= result.accuracy <= 1.0
        assert 0.0 <= result.validation_accuracy <= 1.0
        assert result.model_version == VERSION
        assert trainer.repository.active_version() == VERSION

        metadata = trainer.repository.load_active_model().metadata
        assert metadata.feature_size == result.feature_size
        assert metadata.hidden_units == [8, 4]
        assert "javascript" in metadata.skills_vocab

    def test_report_written(self, trained_store, tmp_path):
        result = _trainer(trained_store, tmp_path).train(SMALL)
        report_path = tmp_path / "reports" / f"training_report_{result.model_version}.json"
        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["metrics"]["data_points"] == 23
        assert report["config"]["epochs"] == 3
        assert report["performance"]["data_points"] == 23
        assert report["timestamp"] == NOW.isoformat()

    def test_same_timestamp_gets_new_version(self, trained_store, tmp_path):
        trainer = _trainer(trained_store, tmp_path)
        trainer.train(SMALL)
        second = trainer.train(SMALL)
        assert second.model_version == f"{VERSION}.1"
        assert trainer.repository.active_version() == second.model_version

    def test_report_failure_keeps_previous_model(self, trained_store, tmp_path):
        _trainer(trained_store, tmp_path).train(SMALL)
        blocked = tmp_path / "blocked"
        blocked.write_text("not a directory", encoding="utf-8")
        trainer = _trainer(trained_store, tmp_path, report_dir=blocked)
        with pytest.raises(PersistenceError):
            trainer.train(SMALL)
        assert trainer.repository.active_version() == VERSION

    def test_evaluate_active_model(self, trained_store, tmp_path):
        trainer = _trainer(trained_store, tmp_path)
        trainer.train(SMALL)
        evaluation = trainer.evaluate()
        assert evaluation.samples == 3
        assert 0.0 <= evaluation.accuracy <= 1.0
        assert evaluation.rmse >= 0.0
        assert -1.0 <= evaluation.spearman <= 1.0
        assert trainer.evaluate([]).samples == 0


class TestTrainFailures:
    def test_cancelled_before_start(self, trained_store, tmp_path):
        cancel = threading.Event()
        cancel.set()
        trainer = _trainer(trained_store, tmp_path)
        with pytest.raises(TrainingCancelledError):
            trainer.train(SMALL, cancel_event=cancel)
        assert trainer.repository.active_version() is None
        assert not (tmp_path / "reports").exists()

    def test_invalid_config(self, trained_store, tmp_path):
        trainer = _trainer(trained_store, tmp_path)
        with pytest.raises(InvalidConfigurationError):
            trainer.train({"epochs": 0})
        with pytest.raises(InvalidConfigurationError):
            trainer.train({"hidden_units": [64, 32, 16, 8]})

    def test_evaluate_without_model(self, trained_store, tmp_path):
        with pytest.raises(NotFoundError):
            _trainer(trained_store, tmp_path).evaluate()


def test_parse_config_defaults():
    cfg = parse_config(None)
    assert cfg.epochs == 50
    assert cfg.batch_size == 32
    assert cfg.hidden_units == [128, 64, 32]
    assert parse_config({"learning_rate": 0.01}).learning_rate == 0.01
