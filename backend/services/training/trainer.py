"""Outcome training pipeline.

Flow:
    store outcome records + feedback events (+ synthetic pairs if sparse)
      -> vocabularies -> feature matrix
      -> feed-forward regressor, MSE, Adam, fixed epochs
      -> training report JSON, then versioned artifact + pointer swap

Cancellation is honoured up to the start of vectorization. After that the
run either completes or fails; a failure never changes the active model.
"""

import json
import logging
import math
import threading
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import numpy as np
import torch
import torch.nn as nn
from pydantic import ValidationError
from sklearn.model_selection import train_test_split

from models.entities import OutcomeRecord
from models.requests import TrainingConfig
from models.responses import ModelEvaluation, TrainingMetrics
from models.schemas.trained_model import ModelMetadata, TrainedModel
from services.errors import (
    InvalidConfigurationError,
    NotFoundError,
    PersistenceError,
    TrainingCancelledError,
)
from services.normalizer import Normalizer, utc_now
from services.pipeline.engagement_model import predict_scores
from services.pipeline.model_store import ModelRepository
from services.store import RecommendationStore
from services.training import metrics
from services.training.data import TrainingDataCollector, engagement_score
from services.training.features import FeatureEncoder, build_vocabularies
from services.training.network import EngagementRegressor

logger = logging.getLogger(__name__)

LOG_EVERY_EPOCHS = 10


def parse_config(config: TrainingConfig | dict[str, Any] | None) -> TrainingConfig:
    if config is None:
        return TrainingConfig()
    if isinstance(config, TrainingConfig):
        return config
    try:
        return TrainingConfig.model_validate(config)
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid training config: {e}") from e


def _check_cancelled(cancel_event: threading.Event | None, stage: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Training cancelled before %s", stage)
        raise TrainingCancelledError(f"Training cancelled before {stage}")


def _evaluate(
    network: nn.Module, loss_fn: nn.Module, x: torch.Tensor, y: torch.Tensor
) -> tuple[float, float]:
    network.eval()
    with torch.no_grad():
        preds = network(x)
        loss = float(loss_fn(preds, y))
    accuracy = metrics.threshold_accuracy(y.numpy(), preds.numpy())
    return loss, accuracy


class EngagementTrainer:
    def __init__(
        self,
        store: RecommendationStore,
        repository: ModelRepository,
        report_dir: str | Path = "training/reports",
        normalizer: Normalizer | None = None,
        min_records: int = 10,
        synthetic_count: int = 50,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.repository = repository
        self.report_dir = Path(report_dir)
        self.normalizer = normalizer or Normalizer(clock)
        self.collector = TrainingDataCollector(
            store, self.normalizer, min_records=min_records, synthetic_count=synthetic_count
        )
        self._clock = clock

    def train(
        self,
        config: TrainingConfig | dict[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> TrainingMetrics:
        cfg = parse_config(config)
        start = time.perf_counter()
        logger.info(
            "Training engagement model: epochs=%d batch=%d lr=%g hidden=%s",
            cfg.epochs, cfg.batch_size, cfg.learning_rate, cfg.hidden_units,
        )
        try:
            _check_cancelled(cancel_event, "data collection")
            rng = np.random.default_rng(cfg.seed)
            examples = self.collector.collect(rng)
            _check_cancelled(cancel_event, "vectorization")

            vocab = build_vocabularies(examples)
            encoder = FeatureEncoder(vocab)
            features, labels = encoder.encode_examples(examples)
            logger.info(
                "Vectorized %d examples: %d skills, %d titles, %d industries, width %d",
                len(examples), len(vocab.skills), len(vocab.titles),
                len(vocab.industries), encoder.feature_size,
            )

            network, history = self._fit(cfg, features, labels)

            created_at = self._clock()
            version = self._next_version(created_at)
            result = TrainingMetrics(
                accuracy=history["accuracy"],
                loss=history["loss"],
                validation_accuracy=history["validation_accuracy"],
                validation_loss=history["validation_loss"],
                training_time=time.perf_counter() - start,
                data_points=len(examples),
                epochs=cfg.epochs,
                model_version=version,
                feature_size=encoder.feature_size,
                synthetic_points=sum(1 for e in examples if e.synthetic),
            )
            metadata = ModelMetadata(
                version=version,
                created_at=created_at,
                skills_vocab=vocab.skills,
                titles_vocab=vocab.titles,
                industries_vocab=vocab.industries,
                feature_size=encoder.feature_size,
                hidden_units=cfg.hidden_units,
                dropout_rate=cfg.dropout_rate,
            )
            self._write_report(result, cfg, created_at)
            self.repository.save_model(TrainedModel(metadata=metadata, network=network))
        except TrainingCancelledError:
            raise
        except Exception:
            logger.exception("Engagement model training failed")
            raise

        logger.info(
            "Training complete: version=%s loss=%.4f acc=%.4f val_loss=%.4f val_acc=%.4f (%.1fs)",
            result.model_version, result.loss, result.accuracy,
            result.validation_loss, result.validation_accuracy, result.training_time,
        )
        return result

    def _next_version(self, created_at: datetime) -> str:
        version = created_at.strftime("%Y%m%d%H%M%S%f")
        existing = set(self.repository.list_versions())
        suffix = 1
        candidate = version
        while candidate in existing:
            candidate = f"{version}.{suffix}"
            suffix += 1
        return candidate

    def _fit(
        self, cfg: TrainingConfig, features: np.ndarray, labels: np.ndarray
    ) -> tuple[EngagementRegressor, dict[str, float]]:
        if cfg.seed is not None:
            torch.manual_seed(cfg.seed)

        n_val = math.ceil(len(features) * cfg.validation_split)
        if 0 < n_val < len(features):
            x_train, x_val, y_train, y_val = train_test_split(
                features, labels, test_size=cfg.validation_split, random_state=cfg.seed
            )
        else:
            x_train, x_val, y_train, y_val = features, features, labels, labels

        x_train_t, y_train_t = torch.from_numpy(x_train), torch.from_numpy(y_train)
        x_val_t, y_val_t = torch.from_numpy(x_val), torch.from_numpy(y_val)

        network = EngagementRegressor(features.shape[1], cfg.hidden_units, cfg.dropout_rate)
        optimizer = torch.optim.Adam(network.parameters(), lr=cfg.learning_rate)
        loss_fn = nn.MSELoss()
        n_train = len(x_train_t)

        history: dict[str, float] = {}
        for epoch in range(1, cfg.epochs + 1):
            network.train()
            order = torch.randperm(n_train)
            for i in range(0, n_train, cfg.batch_size):
                idx = order[i:i + cfg.batch_size]
                optimizer.zero_grad()
                loss = loss_fn(network(x_train_t[idx]), y_train_t[idx])
                loss.backward()
                optimizer.step()

            train_loss, train_acc = _evaluate(network, loss_fn, x_train_t, y_train_t)
            val_loss, val_acc = _evaluate(network, loss_fn, x_val_t, y_val_t)
            history = {
                "loss": train_loss,
                "accuracy": train_acc,
                "validation_loss": val_loss,
                "validation_accuracy": val_acc,
            }
            if epoch % LOG_EVERY_EPOCHS == 0 or epoch == cfg.epochs:
                logger.info(
                    "Epoch %d/%d: loss=%.4f acc=%.4f val_loss=%.4f val_acc=%.4f",
                    epoch, cfg.epochs, train_loss, train_acc, val_loss, val_acc,
                )

        network.eval()
        return network, history

    def _write_report(
        self, result: TrainingMetrics, cfg: TrainingConfig, created_at: datetime
    ) -> Path:
        report = {
            "timestamp": created_at.isoformat(),
            "metrics": result.model_dump(),
            "config": cfg.model_dump(),
            "performance": {
                "training_minutes": round(result.training_time / 60, 4),
                "data_points": result.data_points,
                "final_loss": result.loss,
            },
        }
        path = self.report_dir / f"training_report_{result.model_version}.json"
        try:
            self.report_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(report, indent=2), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to write training report {path}: {e}") from e
        logger.info("Training report written to %s", path)
        return path

    def evaluate(self, records: list[OutcomeRecord] | None = None) -> ModelEvaluation:
        """Score the active model against outcome records (default: all stored)."""
        model = self.repository.load_active_model()
        if model is None:
            raise NotFoundError("No trained engagement model available")
        if records is None:
            records = self.store.list_outcome_records()
        if not records:
            return ModelEvaluation()

        pairs = [
            (self.normalizer.profile(r.profile), self.normalizer.job(r.job))
            for r in records
        ]
        y_true = np.array([engagement_score(r) for r in records])
        y_pred = predict_scores(model, pairs)
        evaluation = ModelEvaluation(
            accuracy=metrics.threshold_accuracy(y_true, y_pred),
            rmse=metrics.rmse(y_true, y_pred),
            spearman=metrics.spearman_correlation(y_true, y_pred),
            samples=len(records),
        )
        logger.info(
            "Model %s evaluation: acc=%.4f rmse=%.4f spearman=%.4f (n=%d)",
            model.metadata.version, evaluation.accuracy, evaluation.rmse,
            evaluation.spearman, evaluation.samples,
        )
        return evaluation
