"""Train the engagement model from historical application outcomes.

Loads profiles, jobs and outcome records from a JSON export, trains the
feed-forward regressor, activates the new version and evaluates it
against the real (non-synthetic) records.

Usage:
    python training/scripts/train_engagement.py [--config training/configs/engagement.yaml]
        [--data path/to/outcomes.json] [--epochs N] [--seed N]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def load_config(path: str) -> dict:
    with open(path) as f:
        return yaml.safe_load(f)


def main(
    config_path: str = "training/configs/engagement.yaml",
    data_path: str | None = None,
    epochs: int | None = None,
    seed: int | None = None,
) -> None:
    config = load_config(config_path)
    logger.info("Training engagement model with config: %s", config["model"]["name"])

    sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "backend"))
    from models.entities import JobPosting, OutcomeRecord, Profile
    from services.errors import EngineError
    from services.pipeline.model_store import ModelRepository
    from services.store import InMemoryStore
    from services.training.trainer import EngagementTrainer

    # --- 1. Load data ---
    path = Path(data_path or config["data"]["path"])
    store = InMemoryStore()
    if path.exists():
        with open(path) as f:
            raw = json.load(f)
        for item in raw.get("profiles", []):
            store.add_profile(Profile.model_validate(item))
        for item in raw.get("jobs", []):
            store.add_job(JobPosting.model_validate(item))
        for item in raw.get("outcome_records", []):
            store.add_outcome_record(OutcomeRecord.model_validate(item))
        logger.info(
            "Loaded %d outcome records from %s",
            len(store.list_outcome_records()), path,
        )
    else:
        logger.warning("Data file %s not found, training on an empty store", path)

    # --- 2. Train ---
    training_cfg = dict(config.get("training", {}))
    if epochs is not None:
        training_cfg["epochs"] = epochs
    if seed is not None:
        training_cfg["seed"] = seed

    repository = ModelRepository(config["output"]["model_dir"])
    trainer = EngagementTrainer(store, repository, report_dir=config["output"]["report_dir"])
    try:
        result = trainer.train(training_cfg)
    except EngineError as e:
        logger.error("Training failed: %s", e)
        sys.exit(1)

    logger.info(
        "Model %s: %d data points (%d synthetic), width %d",
        result.model_version, result.data_points, result.synthetic_points, result.feature_size,
    )

    # --- 3. Evaluate ---
    targets = config.get("evaluation", {}).get("targets", {})
    if "validation_accuracy" in targets:
        target = targets["validation_accuracy"]
        if result.validation_accuracy >= target:
            logger.info("Validation accuracy target %.2f ACHIEVED", target)
        else:
            logger.warning(
                "Validation accuracy target %.2f NOT MET (got %.4f)",
                target, result.validation_accuracy,
            )

    if store.list_outcome_records():
        evaluation = trainer.evaluate()
        logger.info(
            "Real-record evaluation: acc=%.4f rmse=%.4f spearman=%.4f",
            evaluation.accuracy, evaluation.rmse, evaluation.spearman,
        )
        if "spearman" in targets and evaluation.spearman < targets["spearman"]:
            logger.warning(
                "Spearman target %.2f NOT MET (got %.4f)", targets["spearman"], evaluation.spearman
            )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Train the engagement model")
    parser.add_argument("--config", default="training/configs/engagement.yaml")
    parser.add_argument("--data", default=None, help="JSON export of profiles/jobs/outcomes")
    parser.add_argument("--epochs", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()
    main(args.config, args.data, args.epochs, args.seed)
