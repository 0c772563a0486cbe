"""Versioned engagement-model artifacts on disk.

Layout under ``model_dir``::

    current.json              {"version": ..., "path": "v<version>"}
    v<version>/network.pt     torch state_dict
    v<version>/metadata.json  ModelMetadata

A save writes a fresh version directory first and only then swaps
``current.json`` with ``os.replace``, so a failed save leaves the
previous model active.
"""

import json
import logging
import os
import pickle
import shutil
from pathlib import Path

import torch
from pydantic import ValidationError

from models.schemas.trained_model import ModelMetadata, TrainedModel
from services.errors import InvalidConfigurationError, PersistenceError
from services.training.network import EngagementRegressor

logger = logging.getLogger(__name__)

POINTER_FILE = "current.json"
NETWORK_FILE = "network.pt"
METADATA_FILE = "metadata.json"


class ModelRepository:
    def __init__(self, model_dir: str | Path) -> None:
        self.model_dir = Path(model_dir)

    def _version_dir(self, version: str) -> Path:
        return self.model_dir / f"v{version}"

    def save_model(self, model: TrainedModel) -> Path:
        version = model.metadata.version
        target = self._version_dir(version)
        pointer_tmp = self.model_dir / f"{POINTER_FILE}.tmp"
        try:
            self.model_dir.mkdir(parents=True, exist_ok=True)
            target.mkdir(exist_ok=False)
            torch.save(model.network.state_dict(), target / NETWORK_FILE)
            (target / METADATA_FILE).write_text(
                model.metadata.model_dump_json(indent=2), encoding="utf-8"
            )
            pointer_tmp.write_text(
                json.dumps({"version": version, "path": target.name}), encoding="utf-8"
            )
            os.replace(pointer_tmp, self.model_dir / POINTER_FILE)
        except FileExistsError as e:
            raise PersistenceError(f"Model version {version} already exists") from e
        except (OSError, RuntimeError) as e:
            shutil.rmtree(target, ignore_errors=True)
            pointer_tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to save model {version}: {e}") from e

        logger.info("Engagement model %s saved to %s", version, target)
        return target

    def active_version(self) -> str | None:
        pointer = self.model_dir / POINTER_FILE
        if not pointer.exists():
            return None
        try:
            return json.loads(pointer.read_text(encoding="utf-8"))["version"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise InvalidConfigurationError(f"Corrupt model pointer {pointer}: {e}") from e

    def load_model(self, version: str) -> TrainedModel:
        """Rebuild the network for ``version``. Raises on missing or corrupt files."""
        source = self._version_dir(version)
        try:
            metadata = ModelMetadata.model_validate_json(
                (source / METADATA_FILE).read_text(encoding="utf-8")
            )
            network = EngagementRegressor(
                metadata.feature_size, metadata.hidden_units, metadata.dropout_rate
            )
            state = torch.load(source / NETWORK_FILE, map_location="cpu", weights_only=True)
            network.load_state_dict(state)
        except (OSError, ValueError, RuntimeError, ValidationError, pickle.UnpicklingError) as e:
            raise InvalidConfigurationError(f"Cannot load model {version}: {e}") from e
        network.eval()
        return TrainedModel(metadata=metadata, network=network)

    def load_active_model(self) -> TrainedModel | None:
        """The model ``current.json`` points at, or ``None`` if unusable."""
        try:
            version = self.active_version()
            if version is None:
                return None
            return self.load_model(version)
        except InvalidConfigurationError as e:
            logger.warning("Active engagement model unusable, scoring without it: %s", e)
            return None

    def list_versions(self) -> list[str]:
        """Known versions, newest first."""
        if not self.model_dir.exists():
            return []
        versions = [
            d.name[1:] for d in self.model_dir.iterdir()
            if d.is_dir() and d.name.startswith("v") and (d / METADATA_FILE).exists()
        ]
        return sorted(versions, reverse=True)
