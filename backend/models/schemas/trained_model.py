"""Versioned engagement-model artifact."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ModelMetadata(BaseModel):
    """Everything needed to rebuild feature vectors and the network shape.

    Vocabularies are stored in index order; a token's position is its
    feature column within its block.
    """
    version: str
    created_at: datetime
    skills_vocab: list[str] = []
    titles_vocab: list[str] = []
    industries_vocab: list[str] = []
    feature_size: int = 0
    hidden_units: list[int] = []
    dropout_rate: float = 0.0


class TrainedModel(BaseModel):
    """Metadata plus the learned network (a ``torch.nn.Module``)."""
    metadata: ModelMetadata
    network: Any

    model_config = {"arbitrary_types_allowed": True}
