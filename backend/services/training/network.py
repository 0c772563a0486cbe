"""Feed-forward engagement regressor."""

import torch
import torch.nn as nn


class EngagementRegressor(nn.Module):
    """Dense stack ending in a sigmoid, so predictions live in [0, 1].

    The first hidden layer uses the full dropout rate; later ones use half.
    """

    def __init__(self, input_dim: int, hidden_units: list[int], dropout_rate: float) -> None:
        super().__init__()
        layers: list[nn.Module] = []
        prev_dim = input_dim
        for i, width in enumerate(hidden_units):
            layers.extend([
                nn.Linear(prev_dim, width),
                nn.ReLU(),
                nn.Dropout(dropout_rate if i == 0 else dropout_rate / 2),
            ])
            prev_dim = width
        layers.extend([nn.Linear(prev_dim, 1), nn.Sigmoid()])
        self.layers = nn.Sequential(*layers)
        self._initialize_weights()

    def _initialize_weights(self) -> None:
        for module in self.modules():
            if isinstance(module, nn.Linear):
                nn.init.xavier_uniform_(module.weight)
                nn.init.constant_(module.bias, 0)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.layers(x)
