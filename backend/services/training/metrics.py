"""Evaluation metrics for the engagement regressor.

All functions accept plain sequences or numpy arrays of equal length and
raise ``ValueError`` on empty or mismatched input.
"""

from collections.abc import Sequence
from typing import Union

import numpy as np
from scipy.stats import spearmanr

_ArrayLike = Union[Sequence[float], "np.ndarray"]

ENGAGEMENT_THRESHOLD = 0.5


def _as_arrays(y_true: _ArrayLike, y_pred: _ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    y_true_arr = np.asarray(y_true, dtype=np.float64).ravel()
    y_pred_arr = np.asarray(y_pred, dtype=np.float64).ravel()
    if y_true_arr.shape != y_pred_arr.shape:
        raise ValueError(f"Shape mismatch: {y_true_arr.shape} vs {y_pred_arr.shape}")
    if y_true_arr.size == 0:
        raise ValueError("Inputs must not be empty")
    return y_true_arr, y_pred_arr


def threshold_accuracy(
    y_true: _ArrayLike,
    y_pred: _ArrayLike,
    threshold: float = ENGAGEMENT_THRESHOLD,
) -> float:
    """Share of pairs that land on the same side of ``threshold``.

    A label or prediction equal to the threshold counts as engaged.
    """
    y_true_arr, y_pred_arr = _as_arrays(y_true, y_pred)
    agree = (y_true_arr >= threshold) == (y_pred_arr >= threshold)
    return float(np.mean(agree))


def rmse(y_true: _ArrayLike, y_pred: _ArrayLike) -> float:
    y_true_arr, y_pred_arr = _as_arrays(y_true, y_pred)
    return float(np.sqrt(np.mean((y_true_arr - y_pred_arr) ** 2)))


def spearman_correlation(y_true: _ArrayLike, y_pred: _ArrayLike) -> float:
    """Spearman rank correlation; 0.0 when either side is constant."""
    y_true_arr, y_pred_arr = _as_arrays(y_true, y_pred)
    if y_true_arr.size < 2 or np.ptp(y_true_arr) == 0 or np.ptp(y_pred_arr) == 0:
        return 0.0
    rho, _ = spearmanr(y_true_arr, y_pred_arr)
    return 0.0 if np.isnan(rho) else float(rho)
