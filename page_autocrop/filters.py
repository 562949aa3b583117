"""Signal filters for scan line sequences."""

from __future__ import annotations

import math

import numpy as np

# Cutoff used to suppress noise in derivative sequences (cycles/sample)
DERIVATIVE_CUTOFF = 0.1


def lowpass(x: np.ndarray, fc: float) -> np.ndarray:
    """Apply a discrete one-pole low-pass filter.

    Exponential smoothing with ``alpha = 1 / (RC + 1)`` where
    ``RC = 1 / (2 * pi * fc)``. A constant input passes unchanged.

    Args:
        x: Input sequence
        fc: Cutoff frequency in cycles/sample (must be > 0)

    Returns:
        New float64 array of the same length
    """
    if fc <= 0:
        raise ValueError(f"cutoff frequency must be > 0, got {fc}")

    values = np.asarray(x, dtype=np.float64).tolist()
    y = np.empty(len(values), dtype=np.float64)
    if not values:
        return y

    rc = 1.0 / (2 * math.pi * fc)
    alpha = 1.0 / (rc + 1.0)

    prev = values[0]
    y[0] = prev
    for t in range(1, len(values)):
        prev = prev + alpha * (values[t] - prev)
        y[t] = prev
    return y


def central_difference(x: np.ndarray) -> np.ndarray:
    """Return the discrete derivative of x.

    Interior samples use the slope between their two neighbours, the first
    and last samples the one-sided difference.
    """
    x = np.asarray(x, dtype=np.float64)
    if len(x) == 0:
        return np.empty(0, dtype=np.float64)
    if len(x) == 1:
        raise ValueError("at least two samples are required to differentiate")
    return np.gradient(x)


def differentiate(x: np.ndarray) -> np.ndarray:
    """Return the low-pass filtered derivative of x."""
    return lowpass(central_difference(x), DERIVATIVE_CUTOFF)
