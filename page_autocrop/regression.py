"""Line fitting and outlier cleaning for per-side edge sequences.

Zero is the "missing" marker throughout: an edge position of 0 means no
border was found on that scan line, and the cleaner zeroes samples it
distrusts. The fit skips zeros, so it only sees the values still trusted.
"""

from __future__ import annotations

import numpy as np

from .models import FitResult, FitStatus

# Remaining values below this count are folded into the final chunk
MIN_CHUNK = 8

# Relative variance below which a series is treated as having no spread
_VARIANCE_EPSILON = 1e-12


def mean(xs: np.ndarray) -> float:
    """Return the mean of xs."""
    return float(np.mean(xs))


def avg_abs_dev(xs: np.ndarray) -> float:
    """Return the average absolute deviation from the mean of xs."""
    xs = np.asarray(xs, dtype=np.float64)
    return float(np.mean(np.abs(xs - xs.mean())))


def linear_fit(xs: np.ndarray) -> FitResult:
    """Fit a line through (index, value) pairs, ignoring zero values.

    Args:
        xs: Sequence of values; the index is the independent variable

    Returns:
        FitResult with intercept, slope and r^2. The status is DEGENERATE
        when fewer than two non-zero values exist or all of them share one
        index; slope is then 0 and r^2 is 0. A perfectly flat series is a
        valid fit with r^2 of 1.
    """
    ys = np.asarray(xs, dtype=np.float64)
    index = np.flatnonzero(ys != 0)
    y = ys[index]
    x = index.astype(np.float64)
    n = len(y)

    if n < 2:
        intercept = float(y[0]) if n else 0.0
        return FitResult(intercept, 0.0, 0.0, n, FitStatus.DEGENERATE)

    sx = x.mean()
    sy = y.mean()
    xy = (x * y).mean()
    x2 = (x * x).mean()
    y2 = (y * y).mean()

    cov = xy - sx * sy
    var_x = x2 - sx * sx
    var_y = y2 - sy * sy

    if var_x <= _VARIANCE_EPSILON * max(x2, 1.0):
        return FitResult(float(sy), 0.0, 0.0, n, FitStatus.DEGENERATE)

    beta = cov / var_x
    alpha = sy - beta * sx

    if var_y <= _VARIANCE_EPSILON * max(y2, 1.0):
        return FitResult(float(sy), 0.0, 1.0, n)

    r = cov / np.sqrt(var_x * var_y)
    return FitResult(float(alpha), float(beta), float(min(r * r, 1.0)), n)


def clean(
    xs: np.ndarray,
    regression_dev: float,
    chunk_mean_dev: float,
    chunk_size: int,
) -> FitResult:
    """Recover a straight signal from a garbled one, in place.

    1. Split xs into chunks and zero every chunk whose average absolute
       deviation exceeds chunk_mean_dev (ink or stray marks near the edge).
    2. Fit a line and zero every value further than regression_dev from it.
    3. Refit on what is left and fill every zero with the fitted value.

    Args:
        xs: Float array of edge positions, modified in place
        regression_dev: Largest allowed residual from the first fit
        chunk_mean_dev: Largest allowed average deviation within a chunk
        chunk_size: Number of values per chunk

    Returns:
        The fit used to fill the gaps. If it is degenerate the zeros are
        left in place.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

    t = 0
    while t < len(xs):
        if len(xs) - t < MIN_CHUNK:
            chunk = xs[t:]
        else:
            chunk = xs[t:t + chunk_size]
        if avg_abs_dev(chunk) > chunk_mean_dev:
            chunk[:] = 0
        t += len(chunk)

    index = np.arange(len(xs), dtype=np.float64)

    fit = linear_fit(xs)
    if not fit.is_degenerate:
        xs[np.abs(fit.predict(index) - xs) > regression_dev] = 0

    fit = linear_fit(xs)
    if not fit.is_degenerate:
        missing = xs == 0
        xs[missing] = fit.predict(index[missing])

    return fit
