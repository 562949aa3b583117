"""Page border detection within scan lines."""

from __future__ import annotations

import numpy as np

from .filters import differentiate, lowpass


def search(samples: np.ndarray, thresh: float, fc: float) -> float:
    """Find the rising page edge in a scan line.

    The line is smoothed at ``fc`` and differentiated. The first run of
    derivative values above ``thresh`` marks the border; its peak is the
    edge position. Only rising (black to white) edges are found.

    Args:
        samples: Grayscale intensities, indexed from the image edge inward
        thresh: Derivative value considered to be a page border
        fc: Cutoff frequency of the denoise filter

    Returns:
        Index of the peak, or 0.0 if no value exceeds thresh
    """
    d = differentiate(lowpass(samples, fc))

    above = d > thresh
    if not above.any():
        return 0.0

    start = int(np.argmax(above))
    falls = np.flatnonzero(~above[start:])
    end = start + int(falls[0]) if len(falls) else len(d)

    return float(start + np.argmax(d[start:end]))


def trim(xs: np.ndarray, thresh: float) -> tuple[int, int]:
    """Find the index range whose ends hold plausible edge values.

    A value is plausible when it is above zero and below thresh.

    Returns:
        (lo, hi): first plausible index and one past the last one; defaults
        to (0, len(xs)) on the side where none is found
    """
    plausible = np.flatnonzero((xs > 0) & (xs < thresh))
    if len(plausible) == 0:
        return 0, len(xs)
    return int(plausible[0]), int(plausible[-1]) + 1
