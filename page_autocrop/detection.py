"""Page skew and border crop analysis."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import TYPE_CHECKING

import cv2
import numpy as np

from .edges import search, trim
from .exceptions import (
    DegenerateImageError,
    ImageReadError,
    ImageTooSmallError,
    InvalidSampleCountError,
)
from .filters import lowpass
from .models import AnalysisConfig, Bounds, CleanParams, Side, SideResult, Transform
from .pixels import PixelSource, pixel_source
from .regression import clean, mean

if TYPE_CHECKING:
    from .visualizer import DebugVisualizer

logger = logging.getLogger(__name__)

# Fraction of the image dimension scanned inward from each edge
WINDOW_DIVISOR = 16


class _ScanLines:
    """Finds the border distance on scan lines perpendicular to each side."""

    def __init__(self, source: PixelSource, thresh: float, fc: float):
        self.source = source
        self.thresh = thresh
        self.fc = fc
        self.window_x = source.width // WINDOW_DIVISOR
        self.window_y = source.height // WINDOW_DIVISOR

    def analyze_row(self, y: int) -> tuple[float, float]:
        """Return (left, right) border distances on row y."""
        width, m = self.source.width, self.window_x
        left = search(self.source.sample_x(y, 0, m, 1), self.thresh, self.fc)
        right = search(
            self.source.sample_x(y, width - 1, width - 1 - m, -1), self.thresh, self.fc
        )
        return left, right

    def analyze_column(self, x: int) -> tuple[float, float]:
        """Return (top, bottom) border distances on column x."""
        height, m = self.source.height, self.window_y
        top = search(self.source.sample_y(x, 0, m, 1), self.thresh, self.fc)
        bottom = search(
            self.source.sample_y(x, height - 1, height - 1 - m, -1), self.thresh, self.fc
        )
        return top, bottom


def analyze_side(
    edges: np.ndarray,
    side: Side,
    n: int,
    dimension: int,
    window: int,
    params: CleanParams,
) -> SideResult:
    """Interpret one side's edge positions as an angle and a crop offset.

    Args:
        edges: Border distance for each of the n scan lines
        side: Which side the edges belong to
        n: Number of scan lines per side
        dimension: Image size along the side (width for top/bottom)
        window: Length of each scan line
        params: Smoothing and cleaning parameters

    Returns:
        SideResult; a degenerate fit gives angle 0, offset 0 and confidence 0
    """
    lo, hi = trim(edges, params.trim_threshold)

    cleaned = lowpass(edges, params.side_cutoff)
    fit = clean(cleaned, params.regression_dev, params.chunk_mean_dev, params.chunk_size)

    if fit.is_degenerate:
        logger.warning(f"No usable border on {side.value} side ({fit.samples} samples left)")
        angle, offset, confidence = 0.0, 0, 0.0
    else:
        angle = math.atan(fit.slope * side.direction * n / dimension)
        offset = int(fit.predict(len(cleaned) / 2))
        offset = min(max(offset, 0), window)
        confidence = fit.r2

    logger.debug(
        f"{side.value}: angle={math.degrees(angle):.3f} deg, offset={offset}, "
        f"r2={confidence:.4f}, trim=({lo}, {hi})"
    )

    return SideResult(
        side=side,
        angle=angle,
        offset=offset,
        confidence=confidence,
        fit=fit,
        edges=edges,
        cleaned=cleaned,
        window=window,
        trim=(lo, hi),
    )


def analyze(
    img: np.ndarray,
    threshold: float = 12.0,
    cutoff_frequency: float = 0.1,
    samples_per_side: int = 500,
    clean_params: CleanParams | None = None,
    max_workers: int | None = None,
    visualizer: DebugVisualizer | None = None,
) -> Transform:
    """Determine how to straighten and crop a page scan on a black background.

    Looks in from each edge of the image for the page border, taking
    samples_per_side scan lines per side. On each line the border is the
    peak of the first rising edge whose derivative exceeds threshold. The
    positions along a side are cleaned and fitted with a line: its slope
    gives the side's rotation and its midpoint value the crop distance.
    The rotation is the mean of the four sides.

    The page is assumed to be mostly white around its edges and the
    background black. Only rising edges are detected. Low confidence
    values (below about 0.5) mean manual intervention is advised. Use at
    least two cleaning chunks of samples per side (16 by default): the
    first chunk always holds the corner scan line, so with fewer samples
    the chunk pass discards the whole side and DegenerateImageError is
    raised.

    Args:
        img: Image as numpy array (grayscale or color)
        threshold: Derivative value considered to be a page border
        cutoff_frequency: Cutoff of the scan line denoise filter
        samples_per_side: Number of scan lines per side
        clean_params: Per-side cleaning parameters (defaults if None)
        max_workers: Thread pool size (executor default if None)
        visualizer: Optional debug visualizer for per-side charts

    Returns:
        Transform with rotation, crop bounds and per-side confidence

    Raises:
        InvalidSampleCountError: If samples_per_side is not an integer >= 1
        ImageTooSmallError: If a scan window would be shorter than 2 pixels
        DegenerateImageError: If no side yields a usable fit
    """
    if (
        not isinstance(samples_per_side, (int, np.integer))
        or isinstance(samples_per_side, bool)
        or samples_per_side < 1
    ):
        raise InvalidSampleCountError(samples_per_side)
    if clean_params is None:
        clean_params = CleanParams()

    source = pixel_source(img)
    dx, dy = source.width, source.height
    n = samples_per_side

    lines = _ScanLines(source, threshold, cutoff_frequency)
    if lines.window_x < 2 or lines.window_y < 2:
        raise ImageTooSmallError(dx, dy)

    logger.debug(
        f"Analyzing {dx}x{dy} image: threshold={threshold}, fc={cutoff_frequency}, "
        f"n={n}, windows={lines.window_x}x{lines.window_y}"
    )

    left = np.zeros(n)
    right = np.zeros(n)
    top = np.zeros(n)
    bottom = np.zeros(n)

    def sample(i: int) -> None:
        left[i], right[i] = lines.analyze_row(i * dy // n)
        top[i], bottom[i] = lines.analyze_column(i * dx // n)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(sample, i) for i in range(n)]
        wait(futures)
    for future in futures:
        future.result()

    sides = (
        analyze_side(top, Side.TOP, n, dx, lines.window_y, clean_params),
        analyze_side(right, Side.RIGHT, n, dy, lines.window_x, clean_params),
        analyze_side(bottom, Side.BOTTOM, n, dx, lines.window_y, clean_params),
        analyze_side(left, Side.LEFT, n, dy, lines.window_x, clean_params),
    )

    if visualizer:
        for side_result in sides:
            visualizer.save_side(side_result)

    usable = [s.angle for s in sides if not s.is_degenerate]
    if not usable:
        raise DegenerateImageError()

    top_side, right_side, bottom_side, left_side = sides
    transform = Transform(
        angle=mean(usable),
        bounds=Bounds(
            min_x=left_side.offset,
            min_y=top_side.offset,
            max_x=dx - right_side.offset,
            max_y=dy - bottom_side.offset,
        ),
        confidence=tuple(s.confidence for s in sides),
        sides=sides,
    )

    logger.debug(f"Transform: {transform.to_command()}")

    if visualizer:
        visualizer.save_transform(img, transform)

    return transform


def analyze_config(
    img: np.ndarray,
    config: AnalysisConfig,
    visualizer: DebugVisualizer | None = None,
) -> Transform:
    """Run analyze with parameters taken from an AnalysisConfig."""
    return analyze(
        img,
        threshold=config.threshold,
        cutoff_frequency=config.cutoff_frequency,
        samples_per_side=config.samples_per_side,
        clean_params=config.clean,
        max_workers=config.max_workers,
        visualizer=visualizer,
    )


def load_image(path: str | Path) -> np.ndarray:
    """Decode an image file, keeping its native channel layout.

    Raises:
        ImageReadError: If the file cannot be read or decoded
    """
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageReadError(str(path))
    return img


def analyze_file(
    path: str | Path,
    threshold: float = 12.0,
    cutoff_frequency: float = 0.1,
    samples_per_side: int = 500,
    **kwargs,
) -> Transform:
    """Load an image file and run analyze on it."""
    img = load_image(path)
    return analyze(img, threshold, cutoff_frequency, samples_per_side, **kwargs)
