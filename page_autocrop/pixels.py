"""Grayscale sampling along image rows and columns."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from .exceptions import UnsupportedImageError


class PixelSource(ABC):
    """Read-only grayscale view of an image.

    Subclasses decide once per image how intensities are read, so sampling
    never has to inspect the pixel format.
    """

    def __init__(self, img: np.ndarray):
        self.img = img
        self.height, self.width = img.shape[:2]

    @abstractmethod
    def _gray(self, pixels: np.ndarray) -> np.ndarray:
        """Convert a run of pixels to float64 intensities."""

    def sample_x(self, y: int, start: int, end: int, step: int) -> np.ndarray:
        """Sample row y from start toward end (exclusive)."""
        if not 0 <= y < self.height:
            raise ValueError(f"row {y} outside image height {self.height}")
        xs = _walk(start, end, step, self.width)
        return self._gray(self.img[y, xs])

    def sample_y(self, x: int, start: int, end: int, step: int) -> np.ndarray:
        """Sample column x from start toward end (exclusive)."""
        if not 0 <= x < self.width:
            raise ValueError(f"column {x} outside image width {self.width}")
        ys = _walk(start, end, step, self.height)
        return self._gray(self.img[ys, x])


class GrayPixelSource(PixelSource):
    """Image with a single intensity channel."""

    def __init__(self, img: np.ndarray):
        if img.ndim == 3:
            img = img[:, :, 0]
        super().__init__(img)

    def _gray(self, pixels: np.ndarray) -> np.ndarray:
        return pixels.astype(np.float64)


class ColorPixelSource(PixelSource):
    """Color image, reduced to gray by the plain mean of its color channels.

    Alpha is ignored. Channel order does not matter for the mean, so BGR
    arrays from OpenCV work unchanged.
    """

    def _gray(self, pixels: np.ndarray) -> np.ndarray:
        return pixels[..., :3].astype(np.float64).mean(axis=-1)


def pixel_source(img: np.ndarray) -> PixelSource:
    """Pick the pixel source matching the image layout.

    Args:
        img: 2-D grayscale array, or H x W x C array with 1, 3 or 4 channels

    Returns:
        PixelSource for the image

    Raises:
        UnsupportedImageError: If the array is not an image layout
    """
    if img.ndim == 2 or (img.ndim == 3 and img.shape[2] == 1):
        return GrayPixelSource(img)
    if img.ndim == 3 and img.shape[2] in (3, 4):
        return ColorPixelSource(img)
    raise UnsupportedImageError(tuple(img.shape))


def _walk(start: int, end: int, step: int, size: int) -> np.ndarray:
    """Return the indices visited walking from start to end (exclusive)."""
    if step not in (1, -1):
        raise ValueError(f"step must be 1 or -1, got {step}")
    if not 0 <= start < size:
        raise ValueError(f"start {start} outside 0..{size - 1}")
    if not -1 <= end <= size:
        raise ValueError(f"end {end} outside -1..{size}")
    if (end - start) * step < 0:
        raise ValueError(f"step {step} never reaches {end} from {start}")
    return np.arange(start, end, step)
