"""Data models for page analysis."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np

from .exceptions import InvalidCropError


class Side(Enum):
    """Image side, in CSS box order (top, right, bottom, left)."""

    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def direction(self) -> int:
        """Sign that turns this side's edge slope into a rotation angle."""
        return -1 if self in (Side.TOP, Side.RIGHT) else 1

    @property
    def is_horizontal(self) -> bool:
        """Check if the side runs along the x axis (top and bottom)."""
        return self in (Side.TOP, Side.BOTTOM)


class FitStatus(Enum):
    """Outcome of a line fit."""

    OK = "ok"
    DEGENERATE = "degenerate"  # too few samples or no spread in x


@dataclass
class FitResult:
    """Result of a least squares line fit over (index, value) pairs."""

    intercept: float
    slope: float
    r2: float
    samples: int
    status: FitStatus = FitStatus.OK

    @property
    def is_degenerate(self) -> bool:
        return self.status is FitStatus.DEGENERATE

    def predict(self, index: float | np.ndarray) -> float | np.ndarray:
        """Return the fitted value at index."""
        return self.intercept + self.slope * index


@dataclass
class SideResult:
    """Analysis of one image side."""

    side: Side
    angle: float
    offset: int
    confidence: float
    fit: FitResult
    edges: np.ndarray = field(repr=False)
    """Raw edge positions, one per scan line."""

    cleaned: np.ndarray = field(repr=False)
    """Smoothed and cleaned edge positions the fit was taken from."""

    window: int = 0
    """Length of each scan line in pixels."""

    trim: tuple[int, int] = (0, 0)
    """(lo, hi) index range of plausible edge values, for plotting."""

    @property
    def is_degenerate(self) -> bool:
        return self.fit.is_degenerate


@dataclass
class Bounds:
    """Axis-aligned crop rectangle in original image coordinates."""

    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def is_inverted(self) -> bool:
        """Check if min exceeds max on either axis."""
        return self.min_x > self.max_x or self.min_y > self.max_y

    def as_tuple(self) -> tuple[int, int, int, int]:
        """Return bounds as (min_x, min_y, max_x, max_y) tuple."""
        return (self.min_x, self.min_y, self.max_x, self.max_y)


@dataclass
class Transform:
    """Transformation plan that should straighten and crop a page scan.

    ``angle`` is the rotation (radians) that makes the page straight, and
    ``bounds`` the crop rectangle afterwards. ``confidence`` holds the r^2
    value of each side's line fit in top, right, bottom, left order.
    """

    angle: float
    bounds: Bounds
    confidence: tuple[float, float, float, float]
    sides: tuple[SideResult, ...] = field(default=(), repr=False, compare=False)

    @property
    def degrees(self) -> float:
        return math.degrees(self.angle)

    @property
    def degenerate_sides(self) -> list[Side]:
        """Return sides whose fit was degenerate and did not contribute."""
        return [s.side for s in self.sides if s.is_degenerate]

    def low_confidence_sides(self, threshold: float = 0.5) -> list[Side]:
        """Return sides whose confidence is below threshold."""
        return [side for side, c in zip(Side, self.confidence) if c < threshold]

    def validate(self) -> None:
        """Raise InvalidCropError if the crop rectangle is inverted."""
        if self.bounds.is_inverted:
            raise InvalidCropError(str(self.bounds.as_tuple()))

    def to_command(self) -> str:
        """Return the ImageMagick/GraphicsMagick flags for this transform.

        Rotating adds thin triangles on each side of the canvas so that no
        pixel is lost, which shifts the crop origin.
        """
        r = math.sin(-self.angle) / 2
        left = self.bounds.min_x + int(self.bounds.height * r)
        top = self.bounds.min_y + int(self.bounds.width * r)
        return (
            f"-rotate {self.degrees:f} "
            f"-crop {self.bounds.width}x{self.bounds.height}+{left}+{top}"
        )

    def __str__(self) -> str:
        return self.to_command()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "angle": self.angle,
            "degrees": self.degrees,
            "bounds": asdict(self.bounds),
            "confidence": {side.value: c for side, c in zip(Side, self.confidence)},
            "degenerate_sides": [side.value for side in self.degenerate_sides],
            "command": self.to_command(),
        }


# =============================================================================
# Configuration Classes
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_positive(name: str, value: Any) -> None:
    if not _is_number(value) or value <= 0:
        raise ValueError(f"{name} must be a number > 0, got {value!r}")


def _check_count(name: str, value: Any) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValueError(f"{name} must be an integer >= 1, got {value!r}")


def _field_names(cls) -> set[str]:
    return {f.name for f in fields(cls)}


@dataclass
class CleanParams:
    """Tuning for per-side smoothing and outlier cleaning."""

    trim_threshold: float = 200.0
    regression_dev: float = 24.0
    chunk_mean_dev: float = 4.0
    chunk_size: int = 8
    side_cutoff: float = 0.1

    def validate(self) -> None:
        """Validate parameter ranges."""
        _check_positive("clean.trim_threshold", self.trim_threshold)
        _check_positive("clean.regression_dev", self.regression_dev)
        _check_positive("clean.chunk_mean_dev", self.chunk_mean_dev)
        _check_count("clean.chunk_size", self.chunk_size)
        _check_positive("clean.side_cutoff", self.side_cutoff)


@dataclass
class AnalysisConfig:
    """Complete configuration for page analysis."""

    threshold: float = 12.0
    cutoff_frequency: float = 0.1
    samples_per_side: int = 500
    max_workers: int | None = None
    clean: CleanParams = field(default_factory=CleanParams)

    def validate(self) -> None:
        """Validate all configuration."""
        _check_positive("threshold", self.threshold)
        _check_positive("cutoff_frequency", self.cutoff_frequency)
        _check_count("samples_per_side", self.samples_per_side)
        if self.max_workers is not None:
            _check_count("max_workers", self.max_workers)
        self.clean.validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisConfig:
        """Create AnalysisConfig from dictionary."""
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a JSON object, got {type(data).__name__}")
        config = cls()

        for key, value in data.items():
            if key == "clean":
                if not isinstance(value, dict):
                    raise ValueError(f"clean must be a JSON object, got {type(value).__name__}")
                for clean_key, clean_value in value.items():
                    if clean_key not in _field_names(CleanParams):
                        raise ValueError(f"Unknown clean setting: {clean_key}")
                    setattr(config.clean, clean_key, clean_value)
            elif key in _field_names(cls):
                setattr(config, key, value)
            else:
                raise ValueError(f"Unknown setting: {key}")

        config.validate()
        return config

    @classmethod
    def from_json(cls, json_str: str) -> AnalysisConfig:
        """Parse AnalysisConfig from JSON string."""
        data = json.loads(json_str)
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> AnalysisConfig:
        """Load AnalysisConfig from JSON file."""
        with open(path) as f:
            return cls.from_json(f.read())

    @classmethod
    def default_json(cls) -> str:
        """Return default configuration as formatted JSON string."""
        config = cls()
        return config.to_json()
