"""Debug visualization utilities for page analysis."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import cv2
import numpy as np

if TYPE_CHECKING:
    from .models import SideResult, Transform


@dataclass
class MarkerColors:
    """Colors used for debug markers.

    Chart colors are matplotlib color specs, overlay colors are BGR tuples.
    """

    edges: str = "#b4b4ff"
    cleaned: str = "black"
    fit: str = "green"
    crop: str = "red"
    trim: str = "green"
    crop_rect: tuple[int, int, int] = (0, 0, 255)
    text: tuple[int, int, int] = (0, 255, 0)


class DebugVisualizer:
    """Saves debug images at each step of page analysis."""

    def __init__(self, output_dir: str | Path, colors: MarkerColors | None = None):
        self.output_dir = Path(output_dir)
        if self.output_dir.exists():
            # Backup existing debug dir before cleaning
            backup_dir = self.output_dir.with_suffix(".bak")
            if backup_dir.exists():
                import shutil

                shutil.rmtree(backup_dir)
            self.output_dir.rename(backup_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.colors = colors or MarkerColors()
        self.step = 0

    def _next_path(self, name: str) -> Path:
        self.step += 1
        return self.output_dir / f"{self.step:02d}_{name}.png"

    def _save(self, name: str, img: np.ndarray):
        cv2.imwrite(str(self._next_path(name)), img)

    def save_side(self, result: SideResult):
        """Save a chart of one side's edge positions and line fit.

        Shows the raw edge positions as bars, the cleaned sequence, the
        fitted line, the trim window and the crop offset.
        """
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        index = np.arange(len(result.edges))
        lo, hi = result.trim

        fig, ax = plt.subplots(figsize=(10, 3))
        ax.bar(index, result.edges, width=1.0, color=self.colors.edges, label="edges")
        ax.plot(index, result.cleaned, color=self.colors.cleaned, linewidth=1, label="cleaned")
        if not result.is_degenerate:
            ax.plot(index, result.fit.predict(index), color=self.colors.fit, label="fit")
        ax.axvspan(lo, hi, color=self.colors.trim, alpha=0.12)
        ax.axhline(
            y=result.offset,
            color=self.colors.crop,
            linestyle="--",
            label=f"crop={result.offset}",
        )
        ax.set_ylim(0, max(result.window, 1))
        ax.set_xlabel("Sample")
        ax.set_ylabel("Distance from edge (px)")
        ax.set_title(
            f"{result.side.value}: angle={np.degrees(result.angle):.3f} deg, "
            f"r2={result.confidence:.4f}"
        )
        ax.legend(loc="upper right")

        fig.tight_layout()
        fig.savefig(self._next_path(f"side_{result.side.value}"), dpi=100)
        plt.close(fig)

    def save_transform(self, img: np.ndarray, transform: Transform):
        """Save the image with the crop rectangle and confidences drawn on it."""
        vis = img.copy()
        if vis.ndim == 2 or vis.shape[2] == 1:
            vis = cv2.cvtColor(vis, cv2.COLOR_GRAY2BGR)
        elif vis.shape[2] == 4:
            vis = cv2.cvtColor(vis, cv2.COLOR_BGRA2BGR)
        if vis.dtype != np.uint8:
            vis = cv2.normalize(vis, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

        b = transform.bounds
        thickness = max(2, min(vis.shape[:2]) // 300)
        cv2.rectangle(
            vis, (b.min_x, b.min_y), (b.max_x, b.max_y), self.colors.crop_rect, thickness
        )

        scale = max(0.5, min(vis.shape[:2]) / 1000)
        y = int(40 * scale)
        lines = [f"rotate {transform.degrees:.3f} deg"] + [
            f"{side.side.value}: r2={side.confidence:.3f}" for side in transform.sides
        ]
        for text in lines:
            cv2.putText(
                vis, text, (int(20 * scale), y),
                cv2.FONT_HERSHEY_SIMPLEX, scale, self.colors.text, thickness,
            )
            y += int(40 * scale)

        self._save("transform", vis)
