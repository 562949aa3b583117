"""Skew and border crop analysis for scanned pages."""

__version__ = "0.1.0"


def __getattr__(name):
    """Lazy import to avoid loading cv2 for CLI subcommands that don't need it."""
    if name in ("analyze", "analyze_config", "analyze_file"):
        from . import detection
        return getattr(detection, name)
    if name in ("AnalysisConfig", "Bounds", "CleanParams", "Side", "Transform"):
        from . import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "analyze",
    "analyze_config",
    "analyze_file",
    "AnalysisConfig",
    "Bounds",
    "CleanParams",
    "Side",
    "Transform",
]
