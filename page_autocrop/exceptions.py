"""Custom exceptions for page analysis."""


class AutocropError(Exception):
    """Base exception for page analysis errors."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class ImageReadError(AutocropError):
    """Failed to read input image."""

    def __init__(self, path: str):
        super().__init__(
            f"Could not read image: {path}",
            "Could not read image file. The file may be corrupted or in an unsupported format.",
        )


class UnsupportedImageError(AutocropError):
    """Image array is neither grayscale nor color."""

    def __init__(self, shape: tuple[int, ...]):
        super().__init__(
            f"Unsupported image shape: {shape}",
            "Unsupported image layout. Expected a grayscale or RGB(A) image.",
        )


class InvalidSampleCountError(AutocropError):
    """Number of samples per side is not usable."""

    def __init__(self, samples: int):
        super().__init__(
            f"Samples per side must be an integer >= 1, got {samples!r}",
            "The number of samples per side must be a positive integer.",
        )


class ImageTooSmallError(AutocropError):
    """Image is too small to hold a scan window."""

    def __init__(self, width: int, height: int):
        super().__init__(
            f"Image too small to analyze: {width}x{height}",
            "The image is too small to analyze. Both sides need at least 32 pixels.",
        )


class DegenerateImageError(AutocropError):
    """No side produced a usable line fit."""

    def __init__(self):
        super().__init__(
            "All sides produced degenerate fits",
            "Could not find the page border on any side. "
            "The background may not be black or the threshold may be too high.",
        )


class InvalidCropError(AutocropError):
    """Computed crop rectangle is inverted."""

    def __init__(self, detail: str = ""):
        msg = f"Invalid crop rectangle: {detail}" if detail else "Invalid crop rectangle"
        super().__init__(
            msg,
            "Computed crop rectangle is invalid. Try different settings.",
        )


class LowConfidenceError(AutocropError):
    """One or more sides fell below the required confidence."""

    def __init__(self, sides: list[str], threshold: float):
        super().__init__(
            f"Low confidence on {', '.join(sides)} (threshold {threshold})",
            f"Low confidence on {', '.join(sides)}. Manual intervention is advised.",
        )
