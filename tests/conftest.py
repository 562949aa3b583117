"""Shared fixtures: synthetic page scans on a black background."""

import math

import cv2
import numpy as np
import pytest


def make_page(
    width: int = 1600,
    height: int = 1600,
    page: int = 1480,
    tilt: float = 0.0,
    channels: int = 1,
) -> np.ndarray:
    """Draw a white square page centered on a black image.

    Args:
        width: Image width
        height: Image height
        page: Side length of the page
        tilt: Page rotation in degrees, clockwise on screen (y axis down)
        channels: 1 for grayscale, 3 for BGR

    Returns:
        uint8 image array
    """
    img = np.zeros((height, width), dtype=np.uint8)
    theta = math.radians(tilt)
    half = page / 2
    corners = np.array([[-half, -half], [half, -half], [half, half], [-half, half]])
    rotation = np.array(
        [[math.cos(theta), -math.sin(theta)], [math.sin(theta), math.cos(theta)]]
    )
    points = corners @ rotation.T + (width / 2, height / 2)
    cv2.fillPoly(img, [np.round(points).astype(np.int32)], 255)
    if channels == 3:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    return img


@pytest.fixture
def page_image():
    """Factory for synthetic page scans."""
    return make_page
