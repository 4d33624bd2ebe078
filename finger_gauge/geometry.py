"""
Geometric computation utilities.

This module handles:
- Landmark to pixel coordinate conversion
- Euclidean distances in pixel space
- Line-through-two-points coefficients
- Point-to-line perpendicular distance

All functions are pure. Degenerate inputs raise DegenerateLine; callers
decide how to surface it.
"""

import math
from typing import Sequence, Tuple

import numpy as np

from .errors import DegenerateLine
from .geometry_constants import EPSILON
from .landmarks import Landmark

Point = Tuple[float, float]
Line = Tuple[float, float, float]


def landmark_to_pixel(landmark: Landmark, frame_size: int) -> Point:
    """Convert a normalized landmark to pixel coordinates on an S x S frame."""
    return landmark.x * frame_size, landmark.y * frame_size


def pixel_distance(p: Sequence[float], q: Sequence[float]) -> float:
    """Euclidean distance between two pixel points."""
    return float(math.hypot(q[0] - p[0], q[1] - p[1]))


def distance(p: Landmark, q: Landmark, frame_size: int) -> float:
    """
    Euclidean distance between two landmarks in pixels.

    Args:
        p: First landmark (normalized coordinates)
        q: Second landmark (normalized coordinates)
        frame_size: Capture frame side length S in pixels

    Returns:
        Distance in pixels
    """
    return pixel_distance(
        landmark_to_pixel(p, frame_size),
        landmark_to_pixel(q, frame_size),
    )


def line_through(p: Sequence[float], q: Sequence[float]) -> Line:
    """
    Coefficients (a, b, c) of the line a*x + b*y + c = 0 through two points.

    Args:
        p: First pixel point (x, y)
        q: Second pixel point (x, y)

    Returns:
        Tuple of (a, b, c)

    Raises:
        DegenerateLine: If p and q coincide
    """
    x1, y1 = float(p[0]), float(p[1])
    x2, y2 = float(q[0]), float(q[1])

    a = y2 - y1
    b = x1 - x2
    c = x2 * y1 - x1 * y2

    if math.hypot(a, b) < EPSILON:
        raise DegenerateLine(f"Cannot define a line through coincident points {p} and {q}")

    return a, b, c


def perpendicular_distance(point: Sequence[float], line: Line) -> float:
    """
    Unsigned perpendicular distance from a pixel point to a line.

    Args:
        point: Pixel point (x, y)
        line: Line coefficients (a, b, c)

    Returns:
        Distance in pixels

    Raises:
        DegenerateLine: If a and b are both zero
    """
    a, b, c = line
    denominator = math.hypot(a, b)
    if denominator < EPSILON:
        raise DegenerateLine("Line coefficients a and b are both zero")

    return abs(a * point[0] + b * point[1] + c) / denominator


def quad_edge_lengths(corners: np.ndarray) -> Tuple[float, float, float, float]:
    """
    Edge lengths of an ordered quadrilateral.

    Args:
        corners: Ordered 4x2 array (TL, TR, BR, BL)

    Returns:
        Tuple of (top, right, bottom, left) lengths in pixels
    """
    tl, tr, br, bl = corners.reshape(4, 2).astype(np.float64)
    top = float(np.linalg.norm(tr - tl))
    right = float(np.linalg.norm(br - tr))
    bottom = float(np.linalg.norm(br - bl))
    left = float(np.linalg.norm(bl - tl))
    return top, right, bottom, left
