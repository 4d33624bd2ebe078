"""
Reference card detection utilities.

This module handles:
- Finding 4-vertex contours in an edge map
- Accepting the first candidate with a card-like aspect ratio
- Canonical corner ordering
- Perspective rectification of the accepted quad

Candidate selection is first-match in contour discovery order, not
best-match against the ideal card ratio.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import cv2
import numpy as np

from .calibration_constants import (
    BLUR_KERNEL_SIZE,
    CANNY_HIGH_THRESHOLD,
    CANNY_LOW_THRESHOLD,
    CARD_MAX_ASPECT_RATIO,
    CARD_MIN_ASPECT_RATIO,
    POLY_EPSILON_FACTOR,
)
from .debug_observer import DebugObserver, draw_ordered_corners, draw_quad_candidates
from .geometry import quad_edge_lengths

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Quad:
    """Four corners in pixel space, ordered TL, TR, BR, BL."""

    corners: np.ndarray

    @classmethod
    def from_points(cls, points: np.ndarray) -> "Quad":
        return cls(corners=order_corners(points))

    @property
    def width(self) -> float:
        top, _, bottom, _ = quad_edge_lengths(self.corners)
        return max(top, bottom)

    @property
    def height(self) -> float:
        _, right, _, left = quad_edge_lengths(self.corners)
        return max(left, right)


def order_corners(corners: np.ndarray) -> np.ndarray:
    """
    Order corners as: top-left, top-right, bottom-right, bottom-left.

    Sorts by y to split the top pair from the bottom pair, then sorts each
    pair by x.

    Args:
        corners: 4x2 (or 4x1x2) array of corner points in any order

    Returns:
        Ordered 4x2 float32 array of corners
    """
    corners = np.asarray(corners, dtype=np.float32).reshape(4, 2)

    by_y = corners[np.argsort(corners[:, 1], kind="stable")]
    top = by_y[:2][np.argsort(by_y[:2, 0], kind="stable")]
    bottom = by_y[2:][np.argsort(by_y[2:, 0], kind="stable")]

    top_left, top_right = top
    bottom_left, bottom_right = bottom

    return np.array([top_left, top_right, bottom_right, bottom_left], dtype=np.float32)


def bounding_aspect_ratio(candidate: np.ndarray) -> float:
    """Axis-aligned bounding box aspect ratio (width / height) of a polygon."""
    points = np.asarray(candidate, dtype=np.float32).reshape(-1, 1, 2)
    _, _, w, h = cv2.boundingRect(points)
    if h <= 0:
        return float("inf")
    return w / h


def compute_edge_map(
    image: np.ndarray,
    canny_low: float = CANNY_LOW_THRESHOLD,
    canny_high: float = CANNY_HIGH_THRESHOLD,
    observer: Optional[DebugObserver] = None,
) -> np.ndarray:
    """
    Grayscale, Gaussian smoothing, and Canny edge detection.

    Args:
        image: Input BGR (or already grayscale) image
        canny_low: Lower hysteresis threshold
        canny_high: Upper hysteresis threshold
        observer: Optional debug observer

    Returns:
        Binary edge map
    """
    if image.ndim == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    else:
        gray = image
    if observer:
        observer.save_stage("01_grayscale", gray)

    blurred = cv2.GaussianBlur(gray, BLUR_KERNEL_SIZE, 0)
    if observer:
        observer.save_stage("02_blurred", blurred)

    edges = cv2.Canny(blurred, canny_low, canny_high)
    if observer:
        observer.save_stage("03_edges", edges)

    return edges


def find_quad_candidates(
    edges: np.ndarray,
    epsilon_factor: float = POLY_EPSILON_FACTOR,
) -> List[np.ndarray]:
    """
    Extract 4-vertex polygon approximations of external contours.

    Args:
        edges: Binary edge map
        epsilon_factor: approxPolyDP tolerance as a fraction of perimeter

    Returns:
        List of 4x1x2 approximations, in contour discovery order
    """
    contours, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    logger.debug(f"Found {len(contours)} external contours")

    candidates = []
    for contour in contours:
        peri = cv2.arcLength(contour, True)
        approx = cv2.approxPolyDP(contour, epsilon_factor * peri, True)
        if len(approx) == 4:
            candidates.append(approx)

    return candidates


def select_card_candidate(
    candidates: List[np.ndarray],
    min_ratio: float = CARD_MIN_ASPECT_RATIO,
    max_ratio: float = CARD_MAX_ASPECT_RATIO,
) -> Optional[int]:
    """
    Return the index of the first candidate with a card-like aspect ratio.

    Later candidates are never inspected once one qualifies, even if their
    ratio is closer to the ideal card ratio.

    Args:
        candidates: 4-vertex polygons in discovery order
        min_ratio: Minimum accepted width/height ratio
        max_ratio: Maximum accepted width/height ratio

    Returns:
        Index of the accepted candidate, or None if none qualifies
    """
    for i, candidate in enumerate(candidates):
        if len(candidate.reshape(-1, 2)) != 4:
            continue
        ratio = bounding_aspect_ratio(candidate)
        if min_ratio <= ratio <= max_ratio:
            logger.debug(f"Accepted candidate #{i} with aspect ratio {ratio:.3f}")
            return i
        logger.debug(f"Rejected candidate #{i}: aspect ratio {ratio:.3f}")

    return None


def rectify_quad(
    image: np.ndarray,
    quad: Quad,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Apply perspective transform mapping the quad to an axis-aligned rectangle.

    Args:
        image: Input image
        quad: Canonically ordered quad

    Returns:
        Tuple of (rectified_image, transform_matrix)
    """
    out_w = max(1, int(round(quad.width)))
    out_h = max(1, int(round(quad.height)))

    dst = np.array([
        [0, 0],
        [out_w - 1, 0],
        [out_w - 1, out_h - 1],
        [0, out_h - 1],
    ], dtype=np.float32)

    M = cv2.getPerspectiveTransform(quad.corners.astype(np.float32), dst)
    rectified = cv2.warpPerspective(image, M, (out_w, out_h))

    return rectified, M


def detect_reference_quad(
    image: np.ndarray,
    canny_low: float = CANNY_LOW_THRESHOLD,
    canny_high: float = CANNY_HIGH_THRESHOLD,
    min_ratio: float = CARD_MIN_ASPECT_RATIO,
    max_ratio: float = CARD_MAX_ASPECT_RATIO,
    debug_dir: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Detect a rectangular reference card in the image.

    Args:
        image: Input BGR image (the square capture frame)
        canny_low: Lower Canny threshold
        canny_high: Upper Canny threshold
        min_ratio: Minimum accepted bounding-box aspect ratio
        max_ratio: Maximum accepted bounding-box aspect ratio
        debug_dir: Optional directory to save debug images

    Returns:
        Dictionary containing:
        - quad: Canonically ordered Quad
        - rectified: Perspective-corrected crop of the card
        - transform: 3x3 perspective matrix
        - aspect_ratio: Bounding-box aspect ratio of the accepted candidate
        - candidate_index: Discovery-order position of the accepted candidate
        - num_candidates: Number of 4-vertex candidates found
        Or None if no candidate qualifies
    """
    observer = DebugObserver(debug_dir) if debug_dir else None

    edges = compute_edge_map(image, canny_low, canny_high, observer=observer)
    candidates = find_quad_candidates(edges)

    accepted = select_card_candidate(candidates, min_ratio, max_ratio)

    if observer and candidates:
        observer.draw_and_save("04_candidates", image, draw_quad_candidates,
                               candidates, accepted, "Quad Candidates")

    if accepted is None:
        logger.debug(f"No card-like quad among {len(candidates)} candidates")
        return None

    quad = Quad.from_points(candidates[accepted])
    rectified, M = rectify_quad(image, quad)

    if observer:
        observer.draw_and_save("05_accepted_quad", image, draw_ordered_corners, quad.corners)
        observer.save_stage("06_rectified", rectified)

    logger.debug(f"Reference quad: {quad.width:.1f}x{quad.height:.1f}px")

    return {
        "quad": quad,
        "rectified": rectified,
        "transform": M,
        "aspect_ratio": bounding_aspect_ratio(candidates[accepted]),
        "candidate_index": accepted,
        "num_candidates": len(candidates),
    }
