"""
Debug visualization utilities.

This module handles:
- Hand skeleton overlay
- Ring finger axis and perpendicular width segments
- Reference quad outline
- Result annotation
"""

from typing import Any, Dict, Optional

import cv2
import numpy as np

from .landmarks import HAND_CONNECTIONS, HandDetection, HandLandmark
from .viz_constants import (
    Color,
    FontScale,
    Layout,
    Size,
    draw_outlined_text,
)


def _foot_of_perpendicular(point: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    direction = b - a
    t = np.dot(point - a, direction) / max(np.dot(direction, direction), 1e-8)
    return a + t * direction


def create_debug_visualization(
    image: np.ndarray,
    hand: Optional[HandDetection],
    frame_size: int,
    result: Dict[str, Any],
    reference_quad: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Create debug visualization overlay on the capture frame.

    Args:
        image: S x S BGR capture frame
        hand: Measured hand, if one was detected
        frame_size: Capture frame side length in pixels
        result: Session output dictionary
        reference_quad: Ordered 4x2 card corners, if card calibration was used

    Returns:
        Annotated BGR image
    """
    vis = image.copy()

    if reference_quad is not None:
        pts = np.asarray(reference_quad).reshape(4, 2).astype(np.int32)
        cv2.polylines(vis, [pts], True, Color.CARD, Size.CONTOUR_THICK)

    if hand is not None:
        points = np.array(
            [(lm.x * frame_size, lm.y * frame_size) for lm in hand.landmarks],
            dtype=np.float64,
        )

        for start, end in HAND_CONNECTIONS:
            cv2.line(vis, tuple(points[start].astype(int)), tuple(points[end].astype(int)),
                     Color.SKELETON, Size.LINE_NORMAL, cv2.LINE_AA)
        for x, y in points:
            cv2.circle(vis, (int(x), int(y)), Size.POINT_RADIUS, Color.LANDMARK, -1)

        mcp = points[HandLandmark.RING_FINGER_MCP]
        pip = points[HandLandmark.RING_FINGER_PIP]
        direction = pip - mcp
        norm = np.linalg.norm(direction)
        if norm > 0:
            # Extend the axis a little past both joints
            extend = direction / norm * frame_size * 0.1
            cv2.line(vis, tuple((mcp - extend).astype(int)), tuple((pip + extend).astype(int)),
                     Color.AXIS_LINE, Size.LINE_THICK, cv2.LINE_AA)

            for key in (HandLandmark.MIDDLE_FINGER_PIP, HandLandmark.INDEX_FINGER_PIP):
                foot = _foot_of_perpendicular(points[key], mcp, pip)
                cv2.line(vis, tuple(points[key].astype(int)), tuple(foot.astype(int)),
                         Color.PERPENDICULAR, Size.LINE_NORMAL, cv2.LINE_AA)

    if result.get("fail_reason"):
        lines = [f"FAILED: {result['fail_reason']}"]
        color = Color.TEXT_ERROR
    else:
        lines = [f"Width: {result['finger_width_mm']:.1f} mm"]
        if result.get("confidence_percent") is not None:
            lines.append(f"Confidence: {result['confidence_percent']:.1f}%")
        lines.append(f"Scale: {result['mm_per_pixel']:.3f} mm/px")
        color = Color.TEXT_PRIMARY

    y = Layout.TITLE_Y
    for text in lines:
        draw_outlined_text(vis, text, (Layout.TEXT_OFFSET_X, y), FontScale.BODY, color)
        y += Layout.LINE_SPACING

    return vis
