"""
Stage dumps for the card detection pipeline.

Each numbered stage (grayscale, blurred, edges, candidates, accepted quad,
rectified card) is written as ``<stage>.png`` into the debug directory.
"""

from pathlib import Path
from typing import Callable, List, Optional, Tuple

import cv2
import numpy as np

from .viz_constants import (
    Color, FontScale, FontThickness, Layout, Size, draw_outlined_text,
)


class DebugObserver:
    """Writes card detection stages to ``debug_dir``; stage names are unique per run."""

    def __init__(self, debug_dir: str):
        self.debug_dir = Path(debug_dir)
        self.debug_dir.mkdir(parents=True, exist_ok=True)

    def save_stage(self, name: str, image: Optional[np.ndarray]) -> None:
        if image is None or image.size == 0:
            return
        cv2.imwrite(str(self.debug_dir / f"{name}.png"), image)

    def draw_and_save(self, name: str, image: np.ndarray,
                      draw_func: Callable[..., np.ndarray], *args) -> None:
        """Save ``draw_func(image, *args)``, leaving ``image`` untouched."""
        self.save_stage(name, draw_func(image, *args))


def draw_quad_candidates(
    image: np.ndarray,
    candidates: List[np.ndarray],
    accepted_index: Optional[int],
    title: str,
) -> np.ndarray:
    """
    Draw 4-vertex candidates, highlighting the accepted one.

    Args:
        image: Original BGR image
        candidates: List of 4x1x2 polygon approximations in discovery order
        accepted_index: Position of the accepted candidate, or None
        title: Title for the visualization

    Returns:
        Annotated image
    """
    overlay = image.copy()

    for i, candidate in enumerate(candidates):
        pts = candidate.reshape(-1, 2).astype(np.int32)
        if i == accepted_index:
            cv2.polylines(overlay, [pts], True, Color.CARD, Size.CONTOUR_THICK)
        else:
            cv2.polylines(overlay, [pts], True, Color.CANDIDATE, Size.CONTOUR_NORMAL)
        x, y = pts[0]
        draw_outlined_text(overlay, f"#{i}", (int(x), int(y)),
                           FontScale.SMALL, Color.TEXT_PRIMARY)

    draw_outlined_text(overlay, title, (Layout.TEXT_OFFSET_X, Layout.TITLE_Y),
                       FontScale.TITLE, Color.TEXT_PRIMARY,
                       FontThickness.TITLE, FontThickness.TITLE_OUTLINE)
    draw_outlined_text(overlay, f"Candidates: {len(candidates)}",
                       (Layout.TEXT_OFFSET_X, Layout.SUBTITLE_Y),
                       FontScale.SUBTITLE, Color.TEXT_PRIMARY,
                       FontThickness.SUBTITLE, FontThickness.SUBTITLE_OUTLINE)

    return overlay


def draw_ordered_corners(image: np.ndarray, corners: np.ndarray,
                         color: Tuple[int, int, int] = Color.CARD) -> np.ndarray:
    """Draw an ordered quad with its corners labeled TL, TR, BR, BL."""
    overlay = image.copy()
    pts = corners.reshape(4, 2).astype(np.int32)
    cv2.polylines(overlay, [pts], True, color, Size.CONTOUR_THICK)

    for label, (x, y) in zip(("TL", "TR", "BR", "BL"), pts):
        cv2.circle(overlay, (int(x), int(y)), Size.CORNER_RADIUS, Color.RED, -1)
        draw_outlined_text(overlay, label, (int(x) + 4, int(y) - 4),
                           FontScale.SMALL, Color.TEXT_PRIMARY)

    return overlay
