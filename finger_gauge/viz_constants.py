"""
Shared visualization constants for debug output.

This module provides centralized configuration for fonts, colors, sizes, and
layout used in debug visualizations. Values are sized for small square
capture frames (a few hundred pixels per side).

Used by:
- card_detection.py - Reference quad detection debug stages
- debug_observer.py - Stage overlays
- visualization.py - Final measurement overlay

Example usage:
    from finger_gauge.viz_constants import Color, FontScale, FontThickness, FONT_FACE

    cv2.putText(img, "Title", (8, 20), FONT_FACE,
                FontScale.TITLE, Color.WHITE,
                FontThickness.TITLE_OUTLINE, cv2.LINE_AA)
"""

import cv2

# ============================================================================
# FONT SETTINGS
# ============================================================================

# Font face used across all visualizations
FONT_FACE = cv2.FONT_HERSHEY_SIMPLEX


class FontScale:
    """Font scale constants for text hierarchy levels."""
    TITLE = 0.6          # Stage titles (e.g., "Edge Map")
    SUBTITLE = 0.5       # Secondary lines (e.g., "Candidates: 3")
    BODY = 0.45          # Result annotations
    SMALL = 0.35         # Landmark numbers


class FontThickness:
    """
    Font thickness (stroke width) for text rendering.

    Use OUTLINE variants for background layer to create outlined text effect.
    """
    TITLE = 2
    SUBTITLE = 1
    BODY = 1

    TITLE_OUTLINE = 4
    SUBTITLE_OUTLINE = 3
    BODY_OUTLINE = 3


# ============================================================================
# COLORS (BGR format for OpenCV)
# ============================================================================

class Color:
    """
    Standard colors used across all visualizations.

    All colors in BGR format (Blue, Green, Red) as required by OpenCV.
    """
    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)
    RED = (0, 0, 255)
    GREEN = (0, 255, 0)
    BLUE = (255, 0, 0)
    CYAN = (255, 255, 0)
    YELLOW = (0, 255, 255)
    MAGENTA = (255, 0, 255)
    ORANGE = (0, 128, 255)
    PINK = (128, 128, 255)

    # Semantic colors
    CARD = GREEN            # Accepted reference quad
    CANDIDATE = PINK        # Rejected 4-vertex candidates
    SKELETON = GREEN        # Hand connections
    LANDMARK = RED          # Landmark dots
    AXIS_LINE = YELLOW      # Ring finger axis
    PERPENDICULAR = ORANGE  # Perpendicular width segments
    TEXT_PRIMARY = WHITE
    TEXT_ERROR = RED


# ============================================================================
# DRAWING SIZES
# ============================================================================

class Size:
    """Size constants for drawing geometric elements. All sizes in pixels."""
    CORNER_RADIUS = 4
    POINT_RADIUS = 3
    CONTOUR_THICK = 2
    CONTOUR_NORMAL = 1
    LINE_THICK = 2
    LINE_NORMAL = 1


# ============================================================================
# LAYOUT CONSTANTS
# ============================================================================

class Layout:
    """Layout positioning constants. All positions in pixels from top-left."""
    TITLE_Y = 22
    SUBTITLE_Y = 44
    LINE_SPACING = 20
    TEXT_OFFSET_X = 8


def draw_outlined_text(image, text, position, font_scale, color,
                       thickness=FontThickness.BODY,
                       outline_thickness=FontThickness.BODY_OUTLINE):
    """
    Draw text with a black outline for better visibility.

    Args:
        image: Image to draw on (modified in place)
        text: Text string to draw
        position: (x, y) position tuple
        font_scale: Font scale (from FontScale)
        color: Main text color (from Color)
        thickness: Main text thickness
        outline_thickness: Outline thickness
    """
    cv2.putText(image, text, position, FONT_FACE,
                font_scale, Color.BLACK, outline_thickness, cv2.LINE_AA)
    cv2.putText(image, text, position, FONT_FACE,
                font_scale, color, thickness, cv2.LINE_AA)
