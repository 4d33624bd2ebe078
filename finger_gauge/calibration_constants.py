"""
Constants for scale calibration and reference quad detection.

This module contains physical reference sizes, anthropometric ratios, and
detector thresholds used when establishing a millimeter-per-pixel scale.
"""

# =============================================================================
# Capture Frame Constants
# =============================================================================

# Side length of the square capture frame (pixels)
DEFAULT_FRAME_SIZE_PX = 300

# Physical width covered by the on-screen capture guide (mm)
# The user aligns their hand to a guide of this real-world width
DEFAULT_FRAME_WIDTH_MM = 200.0


# =============================================================================
# Reference Card Constants
# =============================================================================

# Standard credit card dimensions (ISO/IEC 7810 ID-1)
CARD_WIDTH_MM = 85.60
CARD_HEIGHT_MM = 53.98
CARD_ASPECT_RATIO = CARD_WIDTH_MM / CARD_HEIGHT_MM  # ~1.586

# Accepted bounding-box aspect ratio range (width / height)
CARD_MIN_ASPECT_RATIO = 1.4
CARD_MAX_ASPECT_RATIO = 1.8


# =============================================================================
# Quad Detection Constants
# =============================================================================

# Gaussian smoothing kernel applied before edge detection
BLUR_KERNEL_SIZE = (5, 5)

# Canny hysteresis thresholds
CANNY_LOW_THRESHOLD = 50
CANNY_HIGH_THRESHOLD = 150

# Polygon approximation tolerance as a fraction of contour perimeter
POLY_EPSILON_FACTOR = 0.02


# =============================================================================
# Height Heuristic Constants
# =============================================================================

# Hand length (wrist crease to middle fingertip) as a fraction of body height
HAND_LENGTH_TO_HEIGHT_RATIO = 0.108
