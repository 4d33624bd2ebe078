"""
Confidence signal utilities.

This module handles:
- Reading the detector's quality signal (handedness score or landmark depth)
- Scaling it to a 0-100 percentage
- Classifying a percentage into a qualitative level

The confidence is a pass-through of what the detector reports. When the
requested source has no data, the result is None rather than a made-up value.
"""

import logging
from typing import Literal, Optional, Tuple

import numpy as np

from .landmarks import HandDetection

logger = logging.getLogger(__name__)

ConfidenceSource = Literal["auto", "handedness", "depth"]

# Confidence level thresholds (percent)
CONFIDENCE_LEVEL_HIGH_THRESHOLD = 85.0   # > 85 = high
CONFIDENCE_LEVEL_MEDIUM_THRESHOLD = 60.0  # >= 60 = medium, < 60 = low


def handedness_confidence(hand: HandDetection) -> Optional[float]:
    """Detector handedness score scaled to percent, or None if not reported."""
    if hand.handedness_score is None:
        return None
    return float(np.clip(hand.handedness_score * 100.0, 0.0, 100.0))


def depth_confidence(hand: HandDetection) -> Optional[float]:
    """
    Mean landmark depth (z) scaled to percent, or None if depth is absent.

    Args:
        hand: Detected hand

    Returns:
        Percentage in [0, 100], or None
    """
    depths = np.array(hand.depth_values(), dtype=np.float64)
    if depths.size == 0 or not np.all(np.isfinite(depths)):
        return None
    if not np.any(depths):
        # All-zero z means the detector reported 2-D landmarks only
        return None
    return float(np.clip(np.mean(depths) * 100.0, 0.0, 100.0))


def compute_landmark_confidence(
    hand: HandDetection,
    source: ConfidenceSource = "auto",
) -> Tuple[Optional[float], Optional[str]]:
    """
    Select and compute the confidence signal for a detected hand.

    Args:
        hand: Detected hand
        source: "handedness", "depth", or "auto" (handedness first, then depth)

    Returns:
        Tuple of (confidence_percent, source_used); both None when the
        detector provided no usable signal
    """
    if source not in ("auto", "handedness", "depth"):
        raise ValueError(f"Unknown confidence source: {source}")

    if source in ("auto", "handedness"):
        percent = handedness_confidence(hand)
        if percent is not None:
            return percent, "handedness"
        if source == "handedness":
            return None, None

    percent = depth_confidence(hand)
    if percent is None:
        logger.debug("Detector reported no confidence signal")
        return None, None
    return percent, "depth"


def confidence_level(percent: Optional[float]) -> Optional[str]:
    """Classify a confidence percentage as "high", "medium", or "low"."""
    if percent is None:
        return None
    if percent > CONFIDENCE_LEVEL_HIGH_THRESHOLD:
        return "high"
    if percent >= CONFIDENCE_LEVEL_MEDIUM_THRESHOLD:
        return "medium"
    return "low"
