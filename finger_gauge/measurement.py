"""
Finger width measurement.

This module handles:
- Rotation-compensated ring finger width from perpendicular distances
- Simple adjacent-PIP distance width
- Packaging the width with the detector's confidence signal
"""

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from .calibration import CalibrationResult
from .confidence import ConfidenceSource, compute_landmark_confidence
from .errors import CalibrationUnavailable, NoHandDetected
from .geometry import distance, landmark_to_pixel, line_through, perpendicular_distance
from .landmarks import HandDetection, HandLandmark

logger = logging.getLogger(__name__)

MeasurementMode = Literal["perpendicular", "pip_distance"]


@dataclass(frozen=True)
class Measurement:
    """Finger width for one capture. Immutable once created."""

    finger_width_mm: float
    confidence_percent: Optional[float]
    mode: str
    confidence_source: Optional[str] = None

    @property
    def finger_width_cm(self) -> float:
        return self.finger_width_mm / 10.0


def perpendicular_width_px(hand: HandDetection, frame_size: int) -> float:
    """
    Ring finger width measured orthogonally to its own axis.

    The axis runs through the ring finger MCP and PIP. The width is the mean
    perpendicular distance from the middle and index PIP joints to that axis,
    which keeps the measurement stable under in-plane hand rotation.

    Args:
        hand: Detected hand
        frame_size: Capture frame side length in pixels

    Returns:
        Width in pixels

    Raises:
        DegenerateLine: If ring MCP and PIP coincide
    """
    def px(key: HandLandmark):
        return landmark_to_pixel(hand[key], frame_size)

    axis = line_through(px(HandLandmark.RING_FINGER_MCP), px(HandLandmark.RING_FINGER_PIP))
    middle = perpendicular_distance(px(HandLandmark.MIDDLE_FINGER_PIP), axis)
    index = perpendicular_distance(px(HandLandmark.INDEX_FINGER_PIP), axis)

    logger.debug(f"Perpendicular distances: middle={middle:.2f}px, index={index:.2f}px")
    return (middle + index) / 2


def pip_distance_width_px(hand: HandDetection, frame_size: int) -> float:
    """
    Mean straight-line distance between adjacent PIP joints.

    Cheaper than the perpendicular method but sensitive to hand rotation.
    """
    ring_to_middle = distance(
        hand[HandLandmark.RING_FINGER_PIP], hand[HandLandmark.MIDDLE_FINGER_PIP], frame_size
    )
    middle_to_index = distance(
        hand[HandLandmark.MIDDLE_FINGER_PIP], hand[HandLandmark.INDEX_FINGER_PIP], frame_size
    )
    return (ring_to_middle + middle_to_index) / 2


def measure_finger_width(
    hands: Sequence[HandDetection],
    calibration: Optional[CalibrationResult],
    frame_size: int,
    mode: MeasurementMode = "perpendicular",
    confidence_source: ConfidenceSource = "auto",
) -> Measurement:
    """
    Measure the ring finger width of the first detected hand.

    Args:
        hands: Landmark source output (may be empty)
        calibration: Scale for this capture, or None if calibration failed
        frame_size: Capture frame side length in pixels
        mode: "perpendicular" (rotation-compensated) or "pip_distance"
        confidence_source: Which detector signal to report as confidence

    Returns:
        Measurement

    Raises:
        NoHandDetected: If hands is empty
        CalibrationUnavailable: If calibration is None
        DegenerateLine: If the finger axis is degenerate
    """
    if not hands:
        raise NoHandDetected("Landmark source returned no hands")
    if calibration is None:
        raise CalibrationUnavailable("Cannot measure without a valid calibration")

    hand = hands[0]

    if mode == "perpendicular":
        width_px = perpendicular_width_px(hand, frame_size)
    elif mode == "pip_distance":
        width_px = pip_distance_width_px(hand, frame_size)
    else:
        raise ValueError(f"Unknown measurement mode: {mode}")

    width_mm = width_px * calibration.mm_per_pixel
    if not math.isfinite(width_mm):
        raise CalibrationUnavailable(f"Non-finite width from scale {calibration.mm_per_pixel}")

    confidence_percent, source_used = compute_landmark_confidence(hand, confidence_source)

    logger.debug(f"Finger width: {width_px:.2f}px x {calibration.mm_per_pixel:.4f} mm/px "
                 f"= {width_mm:.2f}mm ({mode})")

    return Measurement(
        finger_width_mm=width_mm,
        confidence_percent=confidence_percent,
        mode=mode,
        confidence_source=source_used,
    )


def finger_circumference_mm(width_cm: float) -> float:
    """Circumference in mm of a circular finger of the given width in cm."""
    return width_cm * math.pi * 10
