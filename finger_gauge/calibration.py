"""
Scale calibration strategies.

This module handles:
- Fixed capture-frame calibration
- Reference card calibration (via quad detection)
- Body-height heuristic calibration
- Explicit strategy selection

Every strategy either returns a CalibrationResult with a strictly positive,
finite mm-per-pixel scale or raises a CalibrationFailure. Strategies never
fall back to one another.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .calibration_constants import (
    CANNY_HIGH_THRESHOLD,
    CANNY_LOW_THRESHOLD,
    CARD_WIDTH_MM,
    DEFAULT_FRAME_WIDTH_MM,
    HAND_LENGTH_TO_HEIGHT_RATIO,
)
from .card_detection import Quad, detect_reference_quad
from .errors import DegenerateLine, MissingHeight, NoHandDetected, ReferenceNotFound
from .geometry import distance
from .geometry_constants import MIN_HAND_LENGTH_PX
from .landmarks import HandDetection, HandLandmark

logger = logging.getLogger(__name__)


class CalibrationMethod(str, Enum):
    FIXED_FRAME = "fixed_frame"
    CARD_REFERENCE = "card_reference"
    HEIGHT_HEURISTIC = "height_heuristic"


@dataclass(frozen=True, eq=False)
class CalibrationResult:
    """Millimeter-per-pixel scale for one capture."""

    mm_per_pixel: float
    method: CalibrationMethod
    reference_quad: Optional[Quad] = None

    def __post_init__(self):
        if not math.isfinite(self.mm_per_pixel) or self.mm_per_pixel <= 0:
            raise ValueError(f"mm_per_pixel must be positive and finite, got {self.mm_per_pixel}")


@dataclass(frozen=True)
class CalibrationInput:
    """Everything a strategy may need from the current capture."""

    frame_size: int
    image: Optional[np.ndarray] = None
    hand: Optional[HandDetection] = None
    user_height_mm: Optional[float] = None
    debug_dir: Optional[str] = None


class CalibrationStrategy(ABC):
    method: CalibrationMethod

    @abstractmethod
    def calibrate(self, inputs: CalibrationInput) -> CalibrationResult:
        """Produce a scale for this capture or raise CalibrationFailure."""


class FixedFrameCalibration(CalibrationStrategy):
    """
    The capture frame is assumed to span a known physical width.

    Least accurate of the strategies: hand-to-camera distance is not
    compensated at all.
    """

    method = CalibrationMethod.FIXED_FRAME

    def __init__(self, known_frame_width_mm: float = DEFAULT_FRAME_WIDTH_MM):
        if known_frame_width_mm <= 0:
            raise ValueError("known_frame_width_mm must be positive")
        self.known_frame_width_mm = known_frame_width_mm

    def calibrate(self, inputs: CalibrationInput) -> CalibrationResult:
        mm_per_pixel = self.known_frame_width_mm / inputs.frame_size
        logger.debug(f"Fixed frame: {self.known_frame_width_mm}mm / {inputs.frame_size}px")
        return CalibrationResult(mm_per_pixel=mm_per_pixel, method=self.method)


class CardReferenceCalibration(CalibrationStrategy):
    """Scale from a detected reference card of known real width."""

    method = CalibrationMethod.CARD_REFERENCE

    def __init__(
        self,
        card_width_mm: float = CARD_WIDTH_MM,
        canny_low: float = CANNY_LOW_THRESHOLD,
        canny_high: float = CANNY_HIGH_THRESHOLD,
    ):
        if card_width_mm <= 0:
            raise ValueError("card_width_mm must be positive")
        self.card_width_mm = card_width_mm
        self.canny_low = canny_low
        self.canny_high = canny_high

    def calibrate_from_quad(self, corners: np.ndarray) -> CalibrationResult:
        """
        Compute the scale for an already-located card quad.

        Args:
            corners: 4 corner points in any order

        Returns:
            CalibrationResult using the perspective-corrected card width
        """
        quad = Quad.from_points(corners)
        if quad.width <= 0:
            raise ReferenceNotFound("Reference quad has zero width")

        return CalibrationResult(
            mm_per_pixel=self.card_width_mm / quad.width,
            method=self.method,
            reference_quad=quad,
        )

    def calibrate(self, inputs: CalibrationInput) -> CalibrationResult:
        if inputs.image is None:
            raise ReferenceNotFound("No capture image supplied for card detection")

        detection = detect_reference_quad(
            inputs.image,
            canny_low=self.canny_low,
            canny_high=self.canny_high,
            debug_dir=inputs.debug_dir,
        )
        if detection is None:
            raise ReferenceNotFound("No card-shaped quadrilateral found in capture")

        result = self.calibrate_from_quad(detection["quad"].corners)
        logger.debug(f"Card reference: {self.card_width_mm}mm / {detection['quad'].width:.1f}px "
                     f"= {result.mm_per_pixel:.4f} mm/px")
        return result


class HeightHeuristicCalibration(CalibrationStrategy):
    """Scale from user height, assuming hand length is a fixed fraction of it."""

    method = CalibrationMethod.HEIGHT_HEURISTIC

    def __init__(self, hand_length_fraction: float = HAND_LENGTH_TO_HEIGHT_RATIO):
        if hand_length_fraction <= 0:
            raise ValueError("hand_length_fraction must be positive")
        self.hand_length_fraction = hand_length_fraction

    def calibrate(self, inputs: CalibrationInput) -> CalibrationResult:
        height = inputs.user_height_mm
        if height is None or not math.isfinite(height) or height <= 0:
            raise MissingHeight(f"User height must be a positive number of mm, got {height}")

        if inputs.hand is None:
            raise NoHandDetected("Height calibration needs a detected hand")

        hand_length_px = distance(
            inputs.hand[HandLandmark.WRIST],
            inputs.hand[HandLandmark.MIDDLE_FINGER_TIP],
            inputs.frame_size,
        )
        if hand_length_px < MIN_HAND_LENGTH_PX:
            raise DegenerateLine("Wrist and middle fingertip coincide; hand length is zero")

        hand_length_mm = height * self.hand_length_fraction
        logger.debug(f"Height heuristic: hand {hand_length_mm:.1f}mm over {hand_length_px:.1f}px")
        return CalibrationResult(
            mm_per_pixel=hand_length_mm / hand_length_px,
            method=self.method,
        )


def create_strategy(
    method,
    known_frame_width_mm: float = DEFAULT_FRAME_WIDTH_MM,
    card_width_mm: float = CARD_WIDTH_MM,
    hand_length_fraction: float = HAND_LENGTH_TO_HEIGHT_RATIO,
    canny_low: float = CANNY_LOW_THRESHOLD,
    canny_high: float = CANNY_HIGH_THRESHOLD,
) -> CalibrationStrategy:
    """
    Build the strategy explicitly requested for a session.

    Args:
        method: CalibrationMethod or its string value
        known_frame_width_mm: Physical width of the capture guide
        card_width_mm: Real width of the reference card
        hand_length_fraction: Hand length / body height ratio
        canny_low: Lower Canny threshold for card detection
        canny_high: Upper Canny threshold for card detection

    Returns:
        CalibrationStrategy instance

    Raises:
        ValueError: If the method is unknown
    """
    method = CalibrationMethod(method)

    if method is CalibrationMethod.FIXED_FRAME:
        return FixedFrameCalibration(known_frame_width_mm)
    if method is CalibrationMethod.CARD_REFERENCE:
        return CardReferenceCalibration(card_width_mm, canny_low, canny_high)
    return HeightHeuristicCalibration(hand_length_fraction)
