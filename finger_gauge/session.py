"""
Capture session: calibrate, measure, and report one capture.

``measure_capture`` is a pure function of its inputs. It keeps no state
between calls, never retries, and never switches calibration strategy on
failure; every failure is reported through ``fail_reason``.
"""

import logging
import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .calibration import CalibrationInput, CalibrationMethod, CalibrationResult, create_strategy
from .calibration_constants import (
    CANNY_HIGH_THRESHOLD,
    CANNY_LOW_THRESHOLD,
    CARD_WIDTH_MM,
    DEFAULT_FRAME_SIZE_PX,
    DEFAULT_FRAME_WIDTH_MM,
    HAND_LENGTH_TO_HEIGHT_RATIO,
)
from .confidence import confidence_level
from .errors import GaugeError, NoHandDetected
from .landmarks import HandDetection
from .measurement import Measurement, finger_circumference_mm, measure_finger_width

logger = logging.getLogger(__name__)

MEASUREMENT_MODES = ("perpendicular", "pip_distance")
CONFIDENCE_SOURCES = ("auto", "handedness", "depth")


@dataclass(frozen=True)
class SessionConfig:
    """Per-session configuration. The calibration method is always explicit."""

    calibration_method: CalibrationMethod = CalibrationMethod.FIXED_FRAME
    frame_size: int = DEFAULT_FRAME_SIZE_PX
    known_frame_width_mm: float = DEFAULT_FRAME_WIDTH_MM
    card_width_mm: float = CARD_WIDTH_MM
    hand_length_fraction: float = HAND_LENGTH_TO_HEIGHT_RATIO
    measurement_mode: str = "perpendicular"
    confidence_source: str = "auto"
    canny_low: float = CANNY_LOW_THRESHOLD
    canny_high: float = CANNY_HIGH_THRESHOLD

    def __post_init__(self):
        object.__setattr__(self, "calibration_method", CalibrationMethod(self.calibration_method))
        if self.frame_size <= 0:
            raise ValueError(f"frame_size must be positive, got {self.frame_size}")
        for name in ("known_frame_width_mm", "card_width_mm", "hand_length_fraction"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be positive and finite, got {value}")
        if self.measurement_mode not in MEASUREMENT_MODES:
            raise ValueError(f"Unknown measurement mode: {self.measurement_mode}")
        if self.confidence_source not in CONFIDENCE_SOURCES:
            raise ValueError(f"Unknown confidence source: {self.confidence_source}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionConfig":
        """
        Build a config from loosely typed values (form fields, JSON).

        Unknown keys are ignored; missing keys take their defaults.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Config must be an object, got {type(data).__name__}")
        known = {f.name: f for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known or value is None or value == "":
                continue
            if key == "frame_size":
                value = int(value)
            elif key in ("known_frame_width_mm", "card_width_mm", "hand_length_fraction",
                         "canny_low", "canny_high"):
                value = float(value)
            kwargs[key] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["calibration_method"] = self.calibration_method.value
        return data


def create_output(
    measurement: Optional[Measurement] = None,
    calibration: Optional[CalibrationResult] = None,
    method: Optional[CalibrationMethod] = None,
    hand_detected: bool = False,
    fail_reason: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create the session output dictionary.

    Args:
        measurement: Successful measurement, if any
        calibration: Calibration used, if it succeeded
        method: Calibration method requested for the session
        hand_detected: Whether the landmark source found a hand
        fail_reason: Failure reason code if applicable

    Returns:
        Output dictionary
    """
    width_mm = measurement.finger_width_mm if measurement else None
    width_cm = measurement.finger_width_cm if measurement else None
    confidence = measurement.confidence_percent if measurement else None

    output = {
        "finger_width_mm": round(float(width_mm), 2) if width_mm is not None else None,
        "finger_width_cm": round(float(width_cm), 2) if width_cm is not None else None,
        "finger_circumference_mm": (
            round(finger_circumference_mm(width_cm), 2) if width_cm is not None else None
        ),
        "confidence_percent": round(float(confidence), 1) if confidence is not None else None,
        "confidence_level": confidence_level(confidence),
        "confidence_source": measurement.confidence_source if measurement else None,
        "measurement_mode": measurement.mode if measurement else None,
        "mm_per_pixel": round(float(calibration.mm_per_pixel), 4) if calibration else None,
        "calibration_method": method.value if method is not None else None,
        "quality_flags": {
            "hand_detected": bool(hand_detected),
            "calibration_ok": calibration is not None,
        },
        "fail_reason": fail_reason,
    }

    if calibration is not None and calibration.reference_quad is not None:
        output["reference_quad"] = calibration.reference_quad.corners.round(1).tolist()

    return output


def calibrate_capture(
    hands: Sequence[HandDetection],
    config: SessionConfig,
    image: Optional[np.ndarray] = None,
    user_height_mm: Optional[float] = None,
    debug_dir: Optional[str] = None,
) -> CalibrationResult:
    """Run the configured calibration strategy for one capture."""
    strategy = create_strategy(
        config.calibration_method,
        known_frame_width_mm=config.known_frame_width_mm,
        card_width_mm=config.card_width_mm,
        hand_length_fraction=config.hand_length_fraction,
        canny_low=config.canny_low,
        canny_high=config.canny_high,
    )
    inputs = CalibrationInput(
        frame_size=config.frame_size,
        image=image,
        hand=hands[0] if hands else None,
        user_height_mm=user_height_mm,
        debug_dir=debug_dir,
    )
    return strategy.calibrate(inputs)


def measure_capture(
    hands: Sequence[HandDetection],
    config: SessionConfig,
    image: Optional[np.ndarray] = None,
    user_height_mm: Optional[float] = None,
    debug_dir: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Calibrate and measure a single capture.

    Args:
        hands: Landmark source output for the capture (may be empty)
        config: Session configuration
        image: S x S BGR capture frame (required for card calibration)
        user_height_mm: User height (required for height calibration)
        debug_dir: Optional directory for card detection debug images

    Returns:
        Output dictionary; ``fail_reason`` is None on success
    """
    method = config.calibration_method

    if not hands:
        logger.info("No hand detected in capture")
        return create_output(method=method, fail_reason=NoHandDetected.reason)

    try:
        calibration = calibrate_capture(hands, config, image, user_height_mm, debug_dir)
    except GaugeError as e:
        logger.info(f"Calibration failed ({method.value}): {e}")
        return create_output(method=method, hand_detected=True, fail_reason=e.reason)

    try:
        measurement = measure_finger_width(
            hands,
            calibration,
            config.frame_size,
            mode=config.measurement_mode,
            confidence_source=config.confidence_source,
        )
    except GaugeError as e:
        logger.info(f"Measurement failed: {e}")
        return create_output(calibration=calibration, method=method,
                             hand_detected=True, fail_reason=e.reason)

    return create_output(
        measurement=measurement,
        calibration=calibration,
        method=method,
        hand_detected=True,
    )
