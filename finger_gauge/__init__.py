"""
Finger width calibration and measurement from hand landmarks.
"""

from .calibration import (
    CalibrationInput,
    CalibrationMethod,
    CalibrationResult,
    CardReferenceCalibration,
    FixedFrameCalibration,
    HeightHeuristicCalibration,
    create_strategy,
)
from .card_detection import Quad, detect_reference_quad, order_corners
from .errors import (
    CalibrationFailure,
    CalibrationUnavailable,
    DegenerateLine,
    GaugeError,
    MissingHeight,
    NoHandDetected,
    RecommendationServiceError,
    ReferenceNotFound,
)
from .geometry import distance, line_through, perpendicular_distance
from .landmarks import HandDetection, HandLandmark, Landmark, hands_from_payload
from .measurement import Measurement, measure_finger_width
from .session import SessionConfig, measure_capture

__all__ = [
    "CalibrationInput",
    "CalibrationMethod",
    "CalibrationResult",
    "CardReferenceCalibration",
    "FixedFrameCalibration",
    "HeightHeuristicCalibration",
    "create_strategy",
    "Quad",
    "detect_reference_quad",
    "order_corners",
    "CalibrationFailure",
    "CalibrationUnavailable",
    "DegenerateLine",
    "GaugeError",
    "MissingHeight",
    "NoHandDetected",
    "RecommendationServiceError",
    "ReferenceNotFound",
    "distance",
    "line_through",
    "perpendicular_distance",
    "HandDetection",
    "HandLandmark",
    "Landmark",
    "hands_from_payload",
    "Measurement",
    "measure_finger_width",
    "SessionConfig",
    "measure_capture",
]
