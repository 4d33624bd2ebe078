"""
Failure taxonomy for calibration and measurement.

Each error carries a stable ``reason`` code that the session layer reports as
``fail_reason`` in its output dictionary.
"""


class GaugeError(Exception):
    """Base class for all recoverable measurement failures."""

    reason = "measurement_failed"


class NoHandDetected(GaugeError):
    reason = "no_hand_detected"


class DegenerateLine(GaugeError):
    """Two line-defining points coincide, or a length collapsed to ~0."""

    reason = "degenerate_line"


class CalibrationFailure(GaugeError):
    reason = "calibration_failed"


class ReferenceNotFound(CalibrationFailure):
    reason = "reference_not_found"


class MissingHeight(CalibrationFailure):
    reason = "missing_height"


class CalibrationUnavailable(GaugeError):
    reason = "calibration_unavailable"


class RecommendationServiceError(GaugeError):
    reason = "recommendation_service_error"
