import math

import pytest

from finger_gauge.calibration import CalibrationMethod, CalibrationResult
from finger_gauge.errors import CalibrationUnavailable, DegenerateLine, NoHandDetected
from finger_gauge.landmarks import HandLandmark
from finger_gauge.measurement import (
    finger_circumference_mm,
    measure_finger_width,
    perpendicular_width_px,
)

S = 300
SCALE = CalibrationResult(mm_per_pixel=0.667, method=CalibrationMethod.FIXED_FRAME)


def _perp(px, py, x1, y1, x2, y2):
    return abs((y2 - y1) * px - (x2 - x1) * py + x2 * y1 - y2 * x1) / math.hypot(y2 - y1, x2 - x1)


def test_end_to_end_closed_form(ring_scenario_hand):
    measurement = measure_finger_width([ring_scenario_hand], SCALE, S)

    middle = _perp(0.45 * S, 0.6 * S, 0.5 * S, 0.5 * S, 0.5 * S, 0.6 * S)
    index = _perp(0.55 * S, 0.6 * S, 0.5 * S, 0.5 * S, 0.5 * S, 0.6 * S)
    expected = (middle + index) / 2 * 0.667

    assert measurement.finger_width_mm == pytest.approx(expected)
    assert measurement.finger_width_mm == pytest.approx(15 * 0.667)
    assert measurement.finger_width_cm == pytest.approx(expected / 10)
    assert measurement.mode == "perpendicular"
    assert measurement.confidence_percent == pytest.approx(93.0)
    assert measurement.confidence_source == "handedness"


def test_perpendicular_width_is_rotation_invariant(make_hand):
    base = {
        HandLandmark.RING_FINGER_MCP: (0.5, 0.5),
        HandLandmark.RING_FINGER_PIP: (0.5, 0.6),
        HandLandmark.MIDDLE_FINGER_PIP: (0.44, 0.62),
        HandLandmark.INDEX_FINGER_PIP: (0.57, 0.58),
    }
    reference = perpendicular_width_px(make_hand(base), S)

    angle = math.radians(35)
    cx, cy = 0.5, 0.5
    rotated = {}
    for key, (x, y) in base.items():
        dx, dy = x - cx, y - cy
        rotated[key] = (
            cx + dx * math.cos(angle) - dy * math.sin(angle),
            cy + dx * math.sin(angle) + dy * math.cos(angle),
        )

    assert perpendicular_width_px(make_hand(rotated), S) == pytest.approx(reference)


def test_pip_distance_mode(make_hand):
    hand = make_hand({
        HandLandmark.RING_FINGER_PIP: (0.6, 0.5),
        HandLandmark.MIDDLE_FINGER_PIP: (0.5, 0.5),
        HandLandmark.INDEX_FINGER_PIP: (0.4, 0.5),
    })
    measurement = measure_finger_width([hand], SCALE, S, mode="pip_distance")
    assert measurement.finger_width_mm == pytest.approx(30 * 0.667)
    assert measurement.mode == "pip_distance"


def test_no_hands_raises_no_hand_detected():
    with pytest.raises(NoHandDetected):
        measure_finger_width([], SCALE, S)


def test_missing_calibration_never_measures(ring_scenario_hand):
    with pytest.raises(CalibrationUnavailable):
        measure_finger_width([ring_scenario_hand], None, S)


def test_degenerate_finger_axis(make_hand):
    hand = make_hand({
        HandLandmark.RING_FINGER_MCP: (0.5, 0.5),
        HandLandmark.RING_FINGER_PIP: (0.5, 0.5),
    })
    with pytest.raises(DegenerateLine):
        measure_finger_width([hand], SCALE, S)


def test_unknown_mode_rejected(ring_scenario_hand):
    with pytest.raises(ValueError):
        measure_finger_width([ring_scenario_hand], SCALE, S, mode="caliper")


def test_confidence_not_invented(make_hand):
    measurement = measure_finger_width([make_hand()], SCALE, S)
    assert measurement.confidence_percent is None
    assert measurement.confidence_source is None


def test_measurement_is_immutable(ring_scenario_hand):
    measurement = measure_finger_width([ring_scenario_hand], SCALE, S)
    with pytest.raises(AttributeError):
        measurement.finger_width_mm = 1.0


def test_circumference():
    assert finger_circumference_mm(1.8) == pytest.approx(18 * math.pi)
