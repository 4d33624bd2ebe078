import math

import cv2
import numpy as np
import pytest

from finger_gauge.calibration import (
    CalibrationInput,
    CalibrationMethod,
    CalibrationResult,
    CardReferenceCalibration,
    FixedFrameCalibration,
    HeightHeuristicCalibration,
    create_strategy,
)
from finger_gauge.errors import DegenerateLine, MissingHeight, NoHandDetected, ReferenceNotFound
from finger_gauge.landmarks import HandLandmark

CARD_CORNERS = np.array([[40, 60], [200, 60], [200, 161], [40, 161]], dtype=np.float32)


def test_fixed_frame_scale():
    result = FixedFrameCalibration(200.0).calibrate(CalibrationInput(frame_size=300))
    assert result.mm_per_pixel == pytest.approx(200.0 / 300)
    assert result.method is CalibrationMethod.FIXED_FRAME
    assert result.reference_quad is None


def test_card_scale_from_quad_width():
    result = CardReferenceCalibration(85.6).calibrate_from_quad(CARD_CORNERS)
    assert result.mm_per_pixel == pytest.approx(85.6 / 160)
    assert result.method is CalibrationMethod.CARD_REFERENCE
    np.testing.assert_array_equal(result.reference_quad.corners, CARD_CORNERS)


@pytest.mark.parametrize("shift", [0, 1, 2, 3])
def test_card_scale_independent_of_corner_order(shift):
    strategy = CardReferenceCalibration()
    reference = strategy.calibrate_from_quad(CARD_CORNERS).mm_per_pixel
    rolled = np.roll(CARD_CORNERS, shift, axis=0)
    assert strategy.calibrate_from_quad(rolled).mm_per_pixel == pytest.approx(reference)
    assert strategy.calibrate_from_quad(rolled[::-1]).mm_per_pixel == pytest.approx(reference)


def test_card_calibration_on_image(card_image):
    result = CardReferenceCalibration().calibrate(
        CalibrationInput(frame_size=300, image=card_image)
    )
    assert result.mm_per_pixel == pytest.approx(85.6 / 171, rel=0.03)
    assert result.reference_quad is not None


@pytest.mark.parametrize("angle", [-5.0, 5.0])
def test_card_calibration_on_rotated_card(angle):
    image = np.zeros((300, 300, 3), dtype=np.uint8)
    box = cv2.boxPoints(((150.0, 150.0), (171.0, 108.0), angle))
    cv2.fillPoly(image, [np.round(box).astype(np.int32)], (255, 255, 255))

    result = CardReferenceCalibration().calibrate(
        CalibrationInput(frame_size=300, image=image)
    )

    assert result.mm_per_pixel == pytest.approx(85.6 / 171, rel=0.03)
    tl, tr, br, bl = result.reference_quad.corners
    assert tl[0] < tr[0] and bl[0] < br[0]
    assert max(tl[1], tr[1]) < min(bl[1], br[1])


def test_card_calibration_without_reference_fails():
    strategy = CardReferenceCalibration()
    with pytest.raises(ReferenceNotFound):
        strategy.calibrate(CalibrationInput(frame_size=300))
    with pytest.raises(ReferenceNotFound):
        strategy.calibrate(CalibrationInput(
            frame_size=300, image=np.zeros((300, 300, 3), dtype=np.uint8)
        ))


def test_height_heuristic_scale(make_hand):
    # Wrist at (150, 270) px, middle fingertip at (150, 150) px: 120 px apart
    hand = make_hand({
        HandLandmark.WRIST: (0.5, 0.9),
        HandLandmark.MIDDLE_FINGER_TIP: (0.5, 0.5),
    })
    result = HeightHeuristicCalibration(0.105).calibrate(
        CalibrationInput(frame_size=300, hand=hand, user_height_mm=1700)
    )
    assert result.mm_per_pixel == pytest.approx((1700 * 0.105) / 120)
    assert result.method is CalibrationMethod.HEIGHT_HEURISTIC


@pytest.mark.parametrize("height", [None, 0, -1700, float("nan")])
def test_height_heuristic_requires_height(make_hand, height):
    with pytest.raises(MissingHeight):
        HeightHeuristicCalibration().calibrate(
            CalibrationInput(frame_size=300, hand=make_hand(), user_height_mm=height)
        )


def test_height_heuristic_requires_hand():
    with pytest.raises(NoHandDetected):
        HeightHeuristicCalibration().calibrate(
            CalibrationInput(frame_size=300, user_height_mm=1700)
        )


def test_height_heuristic_degenerate_hand_length(make_hand):
    hand = make_hand({
        HandLandmark.WRIST: (0.5, 0.5),
        HandLandmark.MIDDLE_FINGER_TIP: (0.5, 0.5),
    })
    with pytest.raises(DegenerateLine):
        HeightHeuristicCalibration().calibrate(
            CalibrationInput(frame_size=300, hand=hand, user_height_mm=1700)
        )


@pytest.mark.parametrize("scale", [0.0, -0.5, math.inf, math.nan])
def test_calibration_result_rejects_invalid_scale(scale):
    with pytest.raises(ValueError):
        CalibrationResult(mm_per_pixel=scale, method=CalibrationMethod.FIXED_FRAME)


def test_create_strategy_is_explicit():
    assert isinstance(create_strategy("fixed_frame"), FixedFrameCalibration)
    assert isinstance(create_strategy(CalibrationMethod.CARD_REFERENCE), CardReferenceCalibration)
    strategy = create_strategy("height_heuristic", hand_length_fraction=0.1)
    assert isinstance(strategy, HeightHeuristicCalibration)
    assert strategy.hand_length_fraction == 0.1
    with pytest.raises(ValueError):
        create_strategy("auto")
