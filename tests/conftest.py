import cv2
import numpy as np
import pytest

from finger_gauge.landmarks import HandLandmark, hand_from_points

# A plausible open right hand, palm facing the camera, normalized coordinates
BASE_HAND_POINTS = [
    (0.50, 0.90, 0.0),   # wrist
    (0.35, 0.80, 0.0), (0.28, 0.72, 0.0), (0.23, 0.65, 0.0), (0.20, 0.58, 0.0),
    (0.40, 0.55, 0.0), (0.38, 0.45, 0.0), (0.37, 0.38, 0.0), (0.36, 0.32, 0.0),
    (0.48, 0.53, 0.0), (0.48, 0.42, 0.0), (0.48, 0.34, 0.0), (0.48, 0.27, 0.0),
    (0.56, 0.55, 0.0), (0.57, 0.45, 0.0), (0.58, 0.38, 0.0), (0.59, 0.32, 0.0),
    (0.63, 0.60, 0.0), (0.66, 0.52, 0.0), (0.68, 0.47, 0.0), (0.70, 0.42, 0.0),
]


def build_hand(overrides=None, handedness_score=None, z=None):
    points = [list(p) for p in BASE_HAND_POINTS]
    for key, xy in (overrides or {}).items():
        points[int(key)][0] = xy[0]
        points[int(key)][1] = xy[1]
    if z is not None:
        for p in points:
            p[2] = z
    return hand_from_points(points, handedness_score=handedness_score)


@pytest.fixture
def make_hand():
    return build_hand


@pytest.fixture
def ring_scenario_hand():
    """Ring axis vertical at x=0.5; middle/index PIPs 0.05 to either side."""
    return build_hand({
        HandLandmark.RING_FINGER_MCP: (0.5, 0.5),
        HandLandmark.RING_FINGER_PIP: (0.5, 0.6),
        HandLandmark.MIDDLE_FINGER_PIP: (0.45, 0.6),
        HandLandmark.INDEX_FINGER_PIP: (0.55, 0.6),
    }, handedness_score=0.93)


@pytest.fixture
def card_image():
    """300x300 frame with a filled card-shaped rectangle (172x109 px)."""
    image = np.zeros((300, 300, 3), dtype=np.uint8)
    cv2.rectangle(image, (50, 80), (221, 188), (255, 255, 255), -1)
    return image
