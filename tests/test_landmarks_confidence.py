import pytest

from finger_gauge.confidence import (
    compute_landmark_confidence,
    confidence_level,
)
from finger_gauge.landmarks import (
    FINGER_LANDMARKS,
    HandDetection,
    HandLandmark,
    Landmark,
    hand_from_points,
    hands_from_payload,
)

from .conftest import BASE_HAND_POINTS


def _payload(score=0.88, z=0.0, world_z=None):
    payload = {
        "landmarks": [[{"x": x, "y": y, "z": z} for x, y, _ in BASE_HAND_POINTS]],
        "handedness": [[{"score": score, "categoryName": "Right"}]] if score is not None else [],
    }
    if world_z is not None:
        payload["worldLandmarks"] = [[{"x": 0.01, "y": 0.02, "z": world_z} for _ in BASE_HAND_POINTS]]
    return payload


def test_landmark_indices_are_anatomical():
    assert HandLandmark.WRIST == 0
    assert FINGER_LANDMARKS["ring"] == (13, 14, 15, 16)
    assert HandLandmark.MIDDLE_FINGER_PIP == 10
    assert HandLandmark.INDEX_FINGER_PIP == 6


def test_hand_requires_21_landmarks():
    with pytest.raises(ValueError):
        hand_from_points(BASE_HAND_POINTS[:20])


def test_hand_rejects_reordered_landmarks():
    landmarks = [Landmark(index=i, x=0.1, y=0.1) for i in range(21)]
    landmarks[3], landmarks[4] = landmarks[4], landmarks[3]
    with pytest.raises(ValueError):
        HandDetection(landmarks=tuple(landmarks))


def test_hands_from_payload():
    hands = hands_from_payload(_payload())
    assert len(hands) == 1
    assert hands[0].handedness_score == pytest.approx(0.88)
    assert hands[0].handedness_label == "Right"
    assert hands[0][HandLandmark.RING_FINGER_MCP].x == pytest.approx(0.56)


def test_empty_payload_means_no_hands():
    assert hands_from_payload({"landmarks": [], "handedness": []}) == []
    assert hands_from_payload({}) == []


def test_payload_without_handedness():
    hands = hands_from_payload(_payload(score=None))
    assert hands[0].handedness_score is None


def test_auto_confidence_prefers_handedness():
    hand = hands_from_payload(_payload(score=0.9, z=0.5))[0]
    assert compute_landmark_confidence(hand) == (pytest.approx(90.0), "handedness")


def test_auto_confidence_falls_back_to_depth():
    hand = hands_from_payload(_payload(score=None, z=0.42))[0]
    percent, source = compute_landmark_confidence(hand)
    assert percent == pytest.approx(42.0)
    assert source == "depth"


def test_depth_confidence_is_clipped():
    hand = hands_from_payload(_payload(score=None, z=-0.3))[0]
    assert compute_landmark_confidence(hand, "depth")[0] == 0.0


def test_depth_confidence_reads_world_landmarks():
    # Normalized z is wrist-relative and mostly negative; world z carries the depth
    hand = hands_from_payload(_payload(score=None, z=-0.05, world_z=0.37))[0]
    assert hand.world_depths == tuple([0.37] * 21)
    assert compute_landmark_confidence(hand) == (pytest.approx(37.0), "depth")


def test_world_depths_must_cover_every_landmark():
    with pytest.raises(ValueError):
        hand_from_points(BASE_HAND_POINTS, world_depths=[0.1] * 20)


def test_explicit_source_does_not_substitute():
    hand = hands_from_payload(_payload(score=None, z=0.42))[0]
    assert compute_landmark_confidence(hand, "handedness") == (None, None)


def test_unknown_confidence_source():
    hand = hands_from_payload(_payload())[0]
    with pytest.raises(ValueError):
        compute_landmark_confidence(hand, "average")


@pytest.mark.parametrize("percent,level", [
    (None, None),
    (95.0, "high"),
    (85.0, "medium"),
    (60.0, "medium"),
    (59.9, "low"),
])
def test_confidence_level(percent, level):
    assert confidence_level(percent) == level


@pytest.mark.parametrize("payload", [
    [],
    "hands",
    {"landmarks": {"x": 0.5}},
    {"landmarks": [["not-a-point"] * 21]},
    {"landmarks": _payload()["landmarks"], "handedness": [["Right"]]},
])
def test_malformed_payload_rejected(payload):
    with pytest.raises(ValueError):
        hands_from_payload(payload)
