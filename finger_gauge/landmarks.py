"""
Hand landmark model.

This module handles:
- Named anatomical landmark indices (MediaPipe 21-point hand model)
- Landmark and per-hand detection value types
- Parsing detector payloads into typed detections
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple

NUM_HAND_LANDMARKS = 21


class HandLandmark(IntEnum):
    """Anatomical landmark indices. Within each finger: MCP, PIP, DIP, TIP."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


FINGER_LANDMARKS = {
    "thumb": (HandLandmark.THUMB_CMC, HandLandmark.THUMB_MCP,
              HandLandmark.THUMB_IP, HandLandmark.THUMB_TIP),
    "index": (HandLandmark.INDEX_FINGER_MCP, HandLandmark.INDEX_FINGER_PIP,
              HandLandmark.INDEX_FINGER_DIP, HandLandmark.INDEX_FINGER_TIP),
    "middle": (HandLandmark.MIDDLE_FINGER_MCP, HandLandmark.MIDDLE_FINGER_PIP,
               HandLandmark.MIDDLE_FINGER_DIP, HandLandmark.MIDDLE_FINGER_TIP),
    "ring": (HandLandmark.RING_FINGER_MCP, HandLandmark.RING_FINGER_PIP,
             HandLandmark.RING_FINGER_DIP, HandLandmark.RING_FINGER_TIP),
    "pinky": (HandLandmark.PINKY_MCP, HandLandmark.PINKY_PIP,
              HandLandmark.PINKY_DIP, HandLandmark.PINKY_TIP),
}

HAND_CONNECTIONS = [
    # Palm
    (0, 1), (0, 5), (0, 17), (5, 9), (9, 13), (13, 17),
    # Thumb
    (1, 2), (2, 3), (3, 4),
    # Index
    (5, 6), (6, 7), (7, 8),
    # Middle
    (9, 10), (10, 11), (11, 12),
    # Ring
    (13, 14), (14, 15), (15, 16),
    # Pinky
    (17, 18), (18, 19), (19, 20),
]


@dataclass(frozen=True)
class Landmark:
    """A single landmark in normalized capture-frame coordinates."""

    index: int
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class HandDetection:
    """
    One detected hand: 21 ordered landmarks plus the detector's handedness.

    ``world_depths`` holds the z of the detector's metric world landmarks
    when it reports them; depth confidence reads those in preference to the
    normalized landmark z.
    """

    landmarks: Tuple[Landmark, ...]
    handedness_score: Optional[float] = None
    handedness_label: Optional[str] = None
    world_depths: Optional[Tuple[float, ...]] = None

    def __post_init__(self):
        if len(self.landmarks) != NUM_HAND_LANDMARKS:
            raise ValueError(
                f"Expected {NUM_HAND_LANDMARKS} landmarks, got {len(self.landmarks)}"
            )
        for position, landmark in enumerate(self.landmarks):
            if landmark.index != position:
                raise ValueError(
                    f"Landmark at position {position} has index {landmark.index}"
                )
        if self.world_depths is not None and len(self.world_depths) != NUM_HAND_LANDMARKS:
            raise ValueError(
                f"Expected {NUM_HAND_LANDMARKS} world depths, got {len(self.world_depths)}"
            )

    def __getitem__(self, key: HandLandmark) -> Landmark:
        return self.landmarks[int(key)]

    def depth_values(self) -> List[float]:
        if self.world_depths is not None:
            return list(self.world_depths)
        return [landmark.z for landmark in self.landmarks]


def hand_from_points(
    points: Sequence[Sequence[float]],
    handedness_score: Optional[float] = None,
    handedness_label: Optional[str] = None,
    world_depths: Optional[Sequence[float]] = None,
) -> HandDetection:
    """
    Build a HandDetection from an ordered list of (x, y[, z]) tuples.

    Args:
        points: 21 normalized points in anatomical order
        handedness_score: Detector handedness confidence [0, 1]
        handedness_label: "Left" or "Right"
        world_depths: z of the 21 world landmarks, if reported

    Returns:
        HandDetection
    """
    landmarks = []
    for i, point in enumerate(points):
        z = float(point[2]) if len(point) > 2 else 0.0
        landmarks.append(Landmark(index=i, x=float(point[0]), y=float(point[1]), z=z))
    return HandDetection(
        landmarks=tuple(landmarks),
        handedness_score=handedness_score,
        handedness_label=handedness_label,
        world_depths=tuple(float(z) for z in world_depths) if world_depths is not None else None,
    )


def _expect_list(value: Any, name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{name}' must be a list, got {type(value).__name__}")
    return value


def _point(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"Landmark must be an object, got {type(raw).__name__}")
    return raw


def hands_from_payload(payload: Dict[str, Any]) -> List[HandDetection]:
    """
    Parse a detector result payload into typed hand detections.

    Accepts the shape produced by the MediaPipe Tasks hand landmarker:
    ``{"landmarks": [[{x, y, z}, ...]], "worldLandmarks": [[{x, y, z}, ...]],
    "handedness": [[{score, categoryName}]]}``. Hands without a matching
    handedness entry get ``handedness_score=None``; hands without world
    landmarks fall back to the normalized z for depth.

    Args:
        payload: Detector output dictionary

    Returns:
        List of HandDetection (empty if no hand was found)

    Raises:
        ValueError: If the payload does not have the expected shape
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Detection payload must be an object, got {type(payload).__name__}")

    handedness = _expect_list(payload.get("handedness"), "handedness")
    world = _expect_list(
        payload.get("worldLandmarks", payload.get("world_landmarks")), "worldLandmarks"
    )

    hands = []
    for i, raw_landmarks in enumerate(_expect_list(payload.get("landmarks"), "landmarks")):
        points = [
            (lm["x"], lm["y"], lm.get("z", 0.0))
            for lm in map(_point, _expect_list(raw_landmarks, "landmarks"))
        ]

        score = None
        label = None
        categories = _expect_list(handedness[i], "handedness") if i < len(handedness) else []
        if categories:
            category = categories[0]
            if not isinstance(category, dict):
                raise ValueError(
                    f"Handedness entry must be an object, got {type(category).__name__}"
                )
            if category.get("score") is not None:
                score = float(category["score"])
            label = category.get("categoryName") or category.get("label")

        world_depths = None
        if i < len(world) and world[i]:
            world_depths = [
                float(lm.get("z", 0.0)) for lm in map(_point, _expect_list(world[i], "worldLandmarks"))
            ]

        hands.append(hand_from_points(
            points,
            handedness_score=score,
            handedness_label=label,
            world_depths=world_depths,
        ))

    return hands
