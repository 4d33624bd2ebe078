"""
Hand landmark source backed by the MediaPipe hand landmarker.

This module handles:
- Downloading the hand landmarker model on first use
- Running detection on a BGR capture frame
- Converting results to HandDetection values
"""

import logging
import os
import urllib.request
from typing import List, Optional

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from .landmarks import HandDetection, hand_from_points

logger = logging.getLogger(__name__)

MODEL_PATH = os.path.join(os.path.dirname(__file__), "..", "model", "hand_landmarker.task")
MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"


def download_model(model_path: str = MODEL_PATH, model_url: str = MODEL_URL) -> str:
    """Download the hand landmarker model if not present."""
    if not os.path.exists(model_path):
        os.makedirs(os.path.dirname(model_path), exist_ok=True)
        logger.info("Downloading hand landmarker model...")
        urllib.request.urlretrieve(model_url, model_path)
        logger.info(f"Model downloaded to {model_path}")
    return model_path


class MediaPipeLandmarkSource:
    """Detect hands in a capture frame; returns an empty list when none is found."""

    def __init__(
        self,
        model_path: str = MODEL_PATH,
        num_hands: int = 1,
        min_detection_confidence: float = 0.3,
    ):
        self.model_path = model_path
        self.num_hands = num_hands
        self.min_detection_confidence = min_detection_confidence
        self._detector = None

    def _get_detector(self):
        """Get or initialize the MediaPipe hand landmarker."""
        if self._detector is None:
            download_model(self.model_path)
            base_options = python.BaseOptions(model_asset_path=self.model_path)
            options = vision.HandLandmarkerOptions(
                base_options=base_options,
                num_hands=self.num_hands,
                min_hand_detection_confidence=self.min_detection_confidence,
            )
            self._detector = vision.HandLandmarker.create_from_options(options)
        return self._detector

    def detect(self, image: np.ndarray) -> List[HandDetection]:
        """
        Detect hands in a BGR image.

        Args:
            image: BGR capture frame

        Returns:
            List of HandDetection in detector order (empty if no hand)
        """
        rgb = np.ascontiguousarray(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        results = self._get_detector().detect(mp_image)

        hands = []
        for i, hand_landmarks in enumerate(results.hand_landmarks):
            score: Optional[float] = None
            label: Optional[str] = None
            if i < len(results.handedness) and results.handedness[i]:
                category = results.handedness[i][0]
                score = float(category.score)
                label = category.category_name

            world_depths = None
            if i < len(results.hand_world_landmarks):
                world_depths = [lm.z for lm in results.hand_world_landmarks[i]]

            points = [(lm.x, lm.y, lm.z) for lm in hand_landmarks]
            hands.append(hand_from_points(
                points,
                handedness_score=score,
                handedness_label=label,
                world_depths=world_depths,
            ))

        logger.debug(f"Detected {len(hands)} hand(s)")
        return hands

    def close(self) -> None:
        if self._detector is not None:
            self._detector.close()
            self._detector = None
