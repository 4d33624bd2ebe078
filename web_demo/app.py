#!/usr/bin/env python3
"""Simple web demo for finger-gauge.

Upload a hand photo (or post detector landmarks), run one capture session,
and return the measurement JSON.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict

import cv2
import numpy as np
from flask import Flask, jsonify, request

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

from finger_gauge.landmarks import hands_from_payload
from finger_gauge.session import SessionConfig, measure_capture

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}

app = Flask(__name__)


def _allowed_file(filename: str) -> bool:
    return Path(filename).suffix.lower() in ALLOWED_EXTENSIONS


def _parse_height(value: Any):
    if value is None or value == "":
        return None
    return float(value)


def _frame_from_upload(data: bytes, frame_size: int):
    image = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)
    if image is None:
        return None
    h, w = image.shape[:2]
    side = min(h, w)
    y0 = (h - side) // 2
    x0 = (w - side) // 2
    return cv2.resize(image[y0:y0 + side, x0:x0 + side], (frame_size, frame_size),
                      interpolation=cv2.INTER_AREA)


@app.route("/api/measure", methods=["POST"])
def api_measure():
    if "image" not in request.files:
        return jsonify({"success": False, "error": "Missing image file"}), 400

    file = request.files["image"]
    if file.filename == "":
        return jsonify({"success": False, "error": "Empty filename"}), 400

    if not _allowed_file(file.filename):
        return jsonify({"success": False, "error": "Unsupported file type"}), 400

    try:
        config = SessionConfig.from_dict(request.form.to_dict())
        user_height_mm = _parse_height(request.form.get("user_height_mm"))
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    frame = _frame_from_upload(file.read(), config.frame_size)
    if frame is None:
        return jsonify({"success": False, "error": "Failed to load image"}), 400

    if request.form.get("landmarks"):
        try:
            hands = hands_from_payload(json.loads(request.form["landmarks"]))
        except (ValueError, KeyError, TypeError) as e:
            return jsonify({"success": False, "error": f"Invalid landmarks: {e}"}), 400
    else:
        from finger_gauge.landmark_source import MediaPipeLandmarkSource

        source = MediaPipeLandmarkSource()
        try:
            hands = source.detect(frame)
        finally:
            source.close()

    result = measure_capture(hands, config, image=frame, user_height_mm=user_height_mm)
    return jsonify(_payload(result, config))


@app.route("/api/measure-landmarks", methods=["POST"])
def api_measure_landmarks():
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or "detection" not in body:
        return jsonify({"success": False, "error": "Expected JSON with a 'detection' object"}), 400

    try:
        config = SessionConfig.from_dict(body.get("config") or {})
        user_height_mm = _parse_height(body.get("user_height_mm"))
        hands = hands_from_payload(body["detection"])
    except (ValueError, KeyError, TypeError) as e:
        return jsonify({"success": False, "error": f"Invalid request: {e}"}), 400

    result = measure_capture(hands, config, user_height_mm=user_height_mm)
    return jsonify(_payload(result, config))


def _payload(result: Dict[str, Any], config: SessionConfig) -> Dict[str, Any]:
    return {
        "success": result.get("fail_reason") is None,
        "result": result,
        "config": config.to_dict(),
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=True)
