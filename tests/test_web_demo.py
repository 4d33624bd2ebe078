import importlib.util
from pathlib import Path

import pytest

from .conftest import BASE_HAND_POINTS

APP_PATH = Path(__file__).resolve().parents[1] / "web_demo" / "app.py"


@pytest.fixture
def client():
    spec = importlib.util.spec_from_file_location("web_demo_app", APP_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    module.app.config["TESTING"] = True
    return module.app.test_client()


def _detection(score=0.9):
    return {
        "landmarks": [[{"x": x, "y": y, "z": z} for x, y, z in BASE_HAND_POINTS]],
        "handedness": [[{"score": score, "categoryName": "Left"}]],
    }


def test_measure_landmarks(client):
    response = client.post("/api/measure-landmarks", json={
        "detection": _detection(),
        "config": {"calibration_method": "fixed_frame", "frame_size": 300},
    })
    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["result"]["finger_width_mm"] > 0
    assert body["config"]["calibration_method"] == "fixed_frame"


def test_measure_landmarks_no_hand(client):
    response = client.post("/api/measure-landmarks", json={
        "detection": {"landmarks": [], "handedness": []},
    })
    body = response.get_json()
    assert body["success"] is False
    assert body["result"]["fail_reason"] == "no_hand_detected"


def test_measure_landmarks_bad_config(client):
    response = client.post("/api/measure-landmarks", json={
        "detection": _detection(),
        "config": {"calibration_method": "magic"},
    })
    assert response.status_code == 400


def test_measure_requires_image(client):
    response = client.post("/api/measure", data={})
    assert response.status_code == 400


@pytest.mark.parametrize("config", [
    {"known_frame_width_mm": 0},
    {"calibration_method": "height_heuristic", "hand_length_fraction": "inf"},
])
def test_measure_landmarks_rejects_unusable_scale_config(client, config):
    response = client.post("/api/measure-landmarks", json={
        "detection": _detection(),
        "config": config,
        "user_height_mm": 1700,
    })
    assert response.status_code == 400
    assert response.get_json()["success"] is False


@pytest.mark.parametrize("detection", [
    [_detection()],
    {"landmarks": _detection()["landmarks"], "handedness": [["Left"]]},
])
def test_measure_landmarks_rejects_malformed_detection(client, detection):
    response = client.post("/api/measure-landmarks", json={"detection": detection})
    assert response.status_code == 400
