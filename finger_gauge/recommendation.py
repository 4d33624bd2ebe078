"""
Ring size recommendation service adapter.

This module handles:
- Building the request payload (finger width + size-guide image)
- Posting it to the recommendation endpoint
- Parsing the {talla, probabilidad} response

Failures here are reported as RecommendationServiceError and never
invalidate the measurement they were computed from.
"""

import base64
import http.client
import json
import logging
import re
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .errors import RecommendationServiceError

logger = logging.getLogger(__name__)

LIKELIHOOD_TIERS = ("Alta", "Media", "Baja")
DEFAULT_TIMEOUT_S = 30.0

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass(frozen=True)
class RingSizeRecommendation:
    size_label: str
    likelihood: str

    def to_dict(self) -> Dict[str, str]:
        return {"talla": self.size_label, "probabilidad": self.likelihood}


def build_recommendation_request(finger_width_cm: float, image_bytes: bytes) -> Dict[str, Any]:
    """
    Build the JSON body sent to the recommendation service.

    Args:
        finger_width_cm: Measured finger width in cm
        image_bytes: Encoded size-guide image (PNG/JPEG)

    Returns:
        Request dictionary
    """
    return {
        "fingerWidthCm": float(finger_width_cm),
        "referenceImageBase64": base64.b64encode(image_bytes).decode("ascii"),
    }


def _loads(text: str) -> Any:
    text = text.strip()
    match = _CODE_FENCE.match(text)
    if match:
        text = match.group(1)
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise RecommendationServiceError(f"Response is not valid JSON: {e}") from e


def parse_recommendation(text: str) -> RingSizeRecommendation:
    """
    Parse a recommendation service response.

    Accepts the bare ``{"talla": ..., "probabilidad": ...}`` object or the
    ``{"recommendation": "<json text>"}`` envelope, optionally wrapped in a
    Markdown code fence.

    Args:
        text: Raw response body

    Returns:
        RingSizeRecommendation

    Raises:
        RecommendationServiceError: If the response is malformed
    """
    data = _loads(text)

    if isinstance(data, dict) and "error" in data and "talla" not in data:
        raise RecommendationServiceError(f"Service reported an error: {data['error']}")

    if isinstance(data, dict) and "recommendation" in data:
        inner = data["recommendation"]
        data = _loads(inner) if isinstance(inner, str) else inner

    if not isinstance(data, dict):
        raise RecommendationServiceError(f"Expected a JSON object, got {type(data).__name__}")

    size_label = data.get("talla")
    likelihood = data.get("probabilidad")

    if size_label is None or str(size_label).strip() == "":
        raise RecommendationServiceError("Response has no 'talla'")
    if likelihood not in LIKELIHOOD_TIERS:
        raise RecommendationServiceError(f"Unknown 'probabilidad' tier: {likelihood!r}")

    return RingSizeRecommendation(size_label=str(size_label), likelihood=likelihood)


class RecommendationClient:
    """HTTP client for the ring size recommendation endpoint."""

    def __init__(self, endpoint_url: str, timeout: float = DEFAULT_TIMEOUT_S):
        self.endpoint_url = endpoint_url
        self.timeout = timeout

    def recommend(self, finger_width_cm: float, image_bytes: bytes) -> RingSizeRecommendation:
        """
        Request a ring size for the given finger width.

        Args:
            finger_width_cm: Measured finger width in cm
            image_bytes: Encoded size-guide image

        Returns:
            RingSizeRecommendation

        Raises:
            RecommendationServiceError: On network, HTTP, or parse failure
        """
        body = json.dumps(build_recommendation_request(finger_width_cm, image_bytes)).encode("utf-8")
        request = urllib.request.Request(
            self.endpoint_url,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                text = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            raise RecommendationServiceError(f"Service returned HTTP {e.code}") from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise RecommendationServiceError(f"Could not reach recommendation service: {e}") from e
        except UnicodeDecodeError as e:
            raise RecommendationServiceError(f"Response is not valid UTF-8: {e}") from e

        return parse_recommendation(text)


def recommend_for_width(
    client: RecommendationClient,
    finger_width_cm: float,
    image_bytes: bytes,
) -> Tuple[Optional[RingSizeRecommendation], Optional[str]]:
    """
    Ask for a recommendation without letting its failure affect the measurement.

    Args:
        client: Recommendation client
        finger_width_cm: Width from a successful measurement
        image_bytes: Encoded size-guide image

    Returns:
        Tuple of (recommendation, error_reason); exactly one is None
    """
    try:
        return client.recommend(finger_width_cm, image_bytes), None
    except RecommendationServiceError as e:
        logger.warning(f"Recommendation failed: {e}")
        return None, e.reason
