#!/usr/bin/env python3
"""
Finger Width Measurement Tool

Estimates the ring finger width from a single hand photo. The physical scale
comes from one explicitly chosen calibration method: a fixed-size capture
guide, a credit card in the frame, or the user's body height.

Usage:
    python measure_finger.py --input image.jpg --output result.json [--method card_reference]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
import numpy as np

from finger_gauge.calibration import CalibrationMethod
from finger_gauge.calibration_constants import (
    CARD_WIDTH_MM,
    DEFAULT_FRAME_SIZE_PX,
    DEFAULT_FRAME_WIDTH_MM,
    HAND_LENGTH_TO_HEIGHT_RATIO,
)
from finger_gauge.landmarks import HandDetection, hands_from_payload
from finger_gauge.recommendation import RecommendationClient, recommend_for_width
from finger_gauge.session import SessionConfig, measure_capture
from finger_gauge.visualization import create_debug_visualization


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Measure ring finger width from a hand photo.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python measure_finger.py --input photo.jpg --output result.json
    python measure_finger.py --input photo.jpg --output result.json --method card_reference --debug overlay.png
    python measure_finger.py --input photo.jpg --output result.json --method height_heuristic --height-mm 1700
        """,
    )

    # Required arguments
    parser.add_argument("--input", type=str, required=True,
                        help="Path to input image (JPG/PNG)")
    parser.add_argument("--output", type=str, required=True,
                        help="Path to output JSON file")

    # Calibration
    parser.add_argument(
        "--method",
        type=str,
        choices=[m.value for m in CalibrationMethod],
        default=CalibrationMethod.FIXED_FRAME.value,
        help="Calibration method (default: fixed_frame)",
    )
    parser.add_argument("--frame-size", type=int, default=DEFAULT_FRAME_SIZE_PX,
                        help=f"Square capture frame side in pixels (default: {DEFAULT_FRAME_SIZE_PX})")
    parser.add_argument("--frame-width-mm", type=float, default=DEFAULT_FRAME_WIDTH_MM,
                        help=f"Physical width of the capture guide (default: {DEFAULT_FRAME_WIDTH_MM})")
    parser.add_argument("--card-width-mm", type=float, default=CARD_WIDTH_MM,
                        help=f"Reference card width (default: {CARD_WIDTH_MM})")
    parser.add_argument("--height-mm", type=float, default=None,
                        help="User height in mm (height_heuristic only)")
    parser.add_argument("--hand-length-fraction", type=float, default=HAND_LENGTH_TO_HEIGHT_RATIO,
                        help=f"Hand length / body height (default: {HAND_LENGTH_TO_HEIGHT_RATIO})")

    # Measurement
    parser.add_argument("--mode", type=str, choices=["perpendicular", "pip_distance"],
                        default="perpendicular",
                        help="Width measurement mode (default: perpendicular)")
    parser.add_argument("--confidence-source", type=str, choices=["auto", "handedness", "depth"],
                        default="auto",
                        help="Detector signal reported as confidence (default: auto)")
    parser.add_argument("--landmarks-json", type=str, default=None,
                        help="Use landmarks from a detector JSON dump instead of running MediaPipe")

    # Recommendation
    parser.add_argument("--recommend-url", type=str, default=None,
                        help="Ring size recommendation endpoint")
    parser.add_argument("--size-guide", type=str, default=None,
                        help="Size guide image sent with the recommendation request")

    # Debugging
    parser.add_argument("--debug", type=str, default=None,
                        help="Path to save debug visualization (PNG)")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")

    return parser.parse_args()


def validate_input(input_path: str) -> Optional[str]:
    """
    Validate input file exists and is a supported image format.

    Args:
        input_path: Path to input image

    Returns:
        Error message if validation fails, None if valid
    """
    path = Path(input_path)

    if not path.exists():
        return f"Input file not found: {input_path}"

    if not path.is_file():
        return f"Input path is not a file: {input_path}"

    suffix = path.suffix.lower()
    if suffix not in [".jpg", ".jpeg", ".png"]:
        return f"Unsupported image format: {suffix}. Use JPG or PNG."

    return None


def load_capture_frame(input_path: str, frame_size: int) -> Optional[np.ndarray]:
    """
    Load an image and frame it as a centered S x S capture.

    Args:
        input_path: Path to input image
        frame_size: Capture frame side length

    Returns:
        BGR frame of shape (S, S, 3), or None if load fails
    """
    image = cv2.imread(input_path)
    if image is None:
        return None

    h, w = image.shape[:2]
    side = min(h, w)
    y0 = (h - side) // 2
    x0 = (w - side) // 2
    square = image[y0:y0 + side, x0:x0 + side]

    return cv2.resize(square, (frame_size, frame_size), interpolation=cv2.INTER_AREA)


def load_hands(landmarks_json: Optional[str], frame: np.ndarray) -> List[HandDetection]:
    """Read landmarks from a JSON dump, or detect them with MediaPipe."""
    if landmarks_json is not None:
        with open(landmarks_json, "r", encoding="utf-8") as f:
            return hands_from_payload(json.load(f))

    from finger_gauge.landmark_source import MediaPipeLandmarkSource

    source = MediaPipeLandmarkSource()
    try:
        return source.detect(frame)
    finally:
        source.close()


def save_output(output: Dict[str, Any], output_path: str) -> None:
    """Save output dictionary to JSON file."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(output, f, indent=2)


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    error = validate_input(args.input)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    try:
        config = SessionConfig(
            calibration_method=args.method,
            frame_size=args.frame_size,
            known_frame_width_mm=args.frame_width_mm,
            card_width_mm=args.card_width_mm,
            hand_length_fraction=args.hand_length_fraction,
            measurement_mode=args.mode,
            confidence_source=args.confidence_source,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    frame = load_capture_frame(args.input, config.frame_size)
    if frame is None:
        print(f"Error: Failed to load image: {args.input}", file=sys.stderr)
        return 1

    print(f"Loaded image: {args.input} (framed to {config.frame_size}x{config.frame_size})")

    hands = load_hands(args.landmarks_json, frame)
    print(f"Hands detected: {len(hands)}")

    card_debug_dir = None
    if args.debug is not None:
        card_debug_dir = str(Path(args.debug).parent / "card_detection_debug")

    result = measure_capture(
        hands,
        config,
        image=frame,
        user_height_mm=args.height_mm,
        debug_dir=card_debug_dir if config.calibration_method is CalibrationMethod.CARD_REFERENCE else None,
    )

    if result["fail_reason"] is None and args.recommend_url:
        if args.size_guide is None:
            print("Warning: --recommend-url given without --size-guide, skipping recommendation")
        else:
            guide_bytes = Path(args.size_guide).read_bytes()
            client = RecommendationClient(args.recommend_url)
            recommendation, rec_error = recommend_for_width(
                client, result["finger_width_cm"], guide_bytes
            )
            result["recommendation"] = recommendation.to_dict() if recommendation else None
            result["recommendation_error"] = rec_error

    if args.debug is not None:
        debug_image = create_debug_visualization(
            image=frame,
            hand=hands[0] if hands else None,
            frame_size=config.frame_size,
            result=result,
            reference_quad=result.get("reference_quad"),
        )
        Path(args.debug).parent.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(args.debug, debug_image)
        print(f"Debug visualization saved to: {args.debug}")

    save_output(result, args.output)
    print(f"Results saved to: {args.output}")

    if result["fail_reason"]:
        print(f"Measurement failed: {result['fail_reason']}")
        return 1

    print(f"Finger width: {result['finger_width_mm']} mm ({result['finger_width_cm']} cm)")
    if result["confidence_percent"] is not None:
        print(f"Confidence: {result['confidence_percent']}% ({result['confidence_level']})")
    if result.get("recommendation"):
        print(f"Recommended size: {result['recommendation']['talla']} "
              f"({result['recommendation']['probabilidad']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
