"""
Constants for geometric computation module.

This module contains thresholds used by the geometry kernel and the
landmark-based length computations built on it.
"""

# =============================================================================
# Degeneracy Constants
# =============================================================================

# Epsilon for avoiding division by zero in normalization
EPSILON = 1e-8

# Minimum hand length (wrist to middle fingertip) in pixels
# Less than this suggests collapsed/invalid landmarks
MIN_HAND_LENGTH_PX = 1e-6
