"""Smile score on a 0-100 scale.

A genuine smile raises the mouth corners and squints the eyes, so the score
weights both: 70% mouth, 30% eyes.
"""

import numpy as np

from .blendshapes import SMILE_SHAPES, SQUINT_SHAPES, BlendShapeVector, mean_score

MOUTH_WEIGHT = 0.7
EYE_WEIGHT = 0.3


def calculate_smile_score(blendshapes: BlendShapeVector) -> int:
    """Return the smile score in [0, 100]."""
    mouth = mean_score(blendshapes, SMILE_SHAPES)
    eyes = mean_score(blendshapes, SQUINT_SHAPES)
    raw = mouth * MOUTH_WEIGHT + eyes * EYE_WEIGHT
    return int(min(100, round_half_up(raw * 100)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (np.round rounds .5 to even)."""
    return int(np.floor(value + 0.5))


def smooth_score(previous: float, new: float, alpha: float = 0.25) -> int:
    """Rounded EMA step for integer scores."""
    return round_half_up(previous * (1 - alpha) + new * alpha)
