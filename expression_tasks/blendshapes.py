"""
Blend-shape channels consumed by the expression task engine.

A blend-shape vector is a plain mapping from MediaPipe Face Landmarker
category names to scores in [0, 1]. This module reduces it to the four
channels the task engine reads: smile, brow, kiss and blink.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

import numpy as np

BlendShapeVector = Mapping[str, float]

# MediaPipe blend-shape category names per channel
SMILE_SHAPES = ("mouthSmileLeft", "mouthSmileRight")
BROW_SHAPES = ("browDownLeft", "browDownRight")
KISS_SHAPES = ("mouthPucker",)
BLINK_SHAPES = ("eyeBlinkLeft", "eyeBlinkRight")
SQUINT_SHAPES = ("eyeSquintLeft", "eyeSquintRight")
JAW_OPEN_SHAPES = ("jawOpen",)


def score(blendshapes: BlendShapeVector, name: str) -> float:
    """Read a single blend-shape score; absent entries are 0."""
    value = blendshapes.get(name)
    if value is None:
        return 0.0
    return float(value)


def mean_score(blendshapes: BlendShapeVector, names: Iterable[str]) -> float:
    """Average the scores of several blend shapes (missing ones count as 0)."""
    values = [score(blendshapes, name) for name in names]
    if not values:
        return 0.0
    return float(np.mean(values))


def blendshapes_from_categories(categories) -> Dict[str, float]:
    """
    Convert MediaPipe ``Category`` results into a blend-shape vector.

    Args:
        categories: Iterable of objects with ``category_name`` and ``score``
            attributes, as returned in ``FaceLandmarkerResult.face_blendshapes[i]``.

    Returns:
        Dict mapping category name to score
    """
    return {
        category.category_name: float(category.score)
        for category in categories
        if category.category_name
    }


@dataclass
class ExpressionSignals:
    """Per-frame expression channels.

    The same structure carries raw channels straight from the blend-shape
    vector and the engine's conditioned view of them (smoothed smile and
    brow, raw kiss and blink).

    All values are in [0, 1].
    """

    smile: float = 0.0   # mouth smile, left/right mean
    brow: float = 0.0    # brow down, left/right mean
    kiss: float = 0.0    # mouth pucker
    blink: float = 0.0   # eye blink, left/right mean

    NUM_CHANNELS = 4

    @classmethod
    def from_blendshapes(cls, blendshapes: BlendShapeVector) -> 'ExpressionSignals':
        """
        Derive the four channels from a blend-shape vector.

        The vector is only read, never modified. Missing entries are treated
        as "no signal" and read as 0.
        """
        return cls(
            smile=mean_score(blendshapes, SMILE_SHAPES),
            brow=mean_score(blendshapes, BROW_SHAPES),
            kiss=mean_score(blendshapes, KISS_SHAPES),
            blink=mean_score(blendshapes, BLINK_SHAPES),
        )

    @classmethod
    def neutral(cls) -> 'ExpressionSignals':
        """Signals for a relaxed face (or no face at all)."""
        return cls()

    def to_array(self) -> np.ndarray:
        """Return channels as a (4,) array ordered smile, brow, kiss, blink."""
        return np.array(
            [self.smile, self.brow, self.kiss, self.blink], dtype=np.float64
        )
