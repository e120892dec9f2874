"""
Per-frame expression labels for UI feedback.

These labels only drive on-screen feedback; task success is decided by the
rules in ``expression_tasks.rules`` with their own thresholds.
"""

from enum import Enum
from typing import Optional

from .blendshapes import (
    BROW_SHAPES,
    JAW_OPEN_SHAPES,
    KISS_SHAPES,
    SMILE_SHAPES,
    SQUINT_SHAPES,
    BlendShapeVector,
    ExpressionSignals,
    mean_score,
)
from .config import EngineConfig


class ExpressionLabel(str, Enum):
    KISS = "kiss"
    SMILE = "smile"
    ANGRY = "angry"
    NEUTRAL = "neutral"


class EmotionLabel(str, Enum):
    HAPPY = "happy"
    KISS = "kiss"
    SURPRISED = "surprised"
    ANGRY = "angry"
    NEUTRAL = "neutral"


def classify_expression(
    smoothed_smile: float,
    smoothed_brow: float,
    raw_kiss: float,
    config: Optional[EngineConfig] = None,
) -> ExpressionLabel:
    """
    Label the current expression; first match wins.

    Kiss is checked before smile because a puckered smile raises both
    channels and must read as a kiss.

    Args:
        smoothed_smile: Smoothed smile score
        smoothed_brow: Smoothed brow-down score
        raw_kiss: Unsmoothed pucker score
        config: Thresholds (defaults used if None)

    Returns:
        ExpressionLabel
    """
    config = config or EngineConfig()

    if raw_kiss > config.kiss_threshold:
        return ExpressionLabel.KISS
    if smoothed_smile > config.smile_threshold:
        return ExpressionLabel.SMILE
    if smoothed_brow > config.brow_threshold:
        return ExpressionLabel.ANGRY
    return ExpressionLabel.NEUTRAL


def classify_signals(
    signals: ExpressionSignals, config: Optional[EngineConfig] = None
) -> ExpressionLabel:
    """Label conditioned signals (smoothed smile/brow, raw kiss)."""
    return classify_expression(signals.smile, signals.brow, signals.kiss, config)


def detect_emotion(blendshapes: BlendShapeVector) -> EmotionLabel:
    """
    Coarse emotion label straight from raw blend shapes.

    A genuine smile needs squinting eyes as well as raised mouth corners.
    """
    smile = mean_score(blendshapes, SMILE_SHAPES)
    eye_squint = mean_score(blendshapes, SQUINT_SHAPES)
    pucker = mean_score(blendshapes, KISS_SHAPES)
    jaw_open = mean_score(blendshapes, JAW_OPEN_SHAPES)
    brow_down = mean_score(blendshapes, BROW_SHAPES)

    if smile > 0.5 and eye_squint > 0.3:
        return EmotionLabel.HAPPY
    if pucker > 0.6:
        return EmotionLabel.KISS
    if jaw_open > 0.6:
        return EmotionLabel.SURPRISED
    if brow_down > 0.4 and smile < 0.2:
        return EmotionLabel.ANGRY
    return EmotionLabel.NEUTRAL
