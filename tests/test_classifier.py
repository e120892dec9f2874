"""
Tests for the per-frame expression classifier and the coarse emotion detector.
"""

import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from expression_tasks.classifier import (
    EmotionLabel,
    ExpressionLabel,
    classify_expression,
    classify_signals,
    detect_emotion,
)
from expression_tasks.blendshapes import ExpressionSignals
from expression_tasks.config import EngineConfig

scores = st.floats(min_value=0.0, max_value=1.0, allow_nan=False, allow_infinity=False)


class TestClassifierPriority:

    def test_kiss_beats_smile(self):
        assert classify_expression(0.5, 0.0, 0.7) is ExpressionLabel.KISS

    @settings(max_examples=200)
    @given(smile=scores, brow=scores, kiss=st.floats(min_value=0.61, max_value=1.0))
    def test_kiss_always_wins(self, smile, brow, kiss):
        assert classify_expression(smile, brow, kiss) is ExpressionLabel.KISS

    @settings(max_examples=200)
    @given(
        smile=st.floats(min_value=0.36, max_value=1.0),
        brow=scores,
        kiss=st.floats(min_value=0.0, max_value=0.6),
    )
    def test_smile_beats_angry(self, smile, brow, kiss):
        assert classify_expression(smile, brow, kiss) is ExpressionLabel.SMILE

    def test_angry(self):
        assert classify_expression(0.1, 0.3, 0.1) is ExpressionLabel.ANGRY

    def test_neutral(self):
        assert classify_expression(0.1, 0.1, 0.1) is ExpressionLabel.NEUTRAL

    @pytest.mark.parametrize(
        "smile, brow, kiss",
        [
            (0.35, 0.0, 0.0),   # smile threshold is strict
            (0.0, 0.2, 0.0),    # brow threshold is strict
            (0.0, 0.0, 0.6),    # kiss threshold is strict
        ],
    )
    def test_thresholds_are_exclusive(self, smile, brow, kiss):
        assert classify_expression(smile, brow, kiss) is ExpressionLabel.NEUTRAL

    def test_custom_thresholds(self):
        config = EngineConfig(smile_threshold=0.8)
        assert classify_expression(0.5, 0.0, 0.0, config) is ExpressionLabel.NEUTRAL

    def test_classify_signals_reads_conditioned_channels(self):
        signals = ExpressionSignals(smile=0.5, brow=0.0, kiss=0.7, blink=0.0)
        assert classify_signals(signals) is ExpressionLabel.KISS


class TestDetectEmotion:

    def test_happy_needs_eye_squint(self):
        smile = {"mouthSmileLeft": 0.8, "mouthSmileRight": 0.8}
        assert detect_emotion(smile) is EmotionLabel.NEUTRAL

        smile.update({"eyeSquintLeft": 0.5, "eyeSquintRight": 0.5})
        assert detect_emotion(smile) is EmotionLabel.HAPPY

    def test_kiss(self):
        assert detect_emotion({"mouthPucker": 0.7}) is EmotionLabel.KISS

    def test_surprised(self):
        assert detect_emotion({"jawOpen": 0.8}) is EmotionLabel.SURPRISED

    def test_angry_requires_no_smile(self):
        frown = {"browDownLeft": 0.6, "browDownRight": 0.6}
        assert detect_emotion(frown) is EmotionLabel.ANGRY

        frown.update({"mouthSmileLeft": 0.4, "mouthSmileRight": 0.4})
        assert detect_emotion(frown) is EmotionLabel.NEUTRAL

    def test_empty_vector_is_neutral(self):
        assert detect_emotion({}) is EmotionLabel.NEUTRAL
