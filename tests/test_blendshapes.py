"""
Tests for blend-shape channel derivation, the smile score and the smile counter.
"""

from types import SimpleNamespace

import numpy as np
import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from expression_tasks.blendshapes import (
    ExpressionSignals,
    blendshapes_from_categories,
    score,
)
from expression_tasks.counter import SmileCounter
from expression_tasks.scoring import calculate_smile_score, round_half_up, smooth_score


class TestExpressionSignals:

    def test_channels_average_left_and_right(self):
        signals = ExpressionSignals.from_blendshapes({
            "mouthSmileLeft": 0.6, "mouthSmileRight": 0.4,
            "browDownLeft": 0.2, "browDownRight": 0.0,
            "mouthPucker": 0.7,
            "eyeBlinkLeft": 1.0, "eyeBlinkRight": 0.8,
        })

        assert signals.smile == pytest.approx(0.5)
        assert signals.brow == pytest.approx(0.1)
        assert signals.kiss == pytest.approx(0.7)
        assert signals.blink == pytest.approx(0.9)

    def test_missing_entries_read_as_zero(self):
        signals = ExpressionSignals.from_blendshapes({"mouthSmileLeft": 0.8})

        assert signals.smile == pytest.approx(0.4)
        assert signals.brow == 0.0
        assert signals.kiss == 0.0
        assert signals.blink == 0.0

    def test_unrelated_shapes_ignored(self):
        signals = ExpressionSignals.from_blendshapes({"jawOpen": 1.0, "cheekPuff": 1.0})
        assert signals == ExpressionSignals.neutral()

    def test_none_score_reads_as_zero(self):
        assert score({"mouthPucker": None}, "mouthPucker") == 0.0

    def test_to_array(self):
        arr = ExpressionSignals(smile=0.1, brow=0.2, kiss=0.3, blink=0.4).to_array()

        assert arr.shape == (ExpressionSignals.NUM_CHANNELS,)
        np.testing.assert_allclose(arr, [0.1, 0.2, 0.3, 0.4])

    def test_from_mediapipe_categories(self):
        categories = [
            SimpleNamespace(category_name="_neutral", score=0.9),
            SimpleNamespace(category_name="mouthPucker", score=0.75),
            SimpleNamespace(category_name="", score=0.5),
        ]

        vector = blendshapes_from_categories(categories)

        assert vector == {"_neutral": 0.9, "mouthPucker": 0.75}


class TestSmileScore:

    def test_mouth_and_eyes_weighted(self):
        blendshapes = {
            "mouthSmileLeft": 1.0, "mouthSmileRight": 1.0,
            "eyeSquintLeft": 0.5, "eyeSquintRight": 0.5,
        }
        # 1.0 * 0.7 + 0.5 * 0.3 = 0.85
        assert calculate_smile_score(blendshapes) == 85

    def test_empty_is_zero(self):
        assert calculate_smile_score({}) == 0

    @settings(max_examples=100)
    @given(values=st.dictionaries(
        st.sampled_from(["mouthSmileLeft", "mouthSmileRight", "eyeSquintLeft", "eyeSquintRight"]),
        st.floats(min_value=0.0, max_value=2.0, allow_nan=False),
    ))
    def test_score_capped_at_100(self, values):
        assert 0 <= calculate_smile_score(values) <= 100

    def test_smooth_score(self):
        assert smooth_score(0, 100) == 25
        assert smooth_score(80, 80) == 80
        assert smooth_score(40, 80, alpha=0.5) == 60

    def test_smooth_score_rounds_half_up(self):
        assert smooth_score(0, 2) == 1
        assert smooth_score(2, 4) == 3

    def test_smooth_score_reaches_small_target(self):
        score = 0
        for _ in range(20):
            score = smooth_score(score, 2)
        assert score >= 1

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


class TestSmileCounter:

    def test_cooldown_between_counts(self):
        counter = SmileCounter(cooldown_ms=500.0)

        assert counter.update(0.0, True) is True
        assert counter.update(300.0, True) is False
        assert counter.update(500.0, True) is False
        assert counter.update(501.0, True) is True
        assert counter.count == 2

    def test_not_smiling_never_counts(self):
        counter = SmileCounter()
        for t in range(0, 5000, 100):
            counter.update(float(t), False)

        assert counter.count == 0
        assert counter.is_smiling is False

    def test_indicator_expires(self):
        counter = SmileCounter(indicator_ms=300.0)

        counter.update(1000.0, True)
        assert counter.is_smiling is True

        counter.update(1200.0, False)
        assert counter.is_smiling is True

        counter.update(1300.0, False)
        assert counter.is_smiling is False

    def test_reset(self):
        counter = SmileCounter()
        counter.update(0.0, True)
        counter.reset()

        assert counter.count == 0
        assert counter.update(10.0, True) is True

    def test_negative_cooldown_rejected(self):
        with pytest.raises(ValueError):
            SmileCounter(cooldown_ms=-1.0)
