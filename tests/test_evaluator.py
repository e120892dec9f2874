"""
Tests for TaskEvaluator frame timing and resolution handling.
"""

import pytest

from expression_tasks.blendshapes import ExpressionSignals
from expression_tasks.evaluator import TaskEvaluator
from expression_tasks.rules import RuleOutcome
from expression_tasks.tasks import TaskId, get_task

SMILING = ExpressionSignals(smile=0.9)


@pytest.fixture
def evaluator():
    evaluator = TaskEvaluator()
    evaluator.begin(get_task(TaskId.SMILE))
    return evaluator


class TestFrameTiming:

    def test_first_frame_contributes_no_time(self, evaluator):
        evaluator.evaluate(SMILING, 50_000.0)
        assert evaluator.state.hold_ms == 0.0

        evaluator.evaluate(SMILING, 50_100.0)
        assert evaluator.state.hold_ms == pytest.approx(100.0)

    def test_negative_delta_is_clamped(self, evaluator):
        evaluator.evaluate(SMILING, 1000.0)
        evaluator.evaluate(SMILING, 1100.0)
        evaluator.evaluate(SMILING, 900.0)   # out of order
        assert evaluator.state.hold_ms == pytest.approx(100.0)

        evaluator.evaluate(SMILING, 1200.0)
        assert evaluator.state.hold_ms == pytest.approx(200.0)

    def test_begin_resets_counters(self, evaluator):
        evaluator.evaluate(SMILING, 0.0)
        evaluator.evaluate(SMILING, 1000.0)
        assert evaluator.state.hold_ms > 0

        state = evaluator.begin(get_task(TaskId.BLINK))

        assert state.hold_ms == 0.0
        assert state.blink_count == 0
        assert state.eye_closed is False
        assert state.last_timestamp_ms is None
        assert state.progress == 0.0


class TestResolution:

    def test_success_pins_progress_and_sets_flag(self, evaluator):
        outcome = RuleOutcome.PENDING
        t = 0.0
        while outcome is RuleOutcome.PENDING:
            outcome = evaluator.evaluate(SMILING, t)
            t += 100.0

        assert outcome is RuleOutcome.SUCCEEDED
        assert evaluator.state.completed is True
        assert evaluator.state.progress == 1.0

    def test_failure_sets_fail_flag(self):
        evaluator = TaskEvaluator()
        evaluator.begin(get_task(TaskId.DONT_SMILE))

        outcome = evaluator.evaluate(ExpressionSignals(smile=0.4), 0.0)

        assert outcome is RuleOutcome.FAILED
        assert evaluator.state.failed is True
        assert evaluator.state.completed is False

    def test_resolved_task_is_not_reevaluated(self):
        evaluator = TaskEvaluator()
        evaluator.begin(get_task(TaskId.KISS))

        assert evaluator.evaluate(ExpressionSignals(kiss=0.9), 0.0) is RuleOutcome.SUCCEEDED
        assert evaluator.evaluate(ExpressionSignals(kiss=0.9), 100.0) is RuleOutcome.PENDING
        assert evaluator.state.completed is True

    def test_evaluate_before_begin(self):
        with pytest.raises(RuntimeError):
            TaskEvaluator().evaluate(SMILING, 0.0)
