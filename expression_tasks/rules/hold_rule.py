"""Continuous-hold rules."""

from typing import Callable

from expression_tasks.blendshapes import ExpressionSignals
from expression_tasks.rules.base import RuleOutcome, TaskRule
from expression_tasks.state import TaskState

Condition = Callable[[ExpressionSignals], bool]


class HoldRule(TaskRule):
    """
    Succeeds once a condition has held for ``hold_duration_ms`` without a break.

    There is no grace window: one non-qualifying frame drops the hold timer
    back to zero.
    """

    def __init__(self, condition: Condition, hold_duration_ms: float = 3000.0):
        if hold_duration_ms <= 0:
            raise ValueError(f"hold_duration_ms must be > 0, got {hold_duration_ms}")
        self.condition = condition
        self.hold_duration_ms = hold_duration_ms

    def evaluate(
        self, state: TaskState, signals: ExpressionSignals, dt_ms: float
    ) -> RuleOutcome:
        if self.condition(signals):
            state.hold_ms += dt_ms
        else:
            state.hold_ms = 0.0

        state.progress = min(state.hold_ms / self.hold_duration_ms, 1.0)

        if state.progress >= 1.0:
            return RuleOutcome.SUCCEEDED
        return RuleOutcome.PENDING


class DontSmileRule(HoldRule):
    """
    Fails the instant the player smiles.

    Surviving a full hold duration straight-faced counts as a win, so the
    task cannot stall the rotation.
    """

    def __init__(self, smile_threshold: float = 0.35, hold_duration_ms: float = 3000.0):
        self.smile_threshold = smile_threshold
        super().__init__(self._not_smiling, hold_duration_ms)

    def _not_smiling(self, signals: ExpressionSignals) -> bool:
        return signals.smile <= self.smile_threshold

    def evaluate(
        self, state: TaskState, signals: ExpressionSignals, dt_ms: float
    ) -> RuleOutcome:
        if signals.smile > self.smile_threshold:
            state.hold_ms = 0.0
            return RuleOutcome.FAILED
        return super().evaluate(state, signals, dt_ms)
