"""Instant rules: resolve on the first frame the condition is observed."""

from typing import Callable

from expression_tasks.blendshapes import ExpressionSignals
from expression_tasks.rules.base import RuleOutcome, TaskRule
from expression_tasks.state import TaskState


class TriggerRule(TaskRule):
    """
    Resolves with ``outcome`` as soon as ``condition`` is true.

    Nothing accumulates between frames.
    """

    def __init__(
        self,
        condition: Callable[[ExpressionSignals], bool],
        outcome: RuleOutcome = RuleOutcome.SUCCEEDED,
    ):
        if outcome is RuleOutcome.PENDING:
            raise ValueError("TriggerRule outcome must be SUCCEEDED or FAILED")
        self.condition = condition
        self.outcome = outcome

    def evaluate(
        self, state: TaskState, signals: ExpressionSignals, dt_ms: float
    ) -> RuleOutcome:
        if self.condition(signals):
            return self.outcome
        return RuleOutcome.PENDING
