"""Edge-counted blink rule."""

from expression_tasks.blendshapes import ExpressionSignals
from expression_tasks.rules.base import RuleOutcome, TaskRule
from expression_tasks.state import TaskState


class BlinkRule(TaskRule):
    """
    Counts full open -> closed -> open cycles of the raw blink channel.

    The two thresholds form a hysteresis band: the latch closes above
    ``close_threshold`` and a blink is only counted once the score falls
    below ``open_threshold`` while latched. Scores in between change nothing.
    """

    def __init__(
        self,
        close_threshold: float = 0.45,
        open_threshold: float = 0.15,
        target: int = 2,
    ):
        if open_threshold >= close_threshold:
            raise ValueError(
                f"open_threshold ({open_threshold}) must be below "
                f"close_threshold ({close_threshold})"
            )
        if target < 1:
            raise ValueError(f"target must be >= 1, got {target}")
        self.close_threshold = close_threshold
        self.open_threshold = open_threshold
        self.target = target

    def evaluate(
        self, state: TaskState, signals: ExpressionSignals, dt_ms: float
    ) -> RuleOutcome:
        if signals.blink > self.close_threshold:
            state.eye_closed = True
        elif state.eye_closed and signals.blink < self.open_threshold:
            state.eye_closed = False
            state.blink_count += 1

        state.progress = min(state.blink_count / self.target, 1.0)

        if state.blink_count >= self.target:
            return RuleOutcome.SUCCEEDED
        return RuleOutcome.PENDING
