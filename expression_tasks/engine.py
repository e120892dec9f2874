"""
Expression task engine.

Consumes one blend-shape vector per video frame and runs the task game:
smooths the noisy channels, labels the expression, evaluates the active
micro-task, and rotates to a new task after each resolution.

The engine never schedules anything itself. An external driver calls
advance() once per frame; the settle pause between tasks is measured on the
same frame clock, so it can be cancelled simply by stopping the engine.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .blendshapes import BlendShapeVector, ExpressionSignals
from .classifier import ExpressionLabel, classify_signals
from .config import EngineConfig
from .evaluator import TaskEvaluator
from .rules import RuleOutcome
from .smoother import SignalSmoother
from .state import TaskState
from .tasks import Task, TaskId, TaskSelector, catalog_for

logger = logging.getLogger(__name__)


class EnginePhase(str, Enum):
    STOPPED = "stopped"
    AWAITING_HOLD = "awaiting_hold"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SETTLING = "settling"


class TaskEvent(str, Enum):
    TASK_STARTED = "task_started"
    PROGRESS = "progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NEXT_TASK = "next_task"


@dataclass
class EngineOutput:
    """Everything the UI needs after a frame.

    Attributes:
        active_task_label: Prompt of the active task
        progress: Completion fraction in [0, 1]
        expression_label: Feedback label for the current expression
        just_completed: The task succeeded on this frame
        just_failed: The task failed on this frame
        task_id: Id of the active task
        phase: Engine phase after this frame
        message: Latest success/failure message (empty while playing)
        blink_count: Blinks counted for the active task
        shake: The active task failed; stays set until the next task is drawn
        events: Lifecycle events raised on this frame
    """
    active_task_label: str
    progress: float
    expression_label: ExpressionLabel
    just_completed: bool = False
    just_failed: bool = False
    task_id: Optional[TaskId] = None
    phase: EnginePhase = EnginePhase.STOPPED
    message: str = ""
    blink_count: int = 0
    shake: bool = False
    events: List[TaskEvent] = field(default_factory=list)


EngineListener = Callable[[TaskEvent, EngineOutput], None]


class SettleTimer:
    """One-shot deadline on the frame clock.

    Armed when a task resolves; poll() reports True exactly once, on the
    first frame at or past the deadline. A cancelled timer never fires.
    """

    def __init__(self):
        self._deadline_ms: Optional[float] = None

    def arm(self, now_ms: float, delay_ms: float) -> None:
        self._deadline_ms = now_ms + delay_ms

    def poll(self, now_ms: float) -> bool:
        if self._deadline_ms is None or now_ms < self._deadline_ms:
            return False
        self._deadline_ms = None
        return True

    def cancel(self) -> None:
        self._deadline_ms = None

    @property
    def pending(self) -> bool:
        return self._deadline_ms is not None

    @property
    def deadline_ms(self) -> Optional[float]:
        return self._deadline_ms


class ExpressionTaskEngine:
    """Frame-driven state machine for the expression task game.

    Phases per task:

        AWAITING_HOLD -> SUCCEEDED | FAILED -> SETTLING -> AWAITING_HOLD (next task)

    SUCCEEDED and FAILED last exactly one frame. While SETTLING, frames still
    update the smoothed signals and the expression label but are not
    evaluated against any task.

    Usage:
        engine = ExpressionTaskEngine()
        engine.start()
        for timestamp_ms, blendshapes in frames:
            output = engine.advance(timestamp_ms, blendshapes)
        engine.stop()
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        selector: Optional[TaskSelector] = None,
    ):
        """
        Args:
            config: Engine configuration (defaults used if None)
            selector: Task selector; built from config.tasks and config.seed if None

        Raises:
            ValueError: If the configuration is invalid
        """
        self.config = config or EngineConfig()
        self.config.validate()

        self.selector = selector or TaskSelector(
            catalog_for(self.config.tasks), seed=self.config.seed
        )

        self._smile = SignalSmoother(alpha=self.config.smoothing_alpha)
        self._brow = SignalSmoother(alpha=self.config.smoothing_alpha)
        self._evaluator = TaskEvaluator(self.config)
        self._settle = SettleTimer()

        self._phase = EnginePhase.STOPPED
        self._task: Optional[Task] = None
        self._message = ""
        self._expression = ExpressionLabel.NEUTRAL
        self._listeners: List[EngineListener] = []

    def add_listener(self, listener: EngineListener) -> None:
        """Register a callback receiving (event, output) for every lifecycle event."""
        self._listeners.append(listener)

    def remove_listener(self, listener: EngineListener) -> None:
        self._listeners.remove(listener)

    def start(self, initial_task: Optional[TaskId] = None) -> Task:
        """
        Reset all session state and draw the first task.

        Args:
            initial_task: Play this task first instead of drawing one

        Returns:
            The first task

        Raises:
            ValueError: If initial_task is not in the configured catalog
        """
        self._settle.cancel()
        self._smile.reset()
        self._brow.reset()
        self._expression = ExpressionLabel.NEUTRAL

        if initial_task is not None:
            task = self.selector.find(initial_task)
        else:
            task = self.selector.draw_next(None)

        self._begin(task)
        logger.info(f"Session started with task '{task.label}'")
        self._emit([TaskEvent.TASK_STARTED], self._snapshot())
        return task

    def stop(self) -> None:
        """Halt evaluation and cancel a pending settle timer."""
        if self._settle.pending:
            logger.debug("Cancelling pending settle timer")
        self._settle.cancel()
        self._phase = EnginePhase.STOPPED
        logger.info("Session stopped")

    def advance(self, timestamp_ms: float, blendshapes: BlendShapeVector) -> EngineOutput:
        """
        Process one frame.

        Args:
            timestamp_ms: Monotonic frame timestamp in milliseconds
            blendshapes: Blend-shape scores for the frame; missing entries read as 0

        Returns:
            EngineOutput for the frame. After stop() (or before start())
            nothing is evaluated and the output reports the STOPPED phase.
        """
        if self._phase is EnginePhase.STOPPED:
            return self._snapshot()

        signals = self._condition(blendshapes)
        self._expression = classify_signals(signals, self.config)
        events: List[TaskEvent] = []

        if self._phase in (EnginePhase.SUCCEEDED, EnginePhase.FAILED):
            self._phase = EnginePhase.SETTLING

        if self._phase is EnginePhase.SETTLING:
            if not self._settle.poll(timestamp_ms):
                return self._snapshot()
            previous = self._task
            self._begin(self.selector.draw_next(previous.id if previous else None))
            logger.info(f"Next task: '{self._task.label}'")
            events.append(TaskEvent.NEXT_TASK)

        state = self._evaluator.state
        progress_before = state.progress
        outcome = self._evaluator.evaluate(signals, timestamp_ms)

        if outcome is RuleOutcome.SUCCEEDED:
            self._resolve(EnginePhase.SUCCEEDED, self._task.success_message, timestamp_ms)
            events.append(TaskEvent.SUCCEEDED)
        elif outcome is RuleOutcome.FAILED:
            self._resolve(EnginePhase.FAILED, self._task.failure_message, timestamp_ms)
            events.append(TaskEvent.FAILED)
        elif state.progress != progress_before:
            events.append(TaskEvent.PROGRESS)

        logger.debug(
            f"t={timestamp_ms:.0f}ms task={self._task.id.value} "
            f"smile={signals.smile:.3f} brow={signals.brow:.3f} "
            f"kiss={signals.kiss:.3f} blink={signals.blink:.3f} "
            f"progress={state.progress:.2f}"
        )

        output = self._snapshot(events)
        self._emit(events, output)
        return output

    def _condition(self, blendshapes: BlendShapeVector) -> ExpressionSignals:
        """Smooth smile and brow; kiss and blink pass through raw."""
        raw = ExpressionSignals.from_blendshapes(blendshapes)
        return ExpressionSignals(
            smile=self._smile.update(raw.smile),
            brow=self._brow.update(raw.brow),
            kiss=raw.kiss,
            blink=raw.blink,
        )

    def _begin(self, task: Task) -> None:
        self._task = task
        self._message = ""
        self._evaluator.begin(task)
        self._phase = EnginePhase.AWAITING_HOLD

    def _resolve(self, phase: EnginePhase, message: str, timestamp_ms: float) -> None:
        self._phase = phase
        self._message = message
        self._settle.arm(timestamp_ms, self.config.settle_delay_ms)
        if phase is EnginePhase.SUCCEEDED:
            logger.info(f"Task '{self._task.label}' succeeded")
        else:
            logger.info(f"Task '{self._task.label}' failed")

    def _snapshot(self, events: Optional[List[TaskEvent]] = None) -> EngineOutput:
        events = events or []
        state = self._evaluator.state
        return EngineOutput(
            active_task_label=self._task.label if self._task else "",
            progress=state.progress if state else 0.0,
            expression_label=self._expression,
            just_completed=TaskEvent.SUCCEEDED in events,
            just_failed=TaskEvent.FAILED in events,
            task_id=self._task.id if self._task else None,
            phase=self._phase,
            message=self._message,
            blink_count=state.blink_count if state else 0,
            shake=state.failed if state else False,
            events=list(events),
        )

    def _emit(self, events: List[TaskEvent], output: EngineOutput) -> None:
        for event in events:
            for listener in list(self._listeners):
                listener(event, output)

    @property
    def phase(self) -> EnginePhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is not EnginePhase.STOPPED

    @property
    def current_task(self) -> Optional[Task]:
        return self._task

    @property
    def task_state(self) -> Optional[TaskState]:
        return self._evaluator.state

    @property
    def settle_pending(self) -> bool:
        return self._settle.pending
