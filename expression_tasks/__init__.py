"""
Expression Tasks Package

Real-time facial expression micro-challenges driven by MediaPipe blend shapes.
"""

__version__ = "0.1.0"

from expression_tasks.blendshapes import ExpressionSignals
from expression_tasks.classifier import ExpressionLabel, classify_expression
from expression_tasks.config import EngineConfig, GameConfig, load_config, save_config
from expression_tasks.engine import (
    EngineOutput,
    EnginePhase,
    ExpressionTaskEngine,
    TaskEvent,
)
from expression_tasks.smoother import SignalSmoother
from expression_tasks.tasks import DEFAULT_CATALOG, Task, TaskId, TaskSelector

__all__ = [
    "ExpressionSignals",
    "ExpressionLabel",
    "classify_expression",
    "EngineConfig",
    "GameConfig",
    "load_config",
    "save_config",
    "EngineOutput",
    "EnginePhase",
    "ExpressionTaskEngine",
    "TaskEvent",
    "SignalSmoother",
    "DEFAULT_CATALOG",
    "Task",
    "TaskId",
    "TaskSelector",
]
