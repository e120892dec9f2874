"""
Configuration management for the expression task game.

This module holds the engine and session configuration dataclasses and
provides configuration file loading and saving, supporting YAML and JSON
formats.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

# Default config file locations
DEFAULT_CONFIG_PATHS = [
    Path("expression_tasks.yaml"),
    Path("expression_tasks.json"),
    Path.home() / ".config" / "expression_tasks" / "config.yaml",
    Path.home() / ".config" / "expression_tasks" / "config.json",
]

ALL_TASK_IDS = ["smile", "kiss", "dont_smile", "anger", "poker_face", "blink"]


@dataclass
class EngineConfig:
    """Thresholds and timings for the expression task engine.

    Attributes:
        smoothing_alpha: EMA coefficient for the smile and brow channels
        smile_threshold: Smoothed smile above this counts as smiling
        brow_threshold: Smoothed brow-down above this counts as frowning
        kiss_threshold: Raw pucker above this counts as a kiss
        anger_smile_max: Smile must stay below this for the anger task
        poker_face_max: Upper bound on smile, brow and kiss for poker face
        blink_close_threshold: Blink score above this latches "eye closed"
        blink_open_threshold: Blink score below this (while latched) completes a blink
        blink_target: Blinks needed to finish the blink task
        hold_duration_ms: Continuous hold needed by hold tasks
        settle_delay_ms: Pause between a resolved task and the next one
        tasks: Task ids in the rotation
        seed: Optional seed for the task selector
    """
    smoothing_alpha: float = 0.3
    smile_threshold: float = 0.35
    brow_threshold: float = 0.2
    kiss_threshold: float = 0.6
    anger_smile_max: float = 0.25
    poker_face_max: float = 0.15
    blink_close_threshold: float = 0.45
    blink_open_threshold: float = 0.15
    blink_target: int = 2
    hold_duration_ms: float = 3000.0
    settle_delay_ms: float = 1500.0
    tasks: List[str] = field(default_factory=lambda: list(ALL_TASK_IDS))
    seed: Optional[int] = None

    def validate(self) -> None:
        """
        Check the configuration for values the engine cannot work with.

        Raises:
            ValueError: On the first invalid value found
        """
        if not (0 < self.smoothing_alpha <= 1):
            raise ValueError(
                f"smoothing_alpha must be in range (0, 1], got {self.smoothing_alpha}"
            )
        if self.hold_duration_ms <= 0:
            raise ValueError(
                f"hold_duration_ms must be > 0, got {self.hold_duration_ms}"
            )
        if self.settle_delay_ms < 0:
            raise ValueError(
                f"settle_delay_ms must be >= 0, got {self.settle_delay_ms}"
            )
        if self.blink_target < 1:
            raise ValueError(f"blink_target must be >= 1, got {self.blink_target}")
        if self.blink_open_threshold >= self.blink_close_threshold:
            raise ValueError(
                "blink_open_threshold must be below blink_close_threshold "
                f"({self.blink_open_threshold} >= {self.blink_close_threshold})"
            )
        if not self.tasks:
            raise ValueError("tasks must name at least one task")
        unknown = [name for name in self.tasks if name not in ALL_TASK_IDS]
        if unknown:
            raise ValueError(f"Unknown task ids: {unknown}")


@dataclass
class GameConfig:
    """Configuration for a live game session.

    Attributes:
        camera_id: Camera device ID (default 0)
        model_path: Path to the face_landmarker.task file (downloaded if None)
        target_fps: Target frames per second for the capture loop
        log_performance: Whether to track per-frame latency statistics
        smile_cooldown_ms: Minimum spacing between counted smiles
        engine: Task engine configuration
    """
    camera_id: int = 0
    model_path: Optional[str] = None
    target_fps: float = 30.0
    log_performance: bool = True
    smile_cooldown_ms: float = 500.0
    engine: EngineConfig = field(default_factory=EngineConfig)


def load_config(
    config_path: Optional[Union[str, Path]] = None
) -> GameConfig:
    """
    Load game configuration from file.

    Supports YAML and JSON formats. If no path is specified, searches
    default locations.

    Args:
        config_path: Path to config file, or None to search defaults

    Returns:
        GameConfig instance

    Raises:
        FileNotFoundError: If an explicit config path does not exist
        ValueError: If config file is invalid
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        path = None
        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                path = default_path
                break

        if path is None:
            logger.info("No config file found, using defaults")
            return GameConfig()

    logger.info(f"Loading config from {path}")

    with open(path, 'r') as f:
        if path.suffix in ('.yaml', '.yml'):
            yaml = _import_yaml()
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse config file: {e}")
        else:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Failed to parse config file: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping, got {type(data).__name__}")

    config = _dict_to_config(data)
    config.engine.validate()
    return config


def save_config(
    config: GameConfig,
    config_path: Union[str, Path],
    format: str = "auto"
) -> None:
    """
    Save game configuration to file.

    Args:
        config: Configuration to save
        config_path: Output file path
        format: "yaml", "json", or "auto" (detect from extension)
    """
    path = Path(config_path)

    if format == "auto":
        if path.suffix in ('.yaml', '.yml'):
            format = "yaml"
        else:
            format = "json"

    data = _config_to_dict(config)

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        if format == "yaml":
            yaml = _import_yaml()
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(data, f, indent=2)

    logger.info(f"Saved config to {path}")


def _import_yaml():
    try:
        import yaml
    except ImportError:
        raise ImportError(
            "PyYAML not installed. Install with: pip install pyyaml"
        )
    return yaml


def _dict_to_engine_config(data: Dict[str, Any]) -> EngineConfig:
    """Convert dictionary to EngineConfig."""
    defaults = EngineConfig()
    return EngineConfig(
        smoothing_alpha=float(data.get('smoothing_alpha', defaults.smoothing_alpha)),
        smile_threshold=float(data.get('smile_threshold', defaults.smile_threshold)),
        brow_threshold=float(data.get('brow_threshold', defaults.brow_threshold)),
        kiss_threshold=float(data.get('kiss_threshold', defaults.kiss_threshold)),
        anger_smile_max=float(data.get('anger_smile_max', defaults.anger_smile_max)),
        poker_face_max=float(data.get('poker_face_max', defaults.poker_face_max)),
        blink_close_threshold=float(
            data.get('blink_close_threshold', defaults.blink_close_threshold)
        ),
        blink_open_threshold=float(
            data.get('blink_open_threshold', defaults.blink_open_threshold)
        ),
        blink_target=int(data.get('blink_target', defaults.blink_target)),
        hold_duration_ms=float(data.get('hold_duration_ms', defaults.hold_duration_ms)),
        settle_delay_ms=float(data.get('settle_delay_ms', defaults.settle_delay_ms)),
        tasks=list(data.get('tasks', defaults.tasks)),
        seed=data.get('seed', defaults.seed),
    )


def _dict_to_config(data: Dict[str, Any]) -> GameConfig:
    """Convert dictionary to GameConfig."""
    engine_data = data.get('engine') or {}
    if not isinstance(engine_data, dict):
        raise ValueError("'engine' section must be a mapping")

    return GameConfig(
        camera_id=int(data.get('camera_id', 0)),
        model_path=data.get('model_path'),
        target_fps=float(data.get('target_fps', 30.0)),
        log_performance=bool(data.get('log_performance', True)),
        smile_cooldown_ms=float(data.get('smile_cooldown_ms', 500.0)),
        engine=_dict_to_engine_config(engine_data),
    )


def _config_to_dict(config: GameConfig) -> Dict[str, Any]:
    """Convert GameConfig to dictionary."""
    engine = config.engine
    return {
        'camera_id': config.camera_id,
        'model_path': config.model_path,
        'target_fps': config.target_fps,
        'log_performance': config.log_performance,
        'smile_cooldown_ms': config.smile_cooldown_ms,
        'engine': {
            'smoothing_alpha': engine.smoothing_alpha,
            'smile_threshold': engine.smile_threshold,
            'brow_threshold': engine.brow_threshold,
            'kiss_threshold': engine.kiss_threshold,
            'anger_smile_max': engine.anger_smile_max,
            'poker_face_max': engine.poker_face_max,
            'blink_close_threshold': engine.blink_close_threshold,
            'blink_open_threshold': engine.blink_open_threshold,
            'blink_target': engine.blink_target,
            'hold_duration_ms': engine.hold_duration_ms,
            'settle_delay_ms': engine.settle_delay_ms,
            'tasks': list(engine.tasks),
            'seed': engine.seed,
        },
    }


def create_default_config(output_path: Union[str, Path]) -> None:
    """
    Create a default configuration file with comments.

    Args:
        output_path: Path to write the config file
    """
    path = Path(output_path)

    if path.suffix in ('.yaml', '.yml'):
        content = """# Expression Task Game Configuration
# ==================================

# Camera device ID (usually 0 for built-in camera)
camera_id: 0

# Path to MediaPipe face_landmarker.task (null to download on first run)
model_path: null

# Target frames per second for the capture loop
target_fps: 30.0

# Track per-frame latency statistics
log_performance: true

# Minimum spacing between counted smiles (ms)
smile_cooldown_ms: 500.0

engine:
  # EMA smoothing coefficient (0, 1] for smile and brow channels
  smoothing_alpha: 0.3

  # Expression thresholds (scores in [0, 1])
  smile_threshold: 0.35
  brow_threshold: 0.2
  kiss_threshold: 0.6
  anger_smile_max: 0.25
  poker_face_max: 0.15

  # Blink edge detection: close above, reopen below
  blink_close_threshold: 0.45
  blink_open_threshold: 0.15
  blink_target: 2

  # Timings in milliseconds
  hold_duration_ms: 3000.0
  settle_delay_ms: 1500.0

  # Tasks in the rotation
  tasks:
    - smile
    - kiss
    - dont_smile
    - anger
    - poker_face
    - blink

  # Seed for task selection (null for random)
  seed: null
"""
    else:
        content = json.dumps(_config_to_dict(GameConfig()), indent=2)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        f.write(content)

    logger.info(f"Created default config at {path}")
