#!/usr/bin/env python3
"""
Replay a recorded blend-shape session through the task engine.

Each line of the input is a JSON object:

    {"t": 1234.5, "blendshapes": {"mouthSmileLeft": 0.8, "mouthSmileRight": 0.7}}

One line is printed per lifecycle event, followed by a summary.

Usage:
    python -m expression_tasks.cli.replay session.jsonl --seed 3 --first-task smile
"""

import argparse
import json
import logging
import sys
from collections import Counter
from typing import Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

TASK_CHOICES = ["smile", "kiss", "dont_smile", "anger", "poker_face", "blink"]


class RecordingError(ValueError):
    """A line of the recording could not be parsed."""

    def __init__(self, line_number: int, reason: str):
        super().__init__(f"line {line_number}: {reason}")
        self.line_number = line_number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Replay a JSON-lines blend-shape recording through the task engine",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "recording",
        type=str,
        help="Path to the JSON-lines recording",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for task selection",
    )
    parser.add_argument(
        "--first-task",
        type=str,
        choices=TASK_CHOICES,
        default=None,
        help="Task to play first",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def read_recording(lines) -> Iterator[Tuple[float, Dict[str, float]]]:
    """
    Parse recording lines into (timestamp_ms, blendshapes) pairs.

    Blank lines are skipped.

    Raises:
        RecordingError: On the first malformed line
    """
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue

        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise RecordingError(line_number, f"invalid JSON ({e.msg})")

        if not isinstance(record, dict):
            raise RecordingError(line_number, "expected a JSON object")
        if "t" not in record:
            raise RecordingError(line_number, "missing 't'")

        try:
            timestamp_ms = float(record["t"])
        except (TypeError, ValueError):
            raise RecordingError(line_number, f"invalid timestamp {record['t']!r}")

        blendshapes = record.get("blendshapes", {})
        if not isinstance(blendshapes, dict):
            raise RecordingError(line_number, "'blendshapes' must be an object")

        try:
            scores = {str(name): float(value) for name, value in blendshapes.items()}
        except (TypeError, ValueError):
            raise RecordingError(line_number, "blend-shape scores must be numbers")

        yield timestamp_ms, scores


def format_event(timestamp_ms: float, event, output) -> str:
    """One tab-separated line per event."""
    return "\t".join([
        f"{timestamp_ms:.0f}ms",
        event.value,
        output.task_id.value if output.task_id else "-",
        f"{output.progress:.2f}",
        output.message or "-",
    ])


def replay(recording_path: str, config, first_task: Optional[str] = None, out=None) -> Counter:
    """
    Run a recording through a fresh engine.

    Args:
        recording_path: JSON-lines file
        config: EngineConfig
        first_task: Optional task id to play first
        out: Stream for event lines (stdout if None)

    Returns:
        Counter of lifecycle events

    Raises:
        RecordingError: If the recording is malformed
    """
    from expression_tasks.engine import ExpressionTaskEngine, TaskEvent

    out = out or sys.stdout
    engine = ExpressionTaskEngine(config)
    counts: Counter = Counter()
    current_ts = 0.0

    def on_event(event, output):
        counts[event] += 1
        if event is not TaskEvent.PROGRESS:
            print(format_event(current_ts, event, output), file=out)

    engine.add_listener(on_event)
    engine.start(initial_task=first_task)

    try:
        with open(recording_path, 'r') as f:
            for timestamp_ms, blendshapes in read_recording(f):
                current_ts = timestamp_ms
                engine.advance(timestamp_ms, blendshapes)
    finally:
        engine.stop()

    return counts


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the replay CLI."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    from expression_tasks.config import load_config
    from expression_tasks.engine import TaskEvent

    try:
        config = load_config(args.config).engine
        if args.seed is not None:
            config.seed = args.seed
        counts = replay(args.recording, config, first_task=args.first_task)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except RecordingError as e:
        logger.error(f"Malformed recording {args.recording}: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    print(
        f"succeeded={counts[TaskEvent.SUCCEEDED]} "
        f"failed={counts[TaskEvent.FAILED]} "
        f"tasks={counts[TaskEvent.TASK_STARTED] + counts[TaskEvent.NEXT_TASK]}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
