#!/usr/bin/env python3
"""
Live webcam CLI for the expression task game.

Usage:
    python -m expression_tasks.cli.run \
        --camera 0 \
        --config expression_tasks.yaml
"""

import argparse
import logging
import signal
import sys
import time
from typing import List, Optional

import numpy as np

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

TASK_CHOICES = ["smile", "kiss", "dont_smile", "anger", "poker_face", "blink"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Play the expression task game with a webcam",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Path to face_landmarker.task (downloaded if not specified)",
    )

    # Hardware arguments
    parser.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Camera device ID (overrides config)",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=None,
        help="Target frames per second (overrides config)",
    )

    # Game arguments
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
        "--hold-ms",
        type=float,
        default=None,
        help="Hold duration for hold tasks in ms (overrides config)",
    )
    parser.add_argument(
        "--settle-ms",
        type=float,
        default=None,
        help="Pause between tasks in ms (overrides config)",
    )

    # Output arguments
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Do not open a video window; log events only",
    )
    parser.add_argument(
        "--log-stats",
        action="store_true",
        help="Log performance statistics periodically",
    )
    parser.add_argument(
        "--stats-interval",
        type=float,
        default=5.0,
        help="Interval in seconds for logging stats",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--create-config",
        type=str,
        default=None,
        metavar="PATH",
        help="Create a default config file and exit",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace):
    """Load the config file (or defaults) and apply command line overrides."""
    from expression_tasks.config import load_config

    config = load_config(args.config)

    if args.model:
        config.model_path = args.model
    if args.camera is not None:
        config.camera_id = args.camera
    if args.fps is not None:
        config.target_fps = args.fps
    if args.seed is not None:
        config.engine.seed = args.seed
    if args.hold_ms is not None:
        config.engine.hold_duration_ms = args.hold_ms
    if args.settle_ms is not None:
        config.engine.settle_delay_ms = args.settle_ms
    if args.log_stats:
        config.log_performance = True

    config.engine.validate()
    return config


def log_events(result) -> None:
    """Sink that logs lifecycle events of a frame."""
    output = result.output
    if output.just_completed:
        logger.info(f"SUCCESS: {output.message}")
    elif output.just_failed:
        logger.info(f"FAILED: {output.message}")


class GameRunner:
    """Main game loop runner."""

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.session = None
        self.running = False
        self._last_stats_time = 0.0

    def setup(self) -> bool:
        """Create and initialize the game session."""
        from expression_tasks.engine import ExpressionTaskEngine
        from expression_tasks.session import GameSession

        try:
            config = build_config(self.args)
            engine = ExpressionTaskEngine(config.engine)
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Invalid configuration: {e}")
            return False

        self.session = GameSession(config, sinks=[log_events], engine=engine)

        if not self.session.initialize(initial_task=self.args.first_task):
            logger.error("Failed to initialize game session")
            return False

        return True

    def run(self) -> int:
        """Run the main game loop."""
        if self.session is None:
            return 1

        self.running = True
        frame_interval = 1.0 / self.session.config.target_fps

        cv2 = None
        if not self.args.headless:
            import cv2 as cv2_module
            cv2 = cv2_module

        logger.info("Starting game loop (Ctrl+C or 'q' to stop)")

        try:
            while self.running:
                loop_start = time.perf_counter()

                frame, result = self.session.step()
                if result is None:
                    continue

                if self.args.log_stats:
                    now = time.time()
                    if now - self._last_stats_time >= self.args.stats_interval:
                        self._log_stats()
                        self._last_stats_time = now

                if cv2 is not None:
                    frame = draw_overlay(cv2, frame, result)
                    cv2.imshow('Expression Tasks', frame)

                    if cv2.waitKey(1) & 0xFF == ord('q'):
                        logger.info("Quit requested via keyboard")
                        break

                # Rate limiting
                elapsed = time.perf_counter() - loop_start
                sleep_time = frame_interval - elapsed
                if sleep_time > 0:
                    time.sleep(sleep_time)

        except KeyboardInterrupt:
            logger.info("Interrupted by user")

        finally:
            self.running = False
            if cv2 is not None:
                cv2.destroyAllWindows()

        return 0

    def _log_stats(self):
        """Log performance statistics."""
        if self.session is None:
            return

        stats = self.session.get_performance_stats()
        logger.info(
            f"Performance: mean={stats['mean_ms']:.1f}ms, "
            f"p95={stats['p95_ms']:.1f}ms, "
            f"fps={stats['fps']:.1f}, "
            f"frames={stats['frame_count']}"
        )

    def stop(self):
        """Stop the game loop."""
        self.running = False

    def cleanup(self):
        """Clean up resources."""
        if self.session is not None:
            self.session.cleanup()
            self.session = None


def draw_overlay(cv2, frame, result):
    """Draw task prompt, progress bar and feedback on a video frame."""
    output = result.output
    h, w = frame.shape[:2]

    cv2.putText(
        frame, output.active_task_label, (10, 35),
        cv2.FONT_HERSHEY_SIMPLEX, 1.0, (255, 255, 255), 2
    )

    # Progress bar
    bar_w = w - 20
    cv2.rectangle(frame, (10, 50), (10 + bar_w, 70), (80, 80, 80), 1)
    filled = int(bar_w * output.progress)
    if filled > 0:
        cv2.rectangle(frame, (10, 50), (10 + filled, 70), (0, 200, 0), -1)

    status_lines = [
        f"Expression: {output.expression_label.value}",
        f"Emotion: {result.emotion.value}",
        f"Smile score: {result.display_score}",
        f"Smiles: {result.smile_count}",
        f"Face: {'Yes' if result.face_detected else 'No'}",
    ]
    y = 100
    for line in status_lines:
        cv2.putText(
            frame, line, (10, y),
            cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2
        )
        y += 25

    if output.message:
        # red while the failed task settles, yellow after a success
        color = (0, 0, 255) if output.shake else (0, 255, 255)
        if output.just_failed:
            # shake
            frame = np.roll(frame, 12, axis=1)
        cv2.putText(
            frame, output.message, (10, h - 20),
            cv2.FONT_HERSHEY_SIMPLEX, 0.9, color, 2
        )

    return frame


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the game CLI."""
    args = parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    if args.create_config:
        from expression_tasks.config import create_default_config
        create_default_config(args.create_config)
        print(f"Created default config at: {args.create_config}")
        return 0

    if not args.quiet:
        print("=" * 60)
        print("Expression Tasks - Live Game")
        print("=" * 60)
        print(f"Camera: {args.camera if args.camera is not None else 'from config'}")
        print(f"Display: {'Disabled' if args.headless else 'Enabled'}")
        print("=" * 60)
        print()

    runner = GameRunner(args)

    def signal_handler(signum, frame):
        logger.info("Received shutdown signal")
        runner.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        if not runner.setup():
            return 1

        return runner.run()

    finally:
        runner.cleanup()
        if not args.quiet:
            print()
            print("Game stopped")


if __name__ == "__main__":
    sys.exit(main())
