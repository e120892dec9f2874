"""
CLI subpackage for command-line interface tools.

Available CLI scripts:
- run: Play the expression task game with a webcam
- replay: Run a recorded blend-shape session through the engine

Usage:
    python -m expression_tasks.cli.run --help
    python -m expression_tasks.cli.replay --help
"""

__all__ = ["run", "replay"]
