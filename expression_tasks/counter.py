"""
Smile counter for the free-play overlay.

Counts smiles with a cooldown so a held smile is not counted every frame,
and keeps a short-lived "smiling" indicator lit after each counted smile.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class SmileCounter:
    """Debounced smile counter driven by frame timestamps.

    Attributes:
        cooldown_ms: Minimum time between two counted smiles
        indicator_ms: How long is_smiling stays True after a counted smile
    """

    def __init__(self, cooldown_ms: float = 500.0, indicator_ms: float = 300.0):
        if cooldown_ms < 0:
            raise ValueError(f"cooldown_ms must be >= 0, got {cooldown_ms}")
        if indicator_ms < 0:
            raise ValueError(f"indicator_ms must be >= 0, got {indicator_ms}")

        self.cooldown_ms = cooldown_ms
        self.indicator_ms = indicator_ms
        self._count = 0
        self._last_counted_ms: Optional[float] = None
        self._indicator_until_ms: Optional[float] = None
        self._now_ms: Optional[float] = None

    def update(self, timestamp_ms: float, is_smiling: bool) -> bool:
        """
        Feed one frame.

        Args:
            timestamp_ms: Frame timestamp in milliseconds
            is_smiling: Whether the frame shows a smile

        Returns:
            True if this frame was counted as a new smile
        """
        self._now_ms = timestamp_ms
        if not is_smiling:
            return False

        if (
            self._last_counted_ms is not None
            and timestamp_ms - self._last_counted_ms <= self.cooldown_ms
        ):
            return False

        self._count += 1
        self._last_counted_ms = timestamp_ms
        self._indicator_until_ms = timestamp_ms + self.indicator_ms
        logger.debug(f"Smile #{self._count} at {timestamp_ms:.0f}ms")
        return True

    def reset(self) -> None:
        """Clear the count and indicator."""
        self._count = 0
        self._last_counted_ms = None
        self._indicator_until_ms = None
        self._now_ms = None

    @property
    def count(self) -> int:
        return self._count

    @property
    def is_smiling(self) -> bool:
        """True within indicator_ms of the last counted smile."""
        if self._indicator_until_ms is None or self._now_ms is None:
            return False
        return self._now_ms < self._indicator_until_ms
