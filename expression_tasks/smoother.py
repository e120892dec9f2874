"""Exponential smoothing for noisy per-frame expression scores.

Smile and brow channels jitter from frame to frame; an exponential moving
average keeps the task thresholds from flickering on and off.
"""


class SignalSmoother:
    """Exponential moving average over a single scalar channel.

    The update rule is:

        smoothed[t] = (1 - alpha) * smoothed[t-1] + alpha * raw[t]

    Unlike a smoother that seeds itself from the first sample, the state
    starts at ``initial`` (0 by default), so a face that appears already
    smiling still ramps up over a few frames.

    Attributes:
        alpha: Blend factor in (0, 1]. Smaller = smoother.
        initial: Value the state starts from and returns to on reset().
    """

    def __init__(self, alpha: float = 0.3, initial: float = 0.0):
        """
        Args:
            alpha: EMA coefficient in (0, 1]. Default 0.3.
            initial: Starting value of the smoothed state.

        Raises:
            ValueError: If alpha is not in range (0, 1].
        """
        if not (0 < alpha <= 1):
            raise ValueError(f"alpha must be in range (0, 1], got {alpha}")

        self.alpha = alpha
        self.initial = float(initial)
        self._value = self.initial

    def update(self, raw: float) -> float:
        """Blend a new raw sample into the state and return the new value.

        No clamping is applied; inputs are expected in [0, 1] already.
        """
        self._value = self._value * (1.0 - self.alpha) + float(raw) * self.alpha
        return self._value

    def reset(self) -> None:
        """Return the state to its initial value."""
        self._value = self.initial

    @property
    def value(self) -> float:
        """Current smoothed value."""
        return self._value
