"""Reconnect backoff policy."""


class ExponentialBackoff:
    """Capped exponential backoff.

    The first delay is ``initial``; each following delay is multiplied by
    ``multiplier`` until ``maximum`` is reached.
    """

    def __init__(
        self,
        initial: float = 1.0,
        maximum: float = 60.0,
        multiplier: float = 2.0,
    ) -> None:
        if initial < 0 or maximum < 0:
            raise ValueError("Backoff delays must not be negative")
        if multiplier < 1:
            raise ValueError("Backoff multiplier must be >= 1")
        self._initial = initial
        self._maximum = maximum
        self._multiplier = multiplier
        self._attempts = 0

    @property
    def attempts(self) -> int:
        """Number of delays handed out since the last reset."""
        return self._attempts

    def next_delay(self) -> float:
        """Get the delay before the next reconnect attempt."""
        delay = min(self._maximum, self._initial * self._multiplier**self._attempts)
        self._attempts += 1
        return delay

    def reset(self) -> None:
        self._attempts = 0
