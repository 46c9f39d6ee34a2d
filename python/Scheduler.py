class UpdateGate:
    """
    Minimum-interval gate for an externally driven update callback.
    tick(dt) accumulates elapsed time and opens once the interval is reached.
    """

    def __init__(self, min_interval: float = 0.01):
        self.min_interval = max(0.0, float(min_interval))
        self._elapsed = 0.0

    @property
    def elapsed(self) -> float:
        return self._elapsed

    def tick(self, dt: float) -> bool:
        self._elapsed += max(0.0, float(dt))
        if self._elapsed >= self.min_interval:
            self._elapsed = 0.0
            return True
        return False
