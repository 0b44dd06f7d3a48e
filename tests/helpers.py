"""Test helpers shared across test modules."""

DAY = 24 * 60 * 60
HOUR = 60 * 60

# 2025-10-09 08:53:20 UTC; a whole second so ages compare exactly
BASE_TIME = 1_760_000_000.0


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = BASE_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
