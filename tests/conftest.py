# tests/conftest.py
import pytest

from infrastructure.logging_service import disable_all_logging

# Les loggers de module sont créés à l'import des services
disable_all_logging()


class StepClock:
    """Deterministic clock: returns the given ISO timestamps in order."""

    def __init__(self, *stamps):
        self.stamps = list(stamps)
        self.calls = 0

    def __call__(self):
        stamp = self.stamps[min(self.calls, len(self.stamps) - 1)]
        self.calls += 1
        return stamp


@pytest.fixture
def clock():
    return StepClock("2024-03-05T09:00:00.000Z", "2024-03-05T14:30:00.000Z", "2024-03-07T10:00:00.000Z")
