from datetime import datetime

import pytest


class FakeAudio:
    def __init__(self) -> None:
        self.calls = []

    def play(self, tone, loop=True) -> None:
        self.calls.append(("play", tone.name if tone else None, loop))

    def stop(self) -> None:
        self.calls.append(("stop",))

    @property
    def plays(self):
        return [c for c in self.calls if c[0] == "play"]

    @property
    def stops(self):
        return [c for c in self.calls if c[0] == "stop"]


def on_day(weekday: int, hour: int, minute: int, second: int = 0, microsecond: int = 0) -> datetime:
    """Wall-clock time on the given weekday (0=Sunday) of the first week of 2025."""
    # 2025-01-05 is a Sunday
    return datetime(2025, 1, 5 + weekday, hour, minute, second, microsecond)


@pytest.fixture
def audio() -> FakeAudio:
    return FakeAudio()
