"""
Shared test fixtures.
"""

import pytest
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).parent.parent))

from heat_scheduler.models import Participant, LaneAssignment, TimedResult, RankedResult, Ranking


def make_participants(count, start=1):
    """Participants with car numbers start..start+count-1."""
    return [Participant(car_number=n, name=f"Racer {n}") for n in range(start, start + count)]


def timed(heat_number, cars, times, timestamp=0):
    """Timed result for ``cars`` staged in lanes 1..n with the given times."""
    lanes = tuple(LaneAssignment(lane=i + 1, car_number=c, name=f"Racer {c}") for i, c in enumerate(cars))
    times_ms = {i + 1: t for i, t in enumerate(times)}
    return TimedResult(heat_number=heat_number, times_ms=times_ms, timestamp=timestamp, lanes=lanes)


def ranked(heat_number, order, timestamp=0):
    """Ranked result, ``order`` lists car numbers from first place."""
    rankings = tuple(Ranking(car_number=c, place=i + 1) for i, c in enumerate(order))
    return RankedResult(heat_number=heat_number, rankings=rankings, timestamp=timestamp)


@pytest.fixture
def eight_cars():
    return make_participants(8)


@pytest.fixture
def ten_cars():
    return make_participants(10)


@pytest.fixture
def eight_car_results():
    """Two timed heats covering cars 1-8 on a 4-lane track."""
    return [
        timed(1, [1, 2, 3, 4], [2600, 2500, 2400, 2300]),
        timed(2, [5, 6, 7, 8], [2200, 2100, 2000, 1900]),
    ]
