"""
Tests for speed estimation and grouping.
"""

import math

from conftest import make_participants, timed, ranked

from heat_scheduler.models import TimedResult, LaneAssignment
from heat_scheduler.speed import (
    MANUAL_PLACE_MS,
    accepted_results,
    calculate_average_times,
    group_by_speed,
)


def test_timed_results_average_per_car():
    """Times are attributed through the lane staging and averaged."""
    participants = make_participants(3)
    results = [
        timed(1, [1, 2], [2500, 2400]),
        timed(2, [2, 1], [2600, 2300]),
    ]

    averages = calculate_average_times(participants, results)

    assert averages[1] == 2400
    assert averages[2] == 2500
    assert averages[3] == math.inf


def test_timed_result_without_lanes_is_skipped():
    """A timed result without staging contributes nothing."""
    participants = make_participants(2)
    results = [TimedResult(heat_number=1, times_ms={1: 2000, 2: 2100}, timestamp=1)]

    averages = calculate_average_times(participants, results)

    assert averages == {1: math.inf, 2: math.inf}


def test_malformed_lane_keys_are_skipped():
    """Non-numeric lane keys and lanes nobody ran in are ignored."""
    participants = make_participants(2)
    lanes = (LaneAssignment(lane=1, car_number=1, name="Racer 1"),)
    results = [TimedResult(heat_number=1, times_ms={"1": 2000, "x": 10, 2: 50}, lanes=lanes)]

    averages = calculate_average_times(participants, results)

    assert averages[1] == 2000
    assert averages[2] == math.inf


def test_non_numeric_times_are_skipped():
    """Times that are not finite numbers are ignored, numeric strings count."""
    participants = make_participants(3)
    lanes = tuple(LaneAssignment(lane=n, car_number=n, name=f"Racer {n}") for n in (1, 2, 3))
    results = [
        TimedResult(heat_number=1, times_ms={"1": "fast", "2": 2400, "3": float("nan")}, lanes=lanes),
        TimedResult(heat_number=2, times_ms={"1": "2500", "3": [1]}, lanes=lanes),
    ]

    averages = calculate_average_times(participants, results)

    assert averages == {1: 2500, 2: 2400, 3: math.inf}
    assert [p.car_number for p in group_by_speed(participants, results, 2)[0]] == [2, 1]


def test_manual_rank_proxy():
    """Manual places become place * 1000 synthetic milliseconds."""
    assert MANUAL_PLACE_MS == 1000

    participants = make_participants(3)
    averages = calculate_average_times(participants, [ranked(1, [3, 1, 2])])

    assert averages == {3: 1000, 1: 2000, 2: 3000}


def test_manual_rank_proxy_mixed_with_timing():
    """
    Flags the proxy scaling: a second place by hand (2000) beats a real
    2400 ms run, so mixed result kinds rank hand-entered cars as faster.
    """
    participants = make_participants(4)
    results = [
        timed(1, [1, 2], [2500, 2400]),
        ranked(2, [3, 4]),
    ]

    groups = group_by_speed(participants, results, 2)

    assert [[p.car_number for p in group] for group in groups] == [[3, 4], [2, 1]]


def test_unknown_cars_are_ignored():
    """Results for cars not on the roster do not appear."""
    participants = make_participants(2)
    averages = calculate_average_times(participants, [ranked(1, [9, 1, 2])])

    assert set(averages) == {1, 2}
    assert averages[1] == 2000


def test_accepted_results_keeps_latest_per_heat():
    """Only the latest result of a heat counts."""
    first = timed(1, [1, 2], [3000, 3100], timestamp=10)
    rerun = timed(1, [1, 2], [2000, 2100], timestamp=20)
    other = ranked(2, [2, 1], timestamp=5)

    accepted = accepted_results([rerun, other, first])

    assert accepted == [rerun, other]

    averages = calculate_average_times(make_participants(2), [first, rerun])
    assert averages == {1: 2000, 2: 2100}


def test_group_by_speed_tiers():
    """Fastest first, ties by car number, last tier may be smaller."""
    participants = make_participants(5)
    results = [
        timed(1, [1, 2, 3], [2500, 2000, 2500]),
    ]

    groups = group_by_speed(participants, results, 2)

    # Car 2 fastest, cars 1 and 3 tie, cars 4 and 5 have no data
    assert [[p.car_number for p in group] for group in groups] == [[2, 1], [3, 4], [5]]


def test_group_by_speed_no_data_orders_by_car_number():
    participants = list(reversed(make_participants(4)))
    groups = group_by_speed(participants, [], 4)

    assert [p.car_number for p in groups[0]] == [1, 2, 3, 4]
