"""
Speed estimation and speed-tier grouping from prior heat results.
"""

import logging
import math
from typing import List, Dict, Iterable
from .models import Participant, RaceResult, TimedResult, RankedResult

logger = logging.getLogger(__name__)

# Synthetic milliseconds per finishing place for hand-entered rankings.
# Kept as is: changing it shifts tiering whenever timed and ranked results mix.
MANUAL_PLACE_MS = 1000


def accepted_results(results: Iterable[RaceResult]) -> List[RaceResult]:
    """
    Keep only the latest result for each heat.

    Args:
        results: Results in arrival order, possibly several per heat

    Returns:
        List[RaceResult]: One result per heat, ordered by heat number
    """
    by_heat: Dict[int, RaceResult] = {}
    for result in results:
        current = by_heat.get(result.heat_number)
        if current is None or result.timestamp > current.timestamp:
            by_heat[result.heat_number] = result
    return [by_heat[heat_number] for heat_number in sorted(by_heat)]


def _timed_contributions(result: TimedResult) -> List[tuple]:
    """(car_number, ms) pairs of a timed result, empty when staging is missing."""
    if not result.lanes:
        return []

    car_by_lane = {entry.lane: entry.car_number for entry in result.lanes}
    contributions = []
    for lane_key, time_ms in result.times_ms.items():
        try:
            lane = int(lane_key)
        except (TypeError, ValueError):
            continue
        car_number = car_by_lane.get(lane)
        if car_number is None or time_ms is None:
            continue
        try:
            time_ms = float(time_ms)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(time_ms):
            continue
        contributions.append((car_number, time_ms))
    return contributions


def calculate_average_times(participants: List[Participant], results: Iterable[RaceResult]) -> Dict[int, float]:
    """
    Average race time per participant.

    Timed results contribute lane times; ranked results contribute
    ``place * MANUAL_PLACE_MS``. Cars not on the roster are ignored.

    Args:
        participants: Roster
        results: Heat results

    Returns:
        Dict[int, float]: car_number -> mean time in ms, ``math.inf`` without data
    """
    totals = {p.car_number: 0.0 for p in participants}
    counts = {p.car_number: 0 for p in participants}

    for result in accepted_results(results):
        if isinstance(result, TimedResult):
            contributions = _timed_contributions(result)
            if not contributions:
                logger.debug("Skipping timed result for heat %s: no usable lane staging", result.heat_number)
        elif isinstance(result, RankedResult):
            contributions = [(r.car_number, r.place * MANUAL_PLACE_MS) for r in result.rankings]
        else:
            continue

        for car_number, time_ms in contributions:
            if car_number in totals:
                totals[car_number] += time_ms
                counts[car_number] += 1

    return {
        car_number: totals[car_number] / counts[car_number] if counts[car_number] else math.inf
        for car_number in totals
    }


def group_by_speed(participants: List[Participant], results: Iterable[RaceResult], lane_count: int) -> List[List[Participant]]:
    """
    Partition participants into speed tiers of at most ``lane_count`` cars.

    Args:
        participants: Roster
        results: Heat results
        lane_count: Tier size

    Returns:
        List[List[Participant]]: Tiers, fastest first
    """
    averages = calculate_average_times(participants, results)
    ordered = sorted(participants, key=lambda p: (averages[p.car_number], p.car_number))

    groups = [ordered[i:i + lane_count] for i in range(0, len(ordered), lane_count)]
    logger.debug("Built %d speed tiers of up to %d cars", len(groups), lane_count)
    return groups
