"""
Greedy heat composition with exact lane assignment.
"""

import logging
from typing import List, Dict, Optional
from .models import Participant, LaneAssignment, Heat

logger = logging.getLogger(__name__)

# Lane search explores effective_lanes! permutations in the worst case
MAX_SEARCH_LANES = 10
DEFAULT_SEARCH_BUDGET = 500_000


def select_cars_for_heat(pool: List[Participant], heats_run: Dict[int, int], max_cars: int) -> List[Participant]:
    """
    Pick the cars most in need of another race.

    Args:
        pool: Candidate participants
        heats_run: car_number -> heats raced so far
        max_cars: Maximum cars in the heat

    Returns:
        List[Participant]: Fewest heats first, ties by car number
    """
    ordered = sorted(pool, key=lambda p: (heats_run.get(p.car_number, 0), p.car_number))
    return ordered[:max_cars]


def _imbalance_after(lane_counts: Dict[int, int], lane: int, effective_lanes: int) -> int:
    """Spread of one car's lane usage if it runs ``lane`` next."""
    highest = 0
    lowest = None
    for candidate in range(1, effective_lanes + 1):
        usage = lane_counts.get(candidate, 0) + (1 if candidate == lane else 0)
        highest = max(highest, usage)
        lowest = usage if lowest is None else min(lowest, usage)
    return highest - (lowest or 0)


def assign_lanes_balanced(cars: List[Participant], lane_usage: Dict[int, Dict[int, int]],
                          effective_lanes: int, search_budget: int = DEFAULT_SEARCH_BUDGET) -> List[LaneAssignment]:
    """
    Assign the selected cars to distinct lanes, minimising the worst lane spread.

    Backtracking over cars in input order and lanes in ascending order. A
    branch is cut once the cars already placed are at least as imbalanced
    as the best complete assignment. The first best assignment found wins.

    Args:
        cars: Cars racing this heat
        lane_usage: car_number -> {lane: count} before this heat
        effective_lanes: Lanes available (1..effective_lanes)
        search_budget: Nodes to visit before settling for the best found

    Returns:
        List[LaneAssignment]: One entry per car, in the order of ``cars``
    """
    n_cars = len(cars)
    if n_cars == 0:
        return []
    if n_cars > effective_lanes:
        raise ValueError(f"Cannot place {n_cars} cars in {effective_lanes} lanes")
    if effective_lanes > MAX_SEARCH_LANES:
        logger.warning("Lane search over %d lanes may be slow (limit %d), relying on search budget",
                       effective_lanes, MAX_SEARCH_LANES)

    # spread[i][lane - 1]: spread for car i if it takes that lane
    spread = [
        [_imbalance_after(lane_usage.get(car.car_number, {}), lane, effective_lanes)
         for lane in range(1, effective_lanes + 1)]
        for car in cars
    ]

    best_assignment: List[int] = []
    best_score: Optional[int] = None
    current = [0] * n_cars
    used = set()
    visited = 0

    def search(idx: int, partial: int) -> None:
        nonlocal best_assignment, best_score, visited

        if idx == n_cars:
            if best_score is None or partial < best_score:
                best_score = partial
                best_assignment = list(current)
            return

        if idx > 0 and best_score is not None and partial >= best_score:
            return

        for lane in range(1, effective_lanes + 1):
            if visited >= search_budget and best_score is not None:
                return
            if lane in used:
                continue
            visited += 1
            current[idx] = lane
            used.add(lane)
            search(idx + 1, max(partial, spread[idx][lane - 1]))
            used.discard(lane)

    search(0, 0)

    if visited >= search_budget:
        logger.warning("Lane search budget of %d nodes exhausted, using best assignment found (spread %s)",
                       search_budget, best_score)

    return [
        LaneAssignment(lane=best_assignment[i], car_number=car.car_number, name=car.name)
        for i, car in enumerate(cars)
    ]


class GreedyEngine:
    """Schedules one pool of participants heat by heat."""

    def __init__(self, pool: List[Participant], lane_count: int, search_budget: int = DEFAULT_SEARCH_BUDGET):
        self.pool = list(pool)
        self.effective_lanes = min(lane_count, len(self.pool))
        self.target_heats = len(self.pool)
        self.search_budget = search_budget

        self.lane_usage: Dict[int, Dict[int, int]] = {
            p.car_number: {lane: 0 for lane in range(1, self.effective_lanes + 1)}
            for p in self.pool
        }
        self.heats_run: Dict[int, int] = {p.car_number: 0 for p in self.pool}

    def schedule(self, first_heat_number: int = 1) -> List[Heat]:
        """
        Produce up to ``target_heats`` heats for this pool.

        Args:
            first_heat_number: Number given to the first heat produced

        Returns:
            List[Heat]: Heats numbered contiguously from ``first_heat_number``
        """
        heats = []

        for _ in range(self.target_heats):
            cars = select_cars_for_heat(self.pool, self.heats_run, self.effective_lanes)
            if len(cars) < 2:
                logger.debug("Dropping heat with %d car(s) from pool of %d", len(cars), len(self.pool))
                continue

            entries = assign_lanes_balanced(cars, self.lane_usage, self.effective_lanes, self.search_budget)
            self._update_usage(entries)

            entries.sort(key=lambda x: x.lane)
            heats.append(Heat(heat_number=first_heat_number + len(heats), lanes=tuple(entries)))

        return heats

    def _update_usage(self, entries: List[LaneAssignment]) -> None:
        """Record lane usage and race counts after a heat."""
        for entry in entries:
            self.lane_usage[entry.car_number][entry.lane] += 1
            self.heats_run[entry.car_number] += 1


def greedy_heuristic(participants: List[Participant], lane_count: int,
                     speed_groups: Optional[List[List[Participant]]] = None,
                     search_budget: int = DEFAULT_SEARCH_BUDGET) -> List[Heat]:
    """
    Convenience function to run the greedy engine.

    Args:
        participants: Roster
        lane_count: Number of lanes on the track
        speed_groups: Optional speed tiers, each scheduled independently
        search_budget: Lane search node budget per heat

    Returns:
        List[Heat]: Heats numbered from 1, tier by tier when grouped
    """
    pools = speed_groups if speed_groups is not None else [participants]

    heats: List[Heat] = []
    for pool in pools:
        engine = GreedyEngine(pool, lane_count, search_budget)
        heats.extend(engine.schedule(first_heat_number=len(heats) + 1))

    return heats
