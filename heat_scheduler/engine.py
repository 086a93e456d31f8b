"""
Core scheduling engine: algorithm selection, schedule generation and validation.
"""

import logging
from typing import List, Dict, Optional, Union, Any, Sequence, Iterable
from .models import Algorithm, Participant, Heat, Schedule, ScheduleMetadata, RaceResult
from .config import ScheduleOptions, resolve_options
from .circle import is_known_solvable, circle_method
from .speed import group_by_speed
from .greedy import greedy_heuristic
from .lanes import build_lane_usage_matrix, get_lane_spread

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = 2
MIN_LANES = 2


class InsufficientParticipants(ValueError):
    """Raised when a schedule is requested for fewer than two participants."""


def require_participants(participants: Sequence[Participant]) -> None:
    if participants is None or len(participants) < MIN_PARTICIPANTS:
        raise InsufficientParticipants(
            f"Cannot generate schedule: at least {MIN_PARTICIPANTS} participants required"
        )


def select_algorithm(participant_count: int, lane_count: int,
                     results: Optional[Iterable[RaceResult]] = None,
                     options: Optional[Union[ScheduleOptions, Dict[str, Any]]] = None) -> Algorithm:
    """
    Choose the scheduling strategy.

    Args:
        participant_count: Number of participants
        lane_count: Number of lanes
        results: Accepted heat results so far
        options: Scheduling options

    Returns:
        Algorithm: circle method when perfectly solvable without results,
        speed-matched greedy when results exist and speed matching is on,
        plain greedy otherwise
    """
    has_results = bool(list(results or []))
    speed_matching = resolve_options(options).speed_matching

    if not has_results and is_known_solvable(participant_count, lane_count):
        return Algorithm.CIRCLE_METHOD

    if has_results and speed_matching:
        return Algorithm.SPEED_MATCHED_GREEDY

    return Algorithm.GREEDY_HEURISTIC


def build_metadata(heats: Sequence[Heat], algorithm: Algorithm) -> ScheduleMetadata:
    """Describe a list of heats produced by ``algorithm``."""
    return ScheduleMetadata(
        algorithm_used=algorithm,
        total_heats=len(heats),
        cars_per_heat=tuple(len(heat.lanes) for heat in heats),
        lane_balance_perfect=algorithm == Algorithm.CIRCLE_METHOD,
        speed_matched=algorithm == Algorithm.SPEED_MATCHED_GREEDY,
    )


def generate_schedule(participants: List[Participant], lane_count: int,
                      results: Optional[Sequence[RaceResult]] = None,
                      options: Optional[Union[ScheduleOptions, Dict[str, Any]]] = None) -> Schedule:
    """
    Generate a complete heat schedule.

    Args:
        participants: Roster in scheduling order
        lane_count: Number of lanes on the track
        results: Accepted heat results, if any
        options: Scheduling options

    Returns:
        Schedule: Heats numbered from 1 plus metadata

    Raises:
        InsufficientParticipants: Fewer than two participants
        ValueError: Fewer than two lanes
    """
    require_participants(participants)
    if lane_count < MIN_LANES:
        raise ValueError(f"Cannot generate schedule: at least {MIN_LANES} lanes required, got {lane_count}")
    results = list(results or [])

    algorithm = select_algorithm(len(participants), lane_count, results, options)
    logger.debug("Scheduling %d participants on %d lanes with %s",
                 len(participants), lane_count, algorithm.value)

    if algorithm == Algorithm.CIRCLE_METHOD:
        heats = circle_method(participants, lane_count)
    elif algorithm == Algorithm.SPEED_MATCHED_GREEDY:
        groups = group_by_speed(participants, results, lane_count)
        heats = greedy_heuristic(participants, lane_count, groups)
    else:
        heats = greedy_heuristic(participants, lane_count)

    return Schedule(heats=tuple(heats), metadata=build_metadata(heats, algorithm))


def validate_lane_balance(schedule: Schedule) -> Dict[str, Any]:
    """
    Audit per-car lane usage of a schedule.

    The allowed spread between a car's most and least used lane is 0 for
    circle method schedules and 1 otherwise. Lanes a car never ran are not
    counted. Never raises.

    Args:
        schedule: Schedule to audit

    Returns:
        Dict[str, Any]: ``{'valid': bool, 'errors': List[str]}``
    """
    errors: List[str] = []
    try:
        is_perfect = schedule.metadata.algorithm_used == Algorithm.CIRCLE_METHOD
        max_diff = 0 if is_perfect else 1

        matrix = build_lane_usage_matrix(schedule.heats)
        for car_number in sorted(matrix):
            counts = matrix[car_number].values()
            spread = get_lane_spread(matrix[car_number])
            if spread > max_diff:
                errors.append(
                    f"Car {car_number}: lane imbalance {max(counts)} - {min(counts)} = {spread}"
                    + (" (expected perfect balance)" if is_perfect else f" (max allowed: {max_diff})")
                )
    except (AttributeError, TypeError) as e:
        errors.append(f"Schedule could not be audited: {e}")

    return {'valid': not errors, 'errors': errors}


def validate_schedule(schedule: Schedule, lane_count: Optional[int] = None) -> Dict[str, List[str]]:
    """
    Validate the structure of a schedule.

    Args:
        schedule: Schedule to validate
        lane_count: Lanes on the track, enables lane range checks

    Returns:
        Dict[str, List[str]]: Validation results
    """
    violations = {
        'errors': [],
        'warnings': []
    }

    if not schedule.heats:
        violations['errors'].append("No heats scheduled")
        return violations

    for heat in schedule.heats:
        cars = heat.car_numbers
        if len(cars) != len(set(cars)):
            violations['errors'].append(f"Heat {heat.heat_number} has a car in more than one lane")

        lanes = [entry.lane for entry in heat.lanes]
        if len(lanes) != len(set(lanes)):
            violations['errors'].append(f"Heat {heat.heat_number} has a lane used twice")

        if not heat.catch_up and len(cars) < MIN_PARTICIPANTS:
            violations['errors'].append(f"Heat {heat.heat_number} has only {len(cars)} car(s)")

        if lane_count is not None:
            if len(cars) > lane_count:
                violations['errors'].append(
                    f"Heat {heat.heat_number} has {len(cars)} cars for {lane_count} lanes"
                )
            out_of_range = [lane for lane in lanes if lane < 1 or lane > lane_count]
            if out_of_range:
                violations['errors'].append(
                    f"Heat {heat.heat_number} uses lanes outside 1-{lane_count}: {out_of_range}"
                )

    numbers = [heat.heat_number for heat in schedule.heats]
    expected = list(range(numbers[0], numbers[0] + len(numbers)))
    if numbers != expected or numbers[0] != 1:
        violations['errors'].append("Heat numbers are not contiguous from 1")

    if schedule.metadata.total_heats != len(schedule.heats):
        violations['warnings'].append(
            f"Metadata reports {schedule.metadata.total_heats} heats, schedule has {len(schedule.heats)}"
        )

    return violations
