"""
Circle method scheduling for rosters where perfect lane balance is constructible.
"""

from typing import List
from .models import Participant, LaneAssignment, Heat


# Roster sizes with a known perfectly balanced cyclic schedule
KNOWN_SOLVABLE = frozenset({6, 7, 8, 12, 16, 18, 24, 32})


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def is_known_solvable(participant_count: int, lane_count: int) -> bool:
    """
    Check whether a perfectly lane-balanced cyclic schedule exists.

    Args:
        participant_count: Number of participants (N)
        lane_count: Number of lanes (L)

    Returns:
        bool: True if N is curated, a power of two, or N is L or L + 1
    """
    if participant_count in KNOWN_SOLVABLE:
        return True
    if is_power_of_two(participant_count):
        return True
    return participant_count in (lane_count, lane_count + 1)


def circle_method(participants: List[Participant], lane_count: int) -> List[Heat]:
    """
    Generate heats using the cyclic offset construction.

    Heat ``h`` puts participant ``(h + l) mod N`` in lane ``l + 1``, so over
    N heats every participant runs each lane exactly once. Solvability is
    not re-checked here.

    Args:
        participants: Roster in scheduling order
        lane_count: Number of lanes on the track

    Returns:
        List[Heat]: Exactly N heats, numbered from 1
    """
    n_participants = len(participants)
    n_lanes = min(lane_count, n_participants)

    heats = []
    for h in range(n_participants):
        lanes = []
        for lane in range(n_lanes):
            participant = participants[(h + lane) % n_participants]
            lanes.append(LaneAssignment(
                lane=lane + 1,
                car_number=participant.car_number,
                name=participant.name
            ))
        heats.append(Heat(heat_number=h + 1, lanes=tuple(lanes)))

    return heats
